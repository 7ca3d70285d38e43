"""Synchronization commands."""

import click

from cartsync.sync.connectivity import ManualConnectivityMonitor, ProbeConnectivityMonitor
from cartsync.sync.engine import SyncEngine, SyncReason
from cartsync.sync.remote import create_remote_store


def build_engine(ctx) -> SyncEngine:
    """Wire a sync engine from the CLI context's store and settings."""
    settings = ctx.obj["settings"]
    remote = create_remote_store(settings)
    if settings.remote_configured:
        monitor = ProbeConnectivityMonitor.for_url(settings.supabase_url, timeout=settings.probe_timeout)
    else:
        monitor = ManualConnectivityMonitor(connected=False)
    return SyncEngine(ctx.obj["db"], remote, monitor, fallback_pin=settings.fallback_pin)


@click.group("sync")
def sync_group():
    """Synchronize with the remote backend."""
    pass


@sync_group.command("run")
@click.option(
    "--reason",
    type=click.Choice([r.value for r in SyncReason]),
    default=SyncReason.MANUAL.value,
    show_default=True,
    help="What triggered this sync",
)
@click.pass_context
def run_sync(ctx, reason: str):
    """Run one full sync cycle."""
    engine = build_engine(ctx)
    result = engine.run_sync(reason)

    if result.pushed:
        pushed = sum(result.pushed.values())
        pulled = sum(result.pulled.values())
        click.echo(f"Pushed {pushed} record(s), merged {pulled} pulled record(s)")
    if result.ok:
        click.echo("Sync complete: everything is up to date.")
        return

    detail = f" ({result.message})" if result.message else ""
    click.echo(f"Sync incomplete{detail}: {result.pending_count} change(s) pending", err=True)
    ctx.exit(1)


@sync_group.command("status")
@click.pass_context
def sync_status(ctx):
    """Show the sync indicator, pending changes and last sync time."""
    settings = ctx.obj["settings"]
    engine = build_engine(ctx)
    engine.monitor.refresh()
    state = engine.current_state()

    click.echo(f"Status:          {state.describe()}")
    click.echo(f"Pending changes: {state.pending_count}")
    click.echo(f"Last sync:       {state.last_sync_time or 'never'}")
    queued = len(ctx.obj["db"].list_pending_deletions())
    if queued:
        click.echo(f"Queued deletes:  {queued}")
    if not settings.remote_configured:
        click.echo("Remote:          not configured (set CARTSYNC_SUPABASE_URL and CARTSYNC_SUPABASE_KEY)")


@sync_group.command("repair")
@click.pass_context
def sync_repair(ctx):
    """Repair duplicate categories and orphaned references without a remote."""
    result = build_engine(ctx).repair_local()
    if result is None:
        click.echo("Error: a sync is in progress", err=True)
        ctx.exit(1)

    click.echo(f"Duplicate categories merged: {result.duplicate_categories_removed}")
    for table, count in sorted(result.orphans.fixed_authors.items(), key=lambda kv: kv[0].value):
        click.echo(f"Orphaned {table.value} reassigned: {count}")
    click.echo(f"Items detached from missing categories: {result.orphans.detached_items}")


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync_group)
