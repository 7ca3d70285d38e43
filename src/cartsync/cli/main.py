"""Main CLI entry point."""

import logging

import click

from cartsync.config import SyncSettings
from cartsync.database.factories import create_sqlite_store

# Import and register all commands at module level
from cartsync.cli.commands import (
    activity,
    category,
    init,
    inventory,
    ledger,
    sync,
    user,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CARTSYNC_DB_PATH environment variable)",
    envvar="CARTSYNC_DB_PATH",
)
@click.option("--supabase-url", help="Remote project URL (overrides CARTSYNC_SUPABASE_URL)")
@click.option("--supabase-key", help="Remote project API key (overrides CARTSYNC_SUPABASE_KEY)")
@click.option("--fallback-pin", help="PIN of the user that inherits orphaned records")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx,
    db_path: str | None,
    supabase_url: str | None,
    supabase_key: str | None,
    fallback_pin: str | None,
    verbose: bool,
):
    """Cartsync - food cart point of sale with offline-first sync.

    Record sales, expenses and stock on the device; `cartsync sync run`
    reconciles everything with the remote backend when online.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = SyncSettings.from_env().with_overrides(
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            fallback_pin=fallback_pin,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    ctx.obj["settings"] = settings

    # Open the store only when actually running a command (not for --help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["db"] = store
        ctx.call_on_close(store.disconnect)


# Register all commands
init.register_commands(cli)
user.register_commands(cli)
category.register_commands(cli)
inventory.register_commands(cli)
ledger.register_commands(cli)
activity.register_commands(cli)
sync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
