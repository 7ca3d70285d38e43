"""Activity feed commands."""

import click

from cartsync.domain.activities import ActivityService
from cartsync.domain.users import UserService


@click.group("activity")
def activity_group():
    """Review the activity feed."""
    pass


@activity_group.command("list")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.pass_context
def list_activities(ctx, limit: int):
    """Show the most recent activities."""
    store = ctx.obj["db"]
    activities = ActivityService(store).list_recent(limit=limit)
    if not activities:
        click.echo("No activity yet.")
        return

    names = {u.id: u.name for u in UserService(store).list_users()}
    for a in activities:
        who = names.get(a.user_id, "unknown user")
        click.echo(f"{a.created_at[:19]} | {who:20s} | {a.description}")


def register_commands(cli):
    """Register activity commands with main CLI."""
    cli.add_command(activity_group)
