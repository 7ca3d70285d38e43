"""User management commands."""

import click

from cartsync.cli.error_handling import handle_domain_error
from cartsync.cli.user_resolution import resolve_user_or_exit
from cartsync.domain.entities import UserRole
from cartsync.domain.errors import DomainError
from cartsync.domain.users import UserService


@click.group("user")
def user_group():
    """Manage cart staff."""
    pass


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"])

    users = service.list_users()
    if not users:
        click.echo("No users found. Run 'cartsync init' first.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 70)
    for u in users:
        click.echo(f"{u.name:25s} | {u.role:18s} | {u.sync_status.value:7s} | {u.id}")


@user_group.command("add")
@click.argument("name")
@click.option("--pin", required=True, help="Login PIN (4-12 digits)")
@click.option(
    "--role",
    type=click.Choice([r.value for r in UserRole]),
    default=UserRole.INVENTORY_CLERK.value,
    show_default=True,
)
@click.pass_context
def add_user(ctx, name: str, pin: str, role: str):
    """Add a user.

    Examples:
        cartsync user add "Maria" --pin 4821 --role operation_manager
    """
    service = UserService(ctx.obj["db"])
    try:
        user = service.create_user(name=name, pin=pin, role=role)
        click.echo(f"Created user '{user.name}' (ID: {user.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@user_group.command("rename")
@click.argument("new_name")
@click.option("--pin", required=True, help="PIN of the user to rename")
@click.option("--bio", help="New bio")
@click.pass_context
def rename_user(ctx, new_name: str, pin: str, bio: str | None):
    """Change a user's display name (and optionally bio)."""
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, pin)
    try:
        updated = service.update_profile(user.id, name=new_name, bio=bio)
        click.echo(f"Renamed user to '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@user_group.command("change-pin")
@click.option("--pin", required=True, help="Current PIN")
@click.option("--new-pin", required=True, help="New PIN (4-12 digits)")
@click.pass_context
def change_pin(ctx, pin: str, new_pin: str):
    """Change a user's login PIN."""
    service = UserService(ctx.obj["db"])
    user = resolve_user_or_exit(ctx, service, pin)
    try:
        service.change_pin(user.id, new_pin)
        click.echo(f"PIN changed for '{user.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group)
