"""Initialize a fresh device database."""

import click

from cartsync.domain.seed import seed_default_data


@click.command("init")
@click.pass_context
def init(ctx):
    """Seed the default users and categories on a fresh database."""
    store = ctx.obj["db"]
    if seed_default_data(store):
        click.echo("Seeded default users and categories.")
        click.echo("Run 'cartsync sync run' once online to link them with the server.")
    else:
        click.echo("Database already initialized.")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init)
