"""CLI helpers for resolving the acting user."""

from __future__ import annotations

import click

from cartsync.domain.entities import User
from cartsync.domain.users import UserService


def resolve_user_or_exit(ctx: click.Context, user_service: UserService, pin: str) -> User:
    """Return the user owning ``pin``, or exit with a CLI error.

    Every mutating command is performed "as" a user, the same way the app
    records who is logged in.
    """
    user = user_service.authenticate(pin)
    if user is None:
        click.echo("Error: No user with that PIN", err=True)
        ctx.exit(1)
    return user
