"""Category management commands."""

import click

from cartsync.cli.error_handling import handle_domain_error
from cartsync.domain.categories import CategoryService
from cartsync.domain.errors import DomainError, category_name_not_found


@click.group("category")
def category_group():
    """Manage inventory categories."""
    pass


def _resolve_category_or_exit(ctx, service: CategoryService, name: str):
    category = service.get_category_by_name(name)
    if category is None:
        category = service.get_category(name)
    if category is None:
        click.echo(f"Error: {category_name_not_found(name)}", err=True)
        ctx.exit(1)
    return category


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories with their item counts."""
    store = ctx.obj["db"]
    service = CategoryService(store)

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found.")
        return

    for cat in categories:
        count = store.count_items_in_category(cat.id)
        click.echo(f"{cat.name:25s} | {count:4d} item(s) | {cat.sync_status.value}")


@category_group.command("create")
@click.argument("name")
@click.pass_context
def create_category(ctx, name: str):
    """Create a category."""
    service = CategoryService(ctx.obj["db"])
    try:
        category = service.create_category(name)
        click.echo(f"Created category '{category.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("rename")
@click.argument("category")
@click.argument("new_name")
@click.pass_context
def rename_category(ctx, category: str, new_name: str):
    """Rename a category.

    CATEGORY can be the category's name or ID.
    """
    service = CategoryService(ctx.obj["db"])
    existing = _resolve_category_or_exit(ctx, service, category)
    try:
        updated = service.rename_category(existing.id, new_name)
        click.echo(f"Renamed category to '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_category(ctx, category: str, yes: bool):
    """Delete a category. Its items become uncategorized."""
    service = CategoryService(ctx.obj["db"])
    existing = _resolve_category_or_exit(ctx, service, category)

    if not yes and not click.confirm(f"Are you sure you want to delete category '{existing.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        detached = service.delete_category(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category '{existing.name}'")
    if detached:
        click.echo(f"{detached} item(s) are now uncategorized")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group)
