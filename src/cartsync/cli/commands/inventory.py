"""Inventory commands."""

import click

from cartsync.cli.error_handling import handle_domain_error
from cartsync.cli.user_resolution import resolve_user_or_exit
from cartsync.domain.categories import CategoryService
from cartsync.domain.entities import UNITS
from cartsync.domain.errors import DomainError, category_name_not_found
from cartsync.domain.inventory import InventoryService
from cartsync.domain.users import UserService
from cartsync.utils.amount_parser import parse_amount, parse_quantity


@click.group("inventory")
def inventory_group():
    """Manage stock items."""
    pass


def _category_id_or_exit(ctx, store, name: str | None) -> str | None:
    if name is None:
        return None
    category = CategoryService(store).get_category_by_name(name)
    if category is None:
        click.echo(f"Error: {category_name_not_found(name)}", err=True)
        ctx.exit(1)
    return category.id


@inventory_group.command("list")
@click.option("--category", help="Only items in this category")
@click.pass_context
def list_items(ctx, category: str | None):
    """List stock items."""
    store = ctx.obj["db"]
    category_id = _category_id_or_exit(ctx, store, category)
    names = {c.id: c.name for c in CategoryService(store).list_categories()}

    items = InventoryService(store).list_items(category_id=category_id)
    if not items:
        click.echo("No items found.")
        return

    for item in items:
        cat = names.get(item.category_id, "-")
        click.echo(
            f"{item.name:25s} | {cat:15s} | {item.quantity:>9} {item.unit:6s} | "
            f"{item.price:>9.2f} | {item.id}"
        )


@inventory_group.command("add")
@click.argument("name")
@click.option("--unit", type=click.Choice(UNITS), default="pcs", show_default=True)
@click.option("--price", required=True, help="Unit price (e.g., 25, ₱1,250.50)")
@click.option("--quantity", required=True, help="Quantity on hand")
@click.option("--category", help="Category name")
@click.option("--pin", required=True, help="PIN of the user adding the item")
@click.pass_context
def add_item(ctx, name: str, unit: str, price: str, quantity: str, category: str | None, pin: str):
    """Add a stock item.

    Examples:
        cartsync inventory add "Hotdog" --price 25 --quantity 40 --category Freezer --pin 1234
    """
    store = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(store), pin)
    category_id = _category_id_or_exit(ctx, store, category)
    try:
        item = InventoryService(store).add_item(
            name=name,
            unit=unit,
            price=parse_amount(price),
            quantity=parse_quantity(quantity),
            created_by=user.id,
            category_id=category_id,
        )
        click.echo(f"Added '{item.name}' (ID: {item.id})")
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)


@inventory_group.command("update")
@click.argument("item_id")
@click.option("--name", help="New name")
@click.option("--unit", type=click.Choice(UNITS), help="New unit")
@click.option("--price", help="New unit price")
@click.option("--quantity", help="New quantity")
@click.option("--category", help="New category name")
@click.option("--uncategorize", is_flag=True, help="Remove the item from its category")
@click.option("--pin", required=True, help="PIN of the user making the change")
@click.pass_context
def update_item(
    ctx,
    item_id: str,
    name: str | None,
    unit: str | None,
    price: str | None,
    quantity: str | None,
    category: str | None,
    uncategorize: bool,
    pin: str,
):
    """Update a stock item."""
    store = ctx.obj["db"]
    if category and uncategorize:
        click.echo("Error: --category cannot be combined with --uncategorize.", err=True)
        ctx.exit(1)
    user = resolve_user_or_exit(ctx, UserService(store), pin)

    changes = {}
    if category is not None:
        changes["category_id"] = _category_id_or_exit(ctx, store, category)
    elif uncategorize:
        changes["category_id"] = None
    try:
        if price is not None:
            changes["price"] = parse_amount(price)
        if quantity is not None:
            changes["quantity"] = parse_quantity(quantity)
        item = InventoryService(store).update_item(item_id, user.id, name=name, unit=unit, **changes)
        click.echo(f"Updated '{item.name}'")
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)


@inventory_group.command("delete")
@click.argument("item_id")
@click.option("--pin", required=True, help="PIN of the user deleting the item")
@click.pass_context
def delete_item(ctx, item_id: str, pin: str):
    """Delete a stock item."""
    store = ctx.obj["db"]
    user = resolve_user_or_exit(ctx, UserService(store), pin)
    try:
        InventoryService(store).delete_item(item_id, user.id)
        click.echo(f"Deleted item {item_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register inventory commands with main CLI."""
    cli.add_command(inventory_group)
