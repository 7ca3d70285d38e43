"""Typed descriptors for the six synchronized tables.

Each descriptor binds a table to its entity type and to the functions that
translate between domain entities and remote rows. The reconciliation engine
loops over ``TABLE_SPECS`` instead of dispatching on table-name strings.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from cartsync.domain.entities import (
    Activity,
    Category,
    Expense,
    InventoryItem,
    Sale,
    SyncStatus,
    Table,
    User,
)


@dataclass(frozen=True)
class TableSpec:
    """How one table round-trips through the remote store."""

    table: Table
    entity: type
    encode: Callable[[Any], dict[str, Any]]
    decode: Callable[[dict[str, Any]], Any]
    # Pull ordering/limit applied by the remote (None = whole table)
    order_by: Optional[str] = None
    limit: Optional[int] = None

    @property
    def name(self) -> str:
        return self.table.value


def _required(row: dict[str, Any], key: str) -> Any:
    value = row.get(key)
    if value is None:
        raise ValueError(f"Remote row {row.get('id')!r} is missing '{key}'")
    return value


def _decimal(row: dict[str, Any], key: str) -> Decimal:
    value = _required(row, key)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Remote row {row.get('id')!r} has non-numeric '{key}': {value!r}")


def _day(row: dict[str, Any], key: str) -> date:
    value = str(_required(row, key))
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValueError(f"Remote row {row.get('id')!r} has invalid '{key}': {value!r}")


def _updated_at(row: dict[str, Any]) -> str:
    return row.get("updated_at") or _required(row, "created_at")


# Users
def encode_user(user: User) -> dict[str, Any]:
    # profile pictures stay on the device
    return {
        "id": user.id,
        "name": user.name,
        "pin": user.pin,
        "role": user.role,
        "bio": user.bio,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def decode_user(row: dict[str, Any]) -> User:
    return User(
        id=str(_required(row, "id")),
        name=row.get("name") or "",
        pin=str(_required(row, "pin")),
        role=_required(row, "role"),
        bio=row.get("bio"),
        created_at=_required(row, "created_at"),
        updated_at=_updated_at(row),
        sync_status=SyncStatus.SYNCED,
    )


# Categories
def encode_category(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def decode_category(row: dict[str, Any]) -> Category:
    return Category(
        id=str(_required(row, "id")),
        name=_required(row, "name"),
        created_at=_required(row, "created_at"),
        updated_at=_updated_at(row),
        sync_status=SyncStatus.SYNCED,
    )


# Inventory
def encode_inventory_item(item: InventoryItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "category_id": item.category_id,
        "unit": item.unit,
        "price": float(item.price),
        "quantity": float(item.quantity),
        "created_by": item.created_by,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


def decode_inventory_item(row: dict[str, Any]) -> InventoryItem:
    return InventoryItem(
        id=str(_required(row, "id")),
        name=_required(row, "name"),
        category_id=row.get("category_id"),
        unit=_required(row, "unit"),
        price=_decimal(row, "price"),
        quantity=_decimal(row, "quantity"),
        created_by=_required(row, "created_by"),
        created_at=_required(row, "created_at"),
        updated_at=_updated_at(row),
        sync_status=SyncStatus.SYNCED,
    )


# Sales and expenses share a row shape
def _encode_ledger_entry(entry: Sale | Expense) -> dict[str, Any]:
    return {
        "id": entry.id,
        "name": entry.name,
        "total": float(entry.total),
        "date": entry.date.isoformat(),
        "created_by": entry.created_by,
        "created_at": entry.created_at,
        "updated_at": entry.updated_at,
    }


def _ledger_fields(row: dict[str, Any]) -> dict[str, Any]:
    return dict(
        id=str(_required(row, "id")),
        name=_required(row, "name"),
        total=_decimal(row, "total"),
        date=_day(row, "date"),
        created_by=_required(row, "created_by"),
        created_at=_required(row, "created_at"),
        updated_at=_updated_at(row),
        sync_status=SyncStatus.SYNCED,
    )


def encode_sale(sale: Sale) -> dict[str, Any]:
    return _encode_ledger_entry(sale)


def decode_sale(row: dict[str, Any]) -> Sale:
    return Sale(**_ledger_fields(row))


def encode_expense(expense: Expense) -> dict[str, Any]:
    return _encode_ledger_entry(expense)


def decode_expense(row: dict[str, Any]) -> Expense:
    return Expense(**_ledger_fields(row))


# Activities (the remote table has no updated_at column)
def encode_activity(activity: Activity) -> dict[str, Any]:
    return {
        "id": activity.id,
        "type": activity.type,
        "description": activity.description,
        "user_id": activity.user_id,
        "created_at": activity.created_at,
    }


def decode_activity(row: dict[str, Any]) -> Activity:
    return Activity(
        id=str(_required(row, "id")),
        type=_required(row, "type"),
        description=row.get("description") or "",
        user_id=_required(row, "user_id"),
        created_at=_required(row, "created_at"),
        updated_at=_updated_at(row),
        sync_status=SyncStatus.SYNCED,
    )


TABLE_SPECS: tuple[TableSpec, ...] = (
    TableSpec(Table.USERS, User, encode_user, decode_user),
    TableSpec(Table.CATEGORIES, Category, encode_category, decode_category),
    TableSpec(Table.INVENTORY, InventoryItem, encode_inventory_item, decode_inventory_item),
    TableSpec(Table.SALES, Sale, encode_sale, decode_sale),
    TableSpec(Table.EXPENSES, Expense, encode_expense, decode_expense),
    TableSpec(
        Table.ACTIVITIES, Activity, encode_activity, decode_activity,
        order_by="created_at.desc", limit=100,
    ),
)

_SPECS_BY_TABLE = {spec.table: spec for spec in TABLE_SPECS}


def spec_for(table: Table) -> TableSpec:
    """Return the descriptor for a table."""
    return _SPECS_BY_TABLE[table]
