"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the ORM schema can evolve
without touching the reconciliation code that works on domain entities.
"""

from dataclasses import fields
from typing import Any

from cartsync.domain import entities as domain
from cartsync.domain.entities import SyncStatus
from cartsync.database.models import (
    User as ORMUser,
    Category as ORMCategory,
    InventoryItem as ORMInventoryItem,
    Sale as ORMSale,
    Expense as ORMExpense,
    Activity as ORMActivity,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        name=orm_user.name,
        pin=orm_user.pin,
        role=orm_user.role,
        bio=orm_user.bio,
        profile_picture=orm_user.profile_picture,
        created_at=orm_user.created_at,
        updated_at=orm_user.updated_at,
        sync_status=SyncStatus(orm_user.sync_status),
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        created_at=orm_category.created_at,
        updated_at=orm_category.updated_at,
        sync_status=SyncStatus(orm_category.sync_status),
    )


def inventory_item_to_domain(orm_item: ORMInventoryItem) -> domain.InventoryItem:
    """Convert SQLAlchemy InventoryItem model to domain InventoryItem entity."""
    return domain.InventoryItem(
        id=orm_item.id,
        name=orm_item.name,
        category_id=orm_item.category_id,
        unit=orm_item.unit,
        price=orm_item.price,
        quantity=orm_item.quantity,
        created_by=orm_item.created_by,
        created_at=orm_item.created_at,
        updated_at=orm_item.updated_at,
        sync_status=SyncStatus(orm_item.sync_status),
    )


def sale_to_domain(orm_sale: ORMSale) -> domain.Sale:
    """Convert SQLAlchemy Sale model to domain Sale entity."""
    return domain.Sale(
        id=orm_sale.id,
        name=orm_sale.name,
        total=orm_sale.total,
        date=orm_sale.date,
        created_by=orm_sale.created_by,
        created_at=orm_sale.created_at,
        updated_at=orm_sale.updated_at,
        sync_status=SyncStatus(orm_sale.sync_status),
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.Expense:
    """Convert SQLAlchemy Expense model to domain Expense entity."""
    return domain.Expense(
        id=orm_expense.id,
        name=orm_expense.name,
        total=orm_expense.total,
        date=orm_expense.date,
        created_by=orm_expense.created_by,
        created_at=orm_expense.created_at,
        updated_at=orm_expense.updated_at,
        sync_status=SyncStatus(orm_expense.sync_status),
    )


def activity_to_domain(orm_activity: ORMActivity) -> domain.Activity:
    """Convert SQLAlchemy Activity model to domain Activity entity."""
    return domain.Activity(
        id=orm_activity.id,
        type=orm_activity.type,
        description=orm_activity.description,
        user_id=orm_activity.user_id,
        created_at=orm_activity.created_at,
        updated_at=orm_activity.updated_at,
        sync_status=SyncStatus(orm_activity.sync_status),
    )


def domain_to_columns(record: Any) -> dict[str, Any]:
    """Flatten a domain entity into ORM column values.

    Domain field names match column names one to one; only the sync status
    enum needs unwrapping.
    """
    values = {f.name: getattr(record, f.name) for f in fields(record)}
    values["sync_status"] = SyncStatus(values["sync_status"]).value
    return values
