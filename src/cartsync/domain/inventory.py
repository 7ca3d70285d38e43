"""Inventory domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from cartsync.database.base import LocalStore
from cartsync.domain.activities import ActivityService
from cartsync.domain.entities import UNITS, ActivityType, InventoryItem, SyncStatus, Table
from cartsync.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    record_not_found,
    user_not_found,
)
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso

# Sentinel for "leave category unchanged" (None means uncategorized)
_UNCHANGED = object()


class InventoryService:
    """Service for managing stock items."""

    def __init__(self, store: LocalStore):
        """Initialize inventory service.

        Args:
            store: Local record store
        """
        self.store = store
        self.activities = ActivityService(store)

    def _check_user(self, user_id: str) -> None:
        if self.store.get_record(Table.USERS, user_id) is None:
            raise NotFoundError(user_not_found(user_id))

    def _check_category(self, category_id: Optional[str]) -> None:
        if category_id is not None and self.store.get_record(Table.CATEGORIES, category_id) is None:
            raise NotFoundError(category_not_found(category_id))

    @staticmethod
    def _check_values(unit: str, price: Decimal, quantity: Decimal) -> None:
        if unit not in UNITS:
            raise ValidationError(f"Unknown unit '{unit}'. Supported units: {', '.join(UNITS)}")
        if price < 0:
            raise ValidationError("Price cannot be negative")
        if quantity < 0:
            raise ValidationError("Quantity cannot be negative")

    def add_item(
        self,
        name: str,
        unit: str,
        price: Decimal,
        quantity: Decimal,
        created_by: str,
        category_id: Optional[str] = None,
    ) -> InventoryItem:
        """Add a stock item.

        Args:
            name: Item name
            unit: Unit of measure (one of UNITS)
            price: Unit price
            quantity: Quantity on hand
            created_by: User adding the item
            category_id: Optional category

        Returns:
            The new item

        Raises:
            ValidationError: If a value is invalid
            NotFoundError: If the user or category doesn't exist
        """
        name = name.strip()
        if not name:
            raise ValidationError("Item name cannot be empty")
        self._check_values(unit, price, quantity)
        self._check_user(created_by)
        self._check_category(category_id)

        now = now_iso()
        item = InventoryItem(
            id=generate_id(),
            name=name,
            category_id=category_id,
            unit=unit,
            price=price,
            quantity=quantity,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.store.save_record(Table.INVENTORY, item)
        self.activities.record(ActivityType.INVENTORY_ADD, f"Added {quantity} {unit} of {name}", created_by)
        return item

    def get_item(self, item_id: str) -> Optional[InventoryItem]:
        """Get item by ID."""
        return self.store.get_record(Table.INVENTORY, item_id)

    def _require(self, item_id: str) -> InventoryItem:
        item = self.get_item(item_id)
        if item is None:
            raise NotFoundError(record_not_found(Table.INVENTORY.value, item_id))
        return item

    def list_items(self, category_id: Optional[str] = None) -> list[InventoryItem]:
        """List items by name, optionally only those in one category."""
        items = self.store.list_records(Table.INVENTORY)
        if category_id is not None:
            items = [item for item in items if item.category_id == category_id]
        return sorted(items, key=lambda item: item.name.lower())

    def update_item(
        self,
        item_id: str,
        user_id: str,
        name: Optional[str] = None,
        unit: Optional[str] = None,
        price: Optional[Decimal] = None,
        quantity: Optional[Decimal] = None,
        category_id=_UNCHANGED,
    ) -> InventoryItem:
        """Update a stock item. Fields left as None are unchanged.

        Args:
            item_id: Item to update
            user_id: User making the change
            name: New name
            unit: New unit
            price: New unit price
            quantity: New quantity
            category_id: New category; pass None to uncategorize

        Returns:
            The updated item

        Raises:
            NotFoundError: If the item, user or category doesn't exist
            ValidationError: If a value is invalid
        """
        item = self._require(item_id)
        self._check_user(user_id)
        changes = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Item name cannot be empty")
            changes["name"] = name.strip()
        if unit is not None:
            changes["unit"] = unit
        if price is not None:
            changes["price"] = price
        if quantity is not None:
            changes["quantity"] = quantity
        if category_id is not _UNCHANGED:
            self._check_category(category_id)
            changes["category_id"] = category_id
        if not changes:
            return item

        updated = replace(item, **changes, updated_at=now_iso(), sync_status=SyncStatus.PENDING)
        self._check_values(updated.unit, updated.price, updated.quantity)
        self.store.save_record(Table.INVENTORY, updated)
        self.activities.record(ActivityType.INVENTORY_UPDATE, f"Updated {updated.name}", user_id)
        return updated

    def delete_item(self, item_id: str, user_id: str) -> None:
        """Delete a stock item and queue its remote deletion.

        Raises:
            NotFoundError: If the item or user doesn't exist
        """
        item = self._require(item_id)
        self._check_user(user_id)
        self.store.delete_record(Table.INVENTORY, item_id)
        self.store.enqueue_deletion(Table.INVENTORY, item_id)
        self.activities.record(ActivityType.INVENTORY_DELETE, f"Deleted {item.name}", user_id)
