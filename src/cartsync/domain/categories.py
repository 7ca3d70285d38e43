"""Category domain service."""

from dataclasses import replace
from typing import Optional

from cartsync.database.base import LocalStore
from cartsync.domain.entities import Category, SyncStatus, Table
from cartsync.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_category_name,
)
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso


class CategoryService:
    """Service for managing inventory categories."""

    def __init__(self, store: LocalStore):
        """Initialize category service.

        Args:
            store: Local record store
        """
        self.store = store

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if self.store.find_categories_by_name(name, exclude_id=exclude_id):
            raise ConflictError(duplicate_category_name(name))
        return name

    def create_category(self, name: str) -> Category:
        """Create a category.

        Args:
            name: Category name, unique ignoring case and surrounding spaces

        Returns:
            The new category

        Raises:
            ValidationError: If the name is empty
            ConflictError: If an equivalent name exists
        """
        name = self._check_name(name)
        now = now_iso()
        category = Category(id=generate_id(), name=name, created_at=now, updated_at=now)
        self.store.save_record(Table.CATEGORIES, category)
        return category

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""
        return self.store.get_record(Table.CATEGORIES, category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name, ignoring case and surrounding spaces."""
        matches = self.store.find_categories_by_name(name)
        return matches[0] if matches else None

    def list_categories(self) -> list[Category]:
        """List categories by name."""
        return sorted(self.store.list_records(Table.CATEGORIES), key=lambda c: c.name.lower())

    def rename_category(self, category_id: str, name: str) -> Category:
        """Rename a category.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If the name is empty
            ConflictError: If another category has an equivalent name
        """
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        name = self._check_name(name, exclude_id=category_id)

        updated = replace(category, name=name, updated_at=now_iso(), sync_status=SyncStatus.PENDING)
        self.store.save_record(Table.CATEGORIES, updated)
        return updated

    def delete_category(self, category_id: str) -> int:
        """Delete a category and queue its remote deletion.

        Items in the category are kept and become uncategorized.

        Args:
            category_id: Category ID to delete

        Returns:
            Number of items that were detached

        Raises:
            NotFoundError: If the category doesn't exist
        """
        if self.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        detached = self.store.repoint_category_references(category_id, None)
        self.store.delete_record(Table.CATEGORIES, category_id)
        self.store.enqueue_deletion(Table.CATEGORIES, category_id)
        return detached
