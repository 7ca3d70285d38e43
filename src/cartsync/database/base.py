"""Abstract local record store interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Any

# Import entities directly to avoid circular import through domain/__init__.py
from cartsync.domain.entities import (
    Category,
    PendingDeletion,
    Table,
    User,
)

# Tables holding a reference to User.id, and the field that holds it
USER_REFERENCE_FIELDS: dict[Table, str] = {
    Table.INVENTORY: "created_by",
    Table.SALES: "created_by",
    Table.EXPENSES: "created_by",
    Table.ACTIVITIES: "user_id",
}


class LocalStore(ABC):
    """Abstract local record store for cartsync.

    Holds the six entity tables, each row tagged ``pending`` or ``synced``.
    UI-side writes always succeed locally; the reconciliation engine is the
    only component that flips rows to ``synced``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Generic record operations
    @abstractmethod
    def list_records(self, table: Table) -> list[Any]:
        """List all records of a table as domain entities."""
        pass

    @abstractmethod
    def get_record(self, table: Table, record_id: str) -> Optional[Any]:
        """Get a record by ID."""
        pass

    @abstractmethod
    def save_record(self, table: Table, record: Any) -> None:
        """Insert a record, or replace every column of an existing one."""
        pass

    @abstractmethod
    def delete_record(self, table: Table, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        pass

    @abstractmethod
    def list_pending(self, table: Table) -> list[Any]:
        """List records of a table that still await remote acknowledgement."""
        pass

    @abstractmethod
    def pending_count(self, table: Optional[Table] = None) -> int:
        """Count pending records in one table, or across all tables."""
        pass

    @abstractmethod
    def upsert_from_remote(self, table: Table, record: Any) -> bool:
        """Merge one pulled remote record into local state.

        Missing locally: inserted as synced. Present and synced: overwritten
        by the remote version, synced. Present and pending: left untouched,
        the local edit wins until it is pushed.

        Returns:
            True if local state was written
        """
        pass

    @abstractmethod
    def mark_all_synced(self) -> int:
        """Mark every record in every table synced. Returns rows changed."""
        pass

    # Lookups
    @abstractmethod
    def get_user_by_pin(self, pin: str) -> Optional[User]:
        """Get the user owning a PIN."""
        pass

    @abstractmethod
    def find_categories_by_name(self, name: str, exclude_id: Optional[str] = None) -> list[Category]:
        """Find categories whose normalized name equals ``name`` normalized."""
        pass

    @abstractmethod
    def count_items_in_category(self, category_id: str) -> int:
        """Count inventory items referencing a category."""
        pass

    @abstractmethod
    def list_dated_records(
        self, table: Table, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Any]:
        """List sales or expenses within an inclusive day range, newest first."""
        pass

    # Reference repair helpers
    @abstractmethod
    def repoint_user_references(self, old_user_id: str, new_user_id: str) -> int:
        """Rewrite every user reference equal to ``old_user_id``.

        Rewritten rows are marked pending. Returns the number of rows changed.
        """
        pass

    @abstractmethod
    def repoint_category_references(self, old_category_id: str, new_category_id: Optional[str]) -> int:
        """Rewrite inventory category references; ``None`` detaches items.

        Rewritten rows are marked pending. Returns the number of rows changed.
        """
        pass

    @abstractmethod
    def find_dangling_user_references(self) -> list[tuple[Table, str, str]]:
        """Return ``(table, record_id, user_id)`` for references to unknown users."""
        pass

    @abstractmethod
    def find_dangling_category_references(self) -> list[tuple[str, str]]:
        """Return ``(item_id, category_id)`` for references to unknown categories."""
        pass

    @abstractmethod
    def set_user_reference(self, table: Table, record_id: str, user_id: str) -> None:
        """Point one record's user reference at ``user_id`` and mark it pending."""
        pass

    @abstractmethod
    def set_category_reference(self, item_id: str, category_id: Optional[str]) -> None:
        """Point one inventory item at ``category_id`` and mark it pending."""
        pass

    # Sync bookkeeping
    @abstractmethod
    def enqueue_deletion(self, table: Table, record_id: str) -> None:
        """Queue a remote deletion. Queuing the same deletion twice is a no-op."""
        pass

    @abstractmethod
    def list_pending_deletions(self) -> list[PendingDeletion]:
        """List queued remote deletions in insertion order."""
        pass

    @abstractmethod
    def clear_pending_deletions(self) -> None:
        """Empty the remote deletion queue."""
        pass

    @abstractmethod
    def get_meta(self, key: str) -> Optional[str]:
        """Read a sync bookkeeping value."""
        pass

    @abstractmethod
    def set_meta(self, key: str, value: Optional[str]) -> None:
        """Write a sync bookkeeping value."""
        pass
