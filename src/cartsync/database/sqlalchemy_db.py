"""Generic SQLAlchemy local store implementation."""

import logging
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from cartsync.database.base import LocalStore, USER_REFERENCE_FIELDS
from cartsync.database.models import (
    User,
    Category,
    InventoryItem,
    Sale,
    Expense,
    Activity,
    PendingDeletion,
    SyncMeta,
    create_session_factory,
)
from cartsync.database.mappers import (
    user_to_domain,
    category_to_domain,
    inventory_item_to_domain,
    sale_to_domain,
    expense_to_domain,
    activity_to_domain,
    domain_to_columns,
)
from cartsync.domain.entities import (
    Category as DomainCategory,
    PendingDeletion as DomainPendingDeletion,
    SyncStatus,
    Table,
    User as DomainUser,
    normalize_category_name,
)
from cartsync.utils.timestamps import now_iso

logger = logging.getLogger(__name__)

_PENDING = SyncStatus.PENDING.value
_SYNCED = SyncStatus.SYNCED.value

# ORM model and row mapper for each table
_TABLES: dict[Table, tuple[type, Callable[[Any], Any]]] = {
    Table.USERS: (User, user_to_domain),
    Table.CATEGORIES: (Category, category_to_domain),
    Table.INVENTORY: (InventoryItem, inventory_item_to_domain),
    Table.SALES: (Sale, sale_to_domain),
    Table.EXPENSES: (Expense, expense_to_domain),
    Table.ACTIVITIES: (Activity, activity_to_domain),
}

_DATED_TABLES = (Table.SALES, Table.EXPENSES)


class SQLAlchemyStore(LocalStore):
    """SQLAlchemy-based implementation of the LocalStore interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    # Generic record operations
    def list_records(self, table: Table) -> list[Any]:
        """List all records of a table as domain entities."""
        model, to_domain = _TABLES[table]
        session = self._get_session()
        rows = session.query(model).order_by(model.created_at, model.id).all()
        return [to_domain(row) for row in rows]

    def get_record(self, table: Table, record_id: str) -> Optional[Any]:
        """Get a record by ID."""
        model, to_domain = _TABLES[table]
        session = self._get_session()
        row = session.get(model, record_id)
        if row is None:
            return None
        return to_domain(row)

    def save_record(self, table: Table, record: Any) -> None:
        """Insert a record, or replace every column of an existing one."""
        model, _ = _TABLES[table]
        session = self._get_session()
        session.merge(model(**domain_to_columns(record)))
        session.commit()

    def delete_record(self, table: Table, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        model, _ = _TABLES[table]
        session = self._get_session()
        row = session.get(model, record_id)
        if row is None:
            return False
        session.delete(row)
        session.commit()
        return True

    def list_pending(self, table: Table) -> list[Any]:
        """List records of a table that still await remote acknowledgement."""
        model, to_domain = _TABLES[table]
        session = self._get_session()
        rows = (
            session.query(model)
            .filter(model.sync_status == _PENDING)
            .order_by(model.created_at, model.id)
            .all()
        )
        return [to_domain(row) for row in rows]

    def pending_count(self, table: Optional[Table] = None) -> int:
        """Count pending records in one table, or across all tables."""
        session = self._get_session()
        tables = [table] if table is not None else list(Table)
        total = 0
        for t in tables:
            model, _ = _TABLES[t]
            total += session.query(model).filter(model.sync_status == _PENDING).count()
        return total

    def upsert_from_remote(self, table: Table, record: Any) -> bool:
        """Merge one pulled remote record into local state."""
        model, _ = _TABLES[table]
        session = self._get_session()
        existing = session.get(model, record.id)
        if existing is not None and existing.sync_status == _PENDING:
            logger.debug("Keeping pending local %s %s over remote copy", table.value, record.id)
            return False

        values = domain_to_columns(record)
        values["sync_status"] = _SYNCED
        if existing is None:
            session.add(model(**values))
        else:
            for column, value in values.items():
                setattr(existing, column, value)
        session.commit()
        return True

    def mark_all_synced(self) -> int:
        """Mark every record in every table synced. Returns rows changed."""
        session = self._get_session()
        changed = 0
        for model, _ in _TABLES.values():
            changed += (
                session.query(model)
                .filter(model.sync_status != _SYNCED)
                .update({model.sync_status: _SYNCED}, synchronize_session=False)
            )
        session.commit()
        session.expire_all()
        return changed

    # Lookups
    def get_user_by_pin(self, pin: str) -> Optional[DomainUser]:
        """Get the user owning a PIN."""
        session = self._get_session()
        user = session.query(User).filter(User.pin == pin).order_by(User.created_at).first()
        if user is None:
            return None
        return user_to_domain(user)

    def find_categories_by_name(self, name: str, exclude_id: Optional[str] = None) -> list[DomainCategory]:
        """Find categories whose normalized name equals ``name`` normalized."""
        key = normalize_category_name(name)
        return [
            cat
            for cat in self.list_records(Table.CATEGORIES)
            if normalize_category_name(cat.name) == key and cat.id != exclude_id
        ]

    def count_items_in_category(self, category_id: str) -> int:
        """Count inventory items referencing a category."""
        session = self._get_session()
        return session.query(InventoryItem).filter(InventoryItem.category_id == category_id).count()

    def list_dated_records(
        self, table: Table, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Any]:
        """List sales or expenses within an inclusive day range, newest first."""
        if table not in _DATED_TABLES:
            raise ValueError(f"Table {table.value} has no business date")
        model, to_domain = _TABLES[table]
        session = self._get_session()
        query = session.query(model)
        if start_date is not None:
            query = query.filter(model.date >= start_date)
        if end_date is not None:
            query = query.filter(model.date <= end_date)
        rows = query.order_by(model.date.desc(), model.created_at.desc()).all()
        return [to_domain(row) for row in rows]

    # Reference repair helpers
    def repoint_user_references(self, old_user_id: str, new_user_id: str) -> int:
        """Rewrite every user reference equal to ``old_user_id``."""
        session = self._get_session()
        now = now_iso()
        changed = 0
        for table, field in USER_REFERENCE_FIELDS.items():
            model, _ = _TABLES[table]
            column = getattr(model, field)
            changed += (
                session.query(model)
                .filter(column == old_user_id)
                .update(
                    {column: new_user_id, model.sync_status: _PENDING, model.updated_at: now},
                    synchronize_session=False,
                )
            )
        session.commit()
        session.expire_all()
        return changed

    def repoint_category_references(self, old_category_id: str, new_category_id: Optional[str]) -> int:
        """Rewrite inventory category references; ``None`` detaches items."""
        session = self._get_session()
        changed = (
            session.query(InventoryItem)
            .filter(InventoryItem.category_id == old_category_id)
            .update(
                {
                    InventoryItem.category_id: new_category_id,
                    InventoryItem.sync_status: _PENDING,
                    InventoryItem.updated_at: now_iso(),
                },
                synchronize_session=False,
            )
        )
        session.commit()
        session.expire_all()
        return changed

    def find_dangling_user_references(self) -> list[tuple[Table, str, str]]:
        """Return ``(table, record_id, user_id)`` for references to unknown users."""
        session = self._get_session()
        known_ids = select(User.id)
        dangling = []
        for table, field in USER_REFERENCE_FIELDS.items():
            model, _ = _TABLES[table]
            column = getattr(model, field)
            rows = session.query(model.id, column).filter(column.not_in(known_ids)).order_by(model.id).all()
            dangling.extend((table, record_id, user_id) for record_id, user_id in rows)
        return dangling

    def find_dangling_category_references(self) -> list[tuple[str, str]]:
        """Return ``(item_id, category_id)`` for references to unknown categories."""
        session = self._get_session()
        known_ids = select(Category.id)
        rows = (
            session.query(InventoryItem.id, InventoryItem.category_id)
            .filter(InventoryItem.category_id.is_not(None))
            .filter(InventoryItem.category_id.not_in(known_ids))
            .order_by(InventoryItem.id)
            .all()
        )
        return [(item_id, category_id) for item_id, category_id in rows]

    def set_user_reference(self, table: Table, record_id: str, user_id: str) -> None:
        """Point one record's user reference at ``user_id`` and mark it pending."""
        field = USER_REFERENCE_FIELDS.get(table)
        if field is None:
            raise ValueError(f"Table {table.value} has no user reference")
        model, _ = _TABLES[table]
        session = self._get_session()
        row = session.get(model, record_id)
        if row is None:
            raise ValueError(f"No {table.value} record with id {record_id}")
        setattr(row, field, user_id)
        row.sync_status = _PENDING
        row.updated_at = now_iso()
        session.commit()

    def set_category_reference(self, item_id: str, category_id: Optional[str]) -> None:
        """Point one inventory item at ``category_id`` and mark it pending."""
        session = self._get_session()
        item = session.get(InventoryItem, item_id)
        if item is None:
            raise ValueError(f"No inventory record with id {item_id}")
        item.category_id = category_id
        item.sync_status = _PENDING
        item.updated_at = now_iso()
        session.commit()

    # Sync bookkeeping
    def enqueue_deletion(self, table: Table, record_id: str) -> None:
        """Queue a remote deletion. Queuing the same deletion twice is a no-op."""
        session = self._get_session()
        exists = (
            session.query(PendingDeletion)
            .filter(PendingDeletion.table_name == table.value, PendingDeletion.record_id == record_id)
            .count()
        )
        if exists:
            return
        session.add(PendingDeletion(table_name=table.value, record_id=record_id))
        session.commit()

    def list_pending_deletions(self) -> list[DomainPendingDeletion]:
        """List queued remote deletions in insertion order."""
        session = self._get_session()
        rows = session.query(PendingDeletion).order_by(PendingDeletion.id).all()
        return [DomainPendingDeletion(table=Table(row.table_name), record_id=row.record_id) for row in rows]

    def clear_pending_deletions(self) -> None:
        """Empty the remote deletion queue."""
        session = self._get_session()
        session.query(PendingDeletion).delete(synchronize_session=False)
        session.commit()

    def get_meta(self, key: str) -> Optional[str]:
        """Read a sync bookkeeping value."""
        session = self._get_session()
        row = session.get(SyncMeta, key)
        return row.value if row is not None else None

    def set_meta(self, key: str, value: Optional[str]) -> None:
        """Write a sync bookkeeping value."""
        session = self._get_session()
        session.merge(SyncMeta(key=key, value=value))
        session.commit()
