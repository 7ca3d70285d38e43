"""Builders and test doubles shared by the cartsync tests."""

from datetime import date
from decimal import Decimal

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
from cartsync.sync.remote import RemoteStore
from cartsync.sync.tables import spec_for

T0 = "2024-03-01T08:00:00+00:00"
T1 = "2024-03-02T08:00:00+00:00"
T2 = "2024-03-03T08:00:00+00:00"


class FakeRemoteStore(RemoteStore):
    """In-memory remote that records every call.

    Rows are kept in their wire shape and decoded on fetch, so what comes back
    is exactly what the real client would return (no profile pictures, no
    activity updated_at).
    """

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.rows: dict[Table, dict[str, dict]] = {table: {} for table in Table}
        self.calls: list[tuple] = []
        self.fail_fetch: set[Table] = set()
        self.fail_push: set[Table] = set()
        self.fail_delete: set[str] = set()
        # hook run at the start of every fetch (e.g., to block or raise)
        self.before_fetch = None

    def seed(self, table: Table, *records) -> None:
        """Put records on the remote without going through push."""
        for record in records:
            self.rows[table][record.id] = spec_for(table).encode(record)

    def records(self, table: Table) -> list:
        return [spec_for(table).decode(row) for row in self.rows[table].values()]

    def get(self, table: Table, record_id: str):
        row = self.rows[table].get(record_id)
        return spec_for(table).decode(row) if row is not None else None

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def is_configured(self) -> bool:
        return self.configured

    def fetch_all(self, table: Table):
        self.calls.append(("fetch_all", table))
        if self.before_fetch is not None:
            self.before_fetch(table)
        if table in self.fail_fetch:
            return None
        return self.records(table)

    def push_batch(self, table: Table, records: list) -> bool:
        self.calls.append(("push_batch", table, [r.id for r in records]))
        if table in self.fail_push:
            return False
        self.seed(table, *records)
        return True

    def delete_by_id(self, table: Table, record_id: str) -> bool:
        self.calls.append(("delete_by_id", table, record_id))
        if record_id in self.fail_delete:
            return False
        self.rows[table].pop(record_id, None)
        return True

    def find_user_by_pin(self, pin: str):
        self.calls.append(("find_user_by_pin", pin))
        for user in self.records(Table.USERS):
            if user.pin == pin:
                return user
        return None


def make_user(id="u-1", name="Maria", pin="1234", role="general_manager", created_at=T0,
              sync_status=SyncStatus.PENDING, **kwargs) -> User:
    return User(id=id, name=name, pin=pin, role=role, created_at=created_at,
                updated_at=kwargs.pop("updated_at", created_at), sync_status=sync_status, **kwargs)


def make_category(id="c-1", name="Snacks", created_at=T0, sync_status=SyncStatus.PENDING) -> Category:
    return Category(id=id, name=name, created_at=created_at, updated_at=created_at, sync_status=sync_status)


def make_item(id="i-1", name="Hotdog", category_id=None, created_by="u-1", created_at=T0,
              sync_status=SyncStatus.PENDING, price="25.00", quantity="10") -> InventoryItem:
    return InventoryItem(
        id=id, name=name, category_id=category_id, unit="pcs", price=Decimal(price),
        quantity=Decimal(quantity), created_by=created_by, created_at=created_at,
        updated_at=created_at, sync_status=sync_status,
    )


def make_sale(id="s-1", name="Morning", total="500.00", day=date(2024, 3, 1), created_by="u-1",
              created_at=T0, sync_status=SyncStatus.PENDING) -> Sale:
    return Sale(id=id, name=name, total=Decimal(total), date=day, created_by=created_by,
                created_at=created_at, updated_at=created_at, sync_status=sync_status)


def make_expense(id="e-1", name="Ice", total="80.00", day=date(2024, 3, 1), created_by="u-1",
                 created_at=T0, sync_status=SyncStatus.PENDING) -> Expense:
    return Expense(id=id, name=name, total=Decimal(total), date=day, created_by=created_by,
                   created_at=created_at, updated_at=created_at, sync_status=sync_status)


def make_activity(id="a-1", user_id="u-1", created_at=T0, sync_status=SyncStatus.PENDING) -> Activity:
    return Activity(id=id, type="sale_add", description="Recorded sale", user_id=user_id,
                    created_at=created_at, updated_at=created_at, sync_status=sync_status)


