"""Sales and expenses domain service."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from cartsync.database.base import LocalStore
from cartsync.domain.activities import ActivityService
from cartsync.domain.entities import ActivityType, Expense, Sale, Table
from cartsync.domain.errors import NotFoundError, ValidationError, record_not_found, user_not_found
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso


@dataclass(frozen=True)
class LedgerSummary:
    """Totals over a day range."""

    start_date: Optional[date]
    end_date: Optional[date]
    sales_total: Decimal
    expenses_total: Decimal
    sale_count: int
    expense_count: int

    @property
    def net(self) -> Decimal:
        return self.sales_total - self.expenses_total


class LedgerService:
    """Service for posting sales and expenses."""

    def __init__(self, store: LocalStore):
        """Initialize ledger service.

        Args:
            store: Local record store
        """
        self.store = store
        self.activities = ActivityService(store)

    def _validate(self, name: str, total: Decimal, created_by: str) -> str:
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        if total < 0:
            raise ValidationError("Total cannot be negative")
        if self.store.get_record(Table.USERS, created_by) is None:
            raise NotFoundError(user_not_found(created_by))
        return name

    def add_sale(self, name: str, total: Decimal, day: date, created_by: str) -> Sale:
        """Post a sale to a business day.

        Args:
            name: Sale label (e.g., "Morning shift")
            total: Sale total
            day: Business day
            created_by: User posting the sale

        Returns:
            The new sale

        Raises:
            ValidationError: If name or total is invalid
            NotFoundError: If the user doesn't exist
        """
        name = self._validate(name, total, created_by)
        now = now_iso()
        sale = Sale(
            id=generate_id(),
            name=name,
            total=total,
            date=day,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.store.save_record(Table.SALES, sale)
        self.activities.record(ActivityType.SALE_ADD, f"Recorded sale {name}: {total}", created_by)
        return sale

    def add_expense(self, name: str, total: Decimal, day: date, created_by: str) -> Expense:
        """Post an expense to a business day.

        Raises:
            ValidationError: If name or total is invalid
            NotFoundError: If the user doesn't exist
        """
        name = self._validate(name, total, created_by)
        now = now_iso()
        expense = Expense(
            id=generate_id(),
            name=name,
            total=total,
            date=day,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        self.store.save_record(Table.EXPENSES, expense)
        self.activities.record(ActivityType.EXPENSE_ADD, f"Recorded expense {name}: {total}", created_by)
        return expense

    def _delete(self, table: Table, record_id: str) -> None:
        if not self.store.delete_record(table, record_id):
            raise NotFoundError(record_not_found(table.value, record_id))
        self.store.enqueue_deletion(table, record_id)

    def delete_sale(self, sale_id: str) -> None:
        """Delete a sale and queue its remote deletion."""
        self._delete(Table.SALES, sale_id)

    def delete_expense(self, expense_id: str) -> None:
        """Delete an expense and queue its remote deletion."""
        self._delete(Table.EXPENSES, expense_id)

    def list_sales(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> list[Sale]:
        """List sales in an inclusive day range, newest first."""
        return self.store.list_dated_records(Table.SALES, start_date, end_date)

    def list_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Expense]:
        """List expenses in an inclusive day range, newest first."""
        return self.store.list_dated_records(Table.EXPENSES, start_date, end_date)

    def summarize(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> LedgerSummary:
        """Total sales and expenses over an inclusive day range.

        Raises:
            ValidationError: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        sales = self.list_sales(start_date, end_date)
        expenses = self.list_expenses(start_date, end_date)
        return LedgerSummary(
            start_date=start_date,
            end_date=end_date,
            sales_total=sum((s.total for s in sales), Decimal("0")),
            expenses_total=sum((e.total for e in expenses), Decimal("0")),
            sale_count=len(sales),
            expense_count=len(expenses),
        )
