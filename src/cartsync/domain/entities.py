"""Domain model entities for cartsync.

These are pure data classes representing the food cart's records, independent
of both the local database schema and the remote wire format. Every record
carries a sync status so the reconciliation engine can tell outstanding local
edits from rows the remote has already acknowledged.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class SyncStatus(str, Enum):
    """Per-record synchronization state."""

    PENDING = "pending"
    SYNCED = "synced"


class Table(str, Enum):
    """The six synchronized entity tables, in push/pull order."""

    USERS = "users"
    CATEGORIES = "categories"
    INVENTORY = "inventory"
    SALES = "sales"
    EXPENSES = "expenses"
    ACTIVITIES = "activities"


class UserRole(str, Enum):
    GENERAL_MANAGER = "general_manager"
    OPERATION_MANAGER = "operation_manager"
    INVENTORY_CLERK = "inventory_clerk"
    DEVELOPER = "developer"


class ActivityType(str, Enum):
    INVENTORY_ADD = "inventory_add"
    INVENTORY_UPDATE = "inventory_update"
    INVENTORY_DELETE = "inventory_delete"
    SALE_ADD = "sale_add"
    EXPENSE_ADD = "expense_add"
    PROFILE_UPDATE = "profile_update"
    SETTINGS_CHANGE = "settings_change"


UNITS = ("pcs", "kg", "g", "L", "mL", "bundle", "pack")

DEFAULT_CATEGORIES = ("Cart", "Freezer", "Condiments", "Packing Supply")

# (name, pin, role) seeded into every fresh local database
DEFAULT_USERS = (
    ("General Manager", "1234", UserRole.GENERAL_MANAGER),
    ("Operation Manager", "1111", UserRole.OPERATION_MANAGER),
    ("Inventory Clerk", "2222", UserRole.INVENTORY_CLERK),
    ("Developer", "2345", UserRole.DEVELOPER),
)

# Owner of orphaned records when no explicit fallback PIN is configured
RECOVERY_PIN = "2345"


def normalize_category_name(name: str) -> str:
    """Return the uniqueness key for a category name (trimmed, lowercase)."""
    return name.strip().lower()


@dataclass(frozen=True)
class User:
    """Cart staff member. ``pin`` is the business key, unique across users."""

    id: str
    name: str
    pin: str
    role: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING
    bio: Optional[str] = None
    profile_picture: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """Inventory category; names are unique after normalization."""

    id: str
    name: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING


@dataclass(frozen=True)
class InventoryItem:
    """Stock item. ``category_id`` is a weak reference and may be null."""

    id: str
    name: str
    category_id: Optional[str]
    unit: str
    price: Decimal
    quantity: Decimal
    created_by: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING


@dataclass(frozen=True)
class Sale:
    """Posted sale for a business day."""

    id: str
    name: str
    total: Decimal
    date: date
    created_by: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING


@dataclass(frozen=True)
class Expense:
    """Expense entry for a business day."""

    id: str
    name: str
    total: Decimal
    date: date
    created_by: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING


@dataclass(frozen=True)
class Activity:
    """Entry in the activity feed."""

    id: str
    type: str
    description: str
    user_id: str
    created_at: str
    updated_at: str
    sync_status: SyncStatus = SyncStatus.PENDING


@dataclass(frozen=True)
class PendingDeletion:
    """A local deletion that still has to be replayed against the remote."""

    table: Table
    record_id: str
