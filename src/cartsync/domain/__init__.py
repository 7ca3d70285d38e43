"""Domain layer for cartsync.

Services live in their own modules (``cartsync.domain.users`` and so on);
only entities are re-exported here because the database layer imports them.
"""

from cartsync.domain.entities import (
    Activity,
    ActivityType,
    Category,
    Expense,
    InventoryItem,
    Sale,
    SyncStatus,
    Table,
    User,
    UserRole,
)

__all__ = [
    "Activity",
    "ActivityType",
    "Category",
    "Expense",
    "InventoryItem",
    "Sale",
    "SyncStatus",
    "Table",
    "User",
    "UserRole",
]
