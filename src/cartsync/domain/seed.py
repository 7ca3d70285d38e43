"""First-run seeding of a fresh local database."""

import logging

from cartsync.database.base import LocalStore
from cartsync.domain.entities import (
    DEFAULT_CATEGORIES,
    DEFAULT_USERS,
    Category,
    Table,
    User,
    normalize_category_name,
)
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso

logger = logging.getLogger(__name__)


def seed_default_data(store: LocalStore) -> bool:
    """Create the default users and categories if the database has no users.

    Seeded rows get fresh local ids and are pending, exactly like rows a
    user creates. Every device seeds independently; the sync engine later
    folds these identities into the server's by PIN and by category name.

    Returns:
        True if data was seeded
    """
    if store.list_records(Table.USERS):
        return False

    now = now_iso()
    for name, pin, role in DEFAULT_USERS:
        store.save_record(
            Table.USERS,
            User(id=generate_id(), name=name, pin=pin, role=role.value, created_at=now, updated_at=now),
        )
    existing = {normalize_category_name(c.name) for c in store.list_records(Table.CATEGORIES)}
    for name in DEFAULT_CATEGORIES:
        if normalize_category_name(name) in existing:
            continue
        store.save_record(
            Table.CATEGORIES,
            Category(id=generate_id(), name=name, created_at=now, updated_at=now),
        )
    logger.info("Seeded %d default users", len(DEFAULT_USERS))
    return True
