"""Merge of pulled remote snapshots into the local store."""

import logging
from dataclasses import replace
from typing import Any, Sequence

from cartsync.database.base import LocalStore
from cartsync.domain.entities import Table, User
from cartsync.sync.categories import reconcile_category_names

logger = logging.getLogger(__name__)


def _keep_local_picture(store: LocalStore, user: User) -> User:
    # profile pictures never leave the device, so the remote copy has none
    if user.profile_picture is not None:
        return user
    local = store.get_record(Table.USERS, user.id)
    if local is None or local.profile_picture is None:
        return user
    return replace(user, profile_picture=local.profile_picture)


def merge_snapshot(store: LocalStore, table: Table, records: Sequence[Any]) -> int:
    """Apply a pulled table snapshot to local state.

    Each record is inserted if unknown, overwrites a synced local copy, and
    is ignored when the local copy is pending. Categories additionally go
    through the server-wins name collision rule. Applying the same snapshot
    twice leaves the store unchanged the second time.

    Args:
        store: Local record store
        table: Table the snapshot belongs to
        records: Decoded remote records

    Returns:
        Number of records written locally
    """
    if table == Table.CATEGORIES:
        written = reconcile_category_names(store, records)
    else:
        written = 0
        for record in records:
            if table == Table.USERS:
                record = _keep_local_picture(store, record)
            if store.upsert_from_remote(table, record):
                written += 1

    logger.debug("Merged %d of %d pulled %s", written, len(records), table.value)
    return written
