"""Category name repair.

Category names are unique after trimming and lowercasing. Two devices that
each created "Snacks" offline end up with two rows under different ids;
these functions fold such rows into one and move inventory items along.
"""

import logging
from collections import defaultdict
from typing import Iterable

from cartsync.database.base import LocalStore
from cartsync.domain.entities import Category, SyncStatus, Table, normalize_category_name
from cartsync.utils.timestamps import parse_timestamp

logger = logging.getLogger(__name__)


def _canonical_rank(category: Category):
    # synced rows first, then the oldest
    return (
        category.sync_status != SyncStatus.SYNCED,
        parse_timestamp(category.created_at),
        category.id,
    )


def _fold_into(store: LocalStore, duplicate: Category, canonical_id: str) -> int:
    """Move items off ``duplicate`` onto ``canonical_id`` and drop it."""
    moved = store.repoint_category_references(duplicate.id, canonical_id)
    store.delete_record(Table.CATEGORIES, duplicate.id)
    if duplicate.sync_status == SyncStatus.SYNCED:
        # the remote holds a copy too; it would be pulled straight back
        store.enqueue_deletion(Table.CATEGORIES, duplicate.id)
    logger.info(
        "Merged duplicate category '%s' (%s) into %s, %d item(s) moved",
        duplicate.name,
        duplicate.id,
        canonical_id,
        moved,
    )
    return moved


def repair_duplicate_categories(store: LocalStore) -> int:
    """Collapse local categories whose normalized names collide.

    Within each group the canonical row is the synced one if any, otherwise
    the earliest created. Every other row has its inventory items repointed
    to the canonical id and is then deleted.

    Args:
        store: Local record store

    Returns:
        Number of duplicate rows removed
    """
    groups: dict[str, list[Category]] = defaultdict(list)
    for category in store.list_records(Table.CATEGORIES):
        groups[normalize_category_name(category.name)].append(category)

    removed = 0
    for members in groups.values():
        if len(members) < 2:
            continue
        canonical = min(members, key=_canonical_rank)
        for duplicate in members:
            if duplicate.id == canonical.id:
                continue
            _fold_into(store, duplicate, canonical.id)
            removed += 1

    if removed:
        logger.info("Repaired %d duplicate categories", removed)
    else:
        logger.debug("No duplicate categories found")
    return removed


def reconcile_category_names(store: LocalStore, server_categories: Iterable[Category]) -> int:
    """Merge remote categories, letting the server row win name collisions.

    For each incoming category, a local row with the same normalized name but
    a different id is folded into the incoming one before the incoming row is
    upserted with the usual pending-wins rule. When the remote itself carries
    a name twice, the oldest remote row is kept and the rest are treated as
    duplicates to delete.

    Args:
        store: Local record store
        server_categories: Categories as fetched from the remote

    Returns:
        Number of remote categories written locally
    """
    incoming: dict[str, list[Category]] = defaultdict(list)
    for category in server_categories:
        incoming[normalize_category_name(category.name)].append(category)

    written = 0
    for members in incoming.values():
        winner = min(members, key=_canonical_rank)
        for loser in members:
            if loser.id == winner.id:
                continue
            logger.info("Remote has duplicate category '%s' (%s)", loser.name, loser.id)
            store.repoint_category_references(loser.id, winner.id)
            store.delete_record(Table.CATEGORIES, loser.id)
            store.enqueue_deletion(Table.CATEGORIES, loser.id)

        local = store.get_record(Table.CATEGORIES, winner.id)
        if local is not None and local.sync_status == SyncStatus.PENDING:
            # local rename in flight; it keeps its name until pushed
            continue
        for colliding in store.find_categories_by_name(winner.name, exclude_id=winner.id):
            _fold_into(store, colliding, winner.id)
        if store.upsert_from_remote(Table.CATEGORIES, winner):
            written += 1
    return written
