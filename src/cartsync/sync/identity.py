"""User identity reconciliation.

Every device seeds its own users before it ever talks to the remote, so the
same person (same PIN) usually exists under a local id and a server id.
These functions fold local identities into server identities by PIN and
keep every authored record pointing at a user that exists.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from cartsync.database.base import LocalStore
from cartsync.domain.entities import RECOVERY_PIN, SyncStatus, Table, User
from cartsync.utils.timestamps import now_iso

logger = logging.getLogger(__name__)


@dataclass
class OrphanRepairResult:
    """Counts of references rewritten by an orphan sweep."""

    fixed_authors: dict[Table, int] = field(default_factory=dict)
    detached_items: int = 0

    @property
    def total(self) -> int:
        return sum(self.fixed_authors.values()) + self.detached_items


@dataclass
class MigrationResult:
    """Outcome of one identity migration pass."""

    remapped: dict[str, str] = field(default_factory=dict)
    inserted: int = 0
    orphans: OrphanRepairResult = field(default_factory=OrphanRepairResult)


def resolve_fallback_user_id(users: Sequence[User], fallback_pin: Optional[str] = None) -> Optional[str]:
    """Pick the user that inherits orphaned records.

    Tries the configured fallback PIN, then the recovery PIN, then the first
    user in ``users``.

    Args:
        users: Candidate users (server users during migration, local users afterwards)
        fallback_pin: Explicitly configured fallback PIN

    Returns:
        User id, or None when ``users`` is empty
    """
    pin_to_id: dict[str, str] = {}
    for user in users:
        pin_to_id.setdefault(user.pin, user.id)
    for pin in (fallback_pin, RECOVERY_PIN):
        if pin and pin in pin_to_id:
            return pin_to_id[pin]
    return users[0].id if users else None


def _absorb(server_user: User, local_user: Optional[User]) -> User:
    """Build the local row for a server identity.

    Locally-known editable fields win over the server copy, but only in the
    local row: it is always stored synced, so absorbing never pushes local
    defaults over the server's profile.
    """
    if local_user is None:
        return replace(server_user, sync_status=SyncStatus.SYNCED)
    return User(
        id=server_user.id,
        name=local_user.name or server_user.name,
        pin=server_user.pin,
        role=server_user.role or local_user.role,
        bio=local_user.bio,
        profile_picture=local_user.profile_picture,
        created_at=local_user.created_at or server_user.created_at,
        updated_at=now_iso(),
        sync_status=SyncStatus.SYNCED,
    )


def migrate_local_user_ids(
    store: LocalStore,
    server_users: Sequence[User],
    fallback_pin: Optional[str] = None,
) -> MigrationResult:
    """Rewrite local user ids to the server ids sharing their PIN.

    Safe to run every cycle: once ids match there is nothing to remap and
    every server user already exists locally.

    Args:
        store: Local record store
        server_users: Users as fetched from the remote
        fallback_pin: PIN of the user that inherits orphaned records

    Returns:
        MigrationResult describing what changed
    """
    result = MigrationResult()
    if not server_users:
        logger.debug("No server users to migrate to")
        return result

    server_by_pin = {user.pin: user for user in server_users}
    local_users = store.list_records(Table.USERS)
    local_by_pin: dict[str, User] = {}
    for user in local_users:
        local_by_pin.setdefault(user.pin, user)

    for local_user in local_users:
        server_user = server_by_pin.get(local_user.pin)
        if server_user is not None and server_user.id != local_user.id:
            logger.info("Matched user by PIN: local %s -> server %s", local_user.id, server_user.id)
            result.remapped[local_user.id] = server_user.id

    for local_id, server_id in result.remapped.items():
        store.repoint_user_references(local_id, server_id)
    for local_id in result.remapped:
        store.delete_record(Table.USERS, local_id)

    for server_user in server_users:
        if store.get_record(Table.USERS, server_user.id) is not None:
            continue
        store.save_record(Table.USERS, _absorb(server_user, local_by_pin.get(server_user.pin)))
        result.inserted += 1

    fallback_id = resolve_fallback_user_id(server_users, fallback_pin)
    result.orphans = repair_orphan_references(store, fallback_id, detach_categories=False)

    logger.info(
        "User migration complete: %d remapped, %d inserted, %d orphan fixes",
        len(result.remapped),
        result.inserted,
        result.orphans.total,
    )
    return result


def resolve_user_pin_conflict(
    store: LocalStore, local_id: str, server_id: str, local_user: User
) -> Optional[User]:
    """Absorb a pending local user into the server user owning its PIN.

    References move to ``server_id`` and the local row is removed. If no row
    exists at ``server_id`` yet, one is created from the local row's fields
    and marked synced, so it is not pushed over the server's user.
    Running it again with the same arguments changes nothing.

    Args:
        store: Local record store
        local_id: Id of the conflicting local user
        server_id: Id the remote uses for the same PIN
        local_user: The local user row as it was before resolution

    Returns:
        The user now stored at ``server_id``, or None if the ids already match
    """
    if local_id == server_id:
        return None

    moved = store.repoint_user_references(local_id, server_id)
    store.delete_record(Table.USERS, local_id)

    existing = store.get_record(Table.USERS, server_id)
    if existing is not None:
        return existing

    absorbed = replace(local_user, id=server_id, updated_at=now_iso(), sync_status=SyncStatus.SYNCED)
    store.save_record(Table.USERS, absorbed)
    logger.info("PIN conflict resolved: %s -> %s (%d references moved)", local_id, server_id, moved)
    return absorbed


def repair_orphan_references(
    store: LocalStore,
    fallback_user_id: Optional[str],
    detach_categories: bool = True,
) -> OrphanRepairResult:
    """Make every foreign reference point at an existing local row.

    Author references to unknown users are reassigned to the fallback user.
    Inventory items pointing at unknown categories are detached. Rewritten
    rows are marked pending so the fix reaches the remote.

    Args:
        store: Local record store
        fallback_user_id: Owner for orphaned records; author repair is skipped if None
        detach_categories: Also clear dangling inventory category references

    Returns:
        OrphanRepairResult with per-table counts
    """
    result = OrphanRepairResult()

    dangling_users = store.find_dangling_user_references()
    if dangling_users and fallback_user_id is None:
        logger.warning("%d orphaned author reference(s) but no fallback user", len(dangling_users))
    elif dangling_users:
        for table, record_id, user_id in dangling_users:
            logger.info("Fixing orphan %s %s: %s -> %s", table.value, record_id, user_id, fallback_user_id)
            store.set_user_reference(table, record_id, fallback_user_id)
            result.fixed_authors[table] = result.fixed_authors.get(table, 0) + 1

    if detach_categories:
        for item_id, category_id in store.find_dangling_category_references():
            logger.info("Detaching inventory %s from missing category %s", item_id, category_id)
            store.set_category_reference(item_id, None)
            result.detached_items += 1

    return result
