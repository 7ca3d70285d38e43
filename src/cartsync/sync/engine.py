"""Bi-directional reconciliation engine.

One ``SyncEngine`` instance per local database owns the in-flight flag, the
pending-deletion queue semantics and the last-sync timestamp. A cycle runs,
strictly in order: pre-sync repair, deletion drain, push, pull, merge,
finalize. Every step is idempotent, so a cycle interrupted anywhere is
completed by the next one.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from cartsync.database.base import LocalStore
from cartsync.domain.entities import Table, User
from cartsync.sync.categories import reconcile_category_names, repair_duplicate_categories
from cartsync.sync.connectivity import ConnectivityMonitor
from cartsync.sync.identity import (
    OrphanRepairResult,
    migrate_local_user_ids,
    repair_orphan_references,
    resolve_fallback_user_id,
    resolve_user_pin_conflict,
)
from cartsync.sync.merge import merge_snapshot
from cartsync.sync.remote import RemoteStore
from cartsync.sync.state import SyncState, project_state
from cartsync.sync.tables import TABLE_SPECS
from cartsync.utils.timestamps import now_iso

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last_sync_time"

StateListener = Callable[[SyncState], None]


class SyncReason(str, Enum):
    """What triggered a cycle."""

    LOGIN = "login"
    LOGOUT = "logout"
    MANUAL = "manual"
    AUTO = "auto"


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one ``run_sync`` call."""

    ok: bool
    reason: SyncReason
    pushed: dict[Table, int] = field(default_factory=dict)
    pulled: dict[Table, int] = field(default_factory=dict)
    pending_count: int = 0
    # why the cycle was skipped or failed
    message: Optional[str] = None


@dataclass(frozen=True)
class LocalRepairResult:
    duplicate_categories_removed: int
    orphans: OrphanRepairResult


class SyncEngine:
    """Reconciles the local record store with the remote store."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteStore,
        monitor: ConnectivityMonitor,
        fallback_pin: Optional[str] = None,
    ):
        """Initialize the engine.

        Args:
            store: Local record store
            remote: Remote store client
            monitor: Connectivity monitor
            fallback_pin: PIN of the user that inherits orphaned records
        """
        self.store = store
        self.remote = remote
        self.monitor = monitor
        self.fallback_pin = fallback_pin
        self._lock = threading.Lock()
        self._syncing = False
        self._listeners: list[StateListener] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    # State
    @property
    def is_syncing(self) -> bool:
        return self._syncing

    @property
    def last_sync_time(self) -> Optional[str]:
        """When a cycle last ended with nothing pending (ISO-8601)."""
        return self.store.get_meta(LAST_SYNC_KEY)

    def current_state(self) -> SyncState:
        """Project the sync indicator from local truth and last-known connectivity."""
        return project_state(
            connected=self.monitor.currently_connected(),
            syncing=self._syncing,
            pending_count=self.store.pending_count(),
            last_sync_time=self.last_sync_time,
        )

    def add_state_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new state whenever the engine changes it.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _publish(self) -> None:
        if not self._listeners:
            return
        try:
            state = self.current_state()
        except Exception:
            logger.exception("Could not read sync state for listeners")
            return
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Sync state listener failed")

    # Connectivity wiring
    def attach(self) -> None:
        """Sync automatically whenever connectivity comes back."""
        if self._unsubscribe is None:
            self._unsubscribe = self.monitor.subscribe(self._on_connectivity_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_connectivity_change(self, connected: bool) -> None:
        if connected:
            self.run_sync(SyncReason.AUTO)
        else:
            self._publish()

    # Public operations
    def queue_deletion(self, table: Table, record_id: str) -> None:
        """Remember that a locally deleted record must also go remotely."""
        self.store.enqueue_deletion(Table(table), record_id)
        logger.debug("Queued remote deletion of %s %s", Table(table).value, record_id)

    def repair_local(self) -> Optional[LocalRepairResult]:
        """Run the repairs that need no remote: duplicate categories and orphans.

        Returns:
            LocalRepairResult, or None if a cycle is running
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Sync in progress, skipping local repair")
            return None
        try:
            removed = repair_duplicate_categories(self.store)
            fallback_id = resolve_fallback_user_id(self.store.list_records(Table.USERS), self.fallback_pin)
            orphans = repair_orphan_references(self.store, fallback_id)
        finally:
            self._lock.release()
        self._publish()
        return LocalRepairResult(duplicate_categories_removed=removed, orphans=orphans)

    def run_sync(self, reason: SyncReason | str = SyncReason.MANUAL) -> SyncResult:
        """Run one full reconciliation cycle.

        Failures during the cycle are logged and reported through the
        result. A call made while another cycle is in flight returns
        immediately.

        Args:
            reason: Trigger of this cycle

        Returns:
            SyncResult; ``ok`` is True only if every push succeeded and
            nothing is left pending

        Raises:
            ValueError: If ``reason`` is not a known trigger; checked before
                anything else runs
        """
        reason = SyncReason(reason)
        if not self._lock.acquire(blocking=False):
            logger.info("Sync already in progress, ignoring %s trigger", reason.value)
            return SyncResult(ok=False, reason=reason, message="sync already in progress")

        try:
            if not self.remote.is_configured():
                logger.info("Remote store not configured, skipping sync")
                self._publish()
                return SyncResult(
                    ok=False,
                    reason=reason,
                    pending_count=self._recount_pending(),
                    message="remote store not configured",
                )
            if not self.monitor.refresh():
                logger.info("Offline, skipping sync")
                self._publish()
                return SyncResult(
                    ok=False,
                    reason=reason,
                    pending_count=self._recount_pending(),
                    message="offline",
                )

            self._syncing = True
            self._publish()
            try:
                return self._run_cycle(reason)
            except Exception as e:
                logger.exception("Sync (%s) failed", reason.value)
                return SyncResult(
                    ok=False,
                    reason=reason,
                    pending_count=self._recount_pending(),
                    message=f"sync failed: {e}",
                )
            finally:
                self._syncing = False
                self._publish()
        finally:
            self._lock.release()

    def _recount_pending(self) -> int:
        try:
            return self.store.pending_count()
        except Exception:
            logger.exception("Could not recount pending records")
            return 0

    # Cycle steps
    def _run_cycle(self, reason: SyncReason) -> SyncResult:
        logger.info("Starting sync (%s)", reason.value)
        self._pre_sync_repair()
        self._drain_deletions()
        pushed, push_ok = self._push()
        snapshots = self._pull()
        pulled = {table: merge_snapshot(self.store, table, records) for table, records in snapshots.items()}

        if push_ok:
            self.store.mark_all_synced()
        fallback_id = resolve_fallback_user_id(self.store.list_records(Table.USERS), self.fallback_pin)
        repaired = repair_orphan_references(self.store, fallback_id)
        if repaired.total:
            logger.info("Repaired %d dangling reference(s), they will be pushed next sync", repaired.total)

        pending = self.store.pending_count()
        if pending == 0:
            self.store.set_meta(LAST_SYNC_KEY, now_iso())
        ok = push_ok and pending == 0
        logger.info("Sync (%s) finished: ok=%s, %d pending", reason.value, ok, pending)
        return SyncResult(ok=ok, reason=reason, pushed=pushed, pulled=pulled, pending_count=pending)

    def _pre_sync_repair(self) -> None:
        repair_duplicate_categories(self.store)

        server_users = self.remote.fetch_all(Table.USERS)
        if server_users:
            migrate_local_user_ids(self.store, server_users, self.fallback_pin)
        else:
            logger.info("No server users available, skipping user migration")

        server_categories = self.remote.fetch_all(Table.CATEGORIES)
        if server_categories is not None:
            reconcile_category_names(self.store, server_categories)

    def _drain_deletions(self) -> None:
        deletions = self.store.list_pending_deletions()
        for deletion in deletions:
            if not self.remote.delete_by_id(deletion.table, deletion.record_id):
                logger.warning("Remote delete of %s %s failed", deletion.table.value, deletion.record_id)
        self.store.clear_pending_deletions()
        if deletions:
            logger.info("Drained %d pending deletion(s)", len(deletions))

    def _push(self) -> tuple[dict[Table, int], bool]:
        pushed: dict[Table, int] = {}
        push_ok = True
        for spec in TABLE_SPECS:
            records = self.store.list_pending(spec.table)
            if spec.table == Table.USERS:
                records = self._resolve_pin_conflicts(records)
            if not records:
                pushed[spec.table] = 0
                continue
            if self.remote.push_batch(spec.table, records):
                pushed[spec.table] = len(records)
            else:
                logger.warning("Push of %d %s failed", len(records), spec.name)
                pushed[spec.table] = 0
                push_ok = False
        return pushed, push_ok

    def _resolve_pin_conflicts(self, users: list[User]) -> list[User]:
        """Drop pending users whose PIN the remote knows under another id."""
        batch: list[User] = []
        for user in users:
            server_user = self.remote.find_user_by_pin(user.pin)
            if server_user is None or server_user.id == user.id:
                batch.append(user)
                continue
            resolve_user_pin_conflict(self.store, user.id, server_user.id, user)
        return batch

    def _pull(self) -> dict[Table, list]:
        snapshots = {}
        for spec in TABLE_SPECS:
            records = self.remote.fetch_all(spec.table)
            if records is None:
                logger.warning("Pull of %s failed", spec.name)
                continue
            snapshots[spec.table] = records
        return snapshots
