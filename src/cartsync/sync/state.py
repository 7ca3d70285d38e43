"""Projection of the user-facing sync indicator."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SyncIndicator(str, Enum):
    SYNCED = "synced"
    PENDING = "pending"
    SYNCING = "syncing"
    OFFLINE = "offline"


@dataclass(frozen=True)
class SyncState:
    """What the UI shows about synchronization."""

    status: SyncIndicator
    pending_count: int
    last_sync_time: Optional[str] = None

    def describe(self) -> str:
        if self.status == SyncIndicator.PENDING:
            return f"pending ({self.pending_count})"
        return self.status.value


def project_state(
    connected: bool,
    syncing: bool,
    pending_count: int,
    last_sync_time: Optional[str] = None,
) -> SyncState:
    """Derive the indicator from connectivity, the engine flag and pending rows.

    Offline overrides everything, then an in-flight cycle, then outstanding
    local changes.
    """
    if not connected:
        status = SyncIndicator.OFFLINE
    elif syncing:
        status = SyncIndicator.SYNCING
    elif pending_count > 0:
        status = SyncIndicator.PENDING
    else:
        status = SyncIndicator.SYNCED
    return SyncState(status=status, pending_count=pending_count, last_sync_time=last_sync_time)
