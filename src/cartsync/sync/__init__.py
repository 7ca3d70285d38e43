"""Offline-first reconciliation between the local store and the remote."""

from cartsync.sync.connectivity import (
    ConnectivityMonitor,
    ManualConnectivityMonitor,
    ProbeConnectivityMonitor,
)
from cartsync.sync.engine import SyncEngine, SyncReason, SyncResult
from cartsync.sync.remote import RemoteStore, SupabaseRemoteStore, create_remote_store
from cartsync.sync.state import SyncIndicator, SyncState, project_state

__all__ = [
    "ConnectivityMonitor",
    "ManualConnectivityMonitor",
    "ProbeConnectivityMonitor",
    "RemoteStore",
    "SupabaseRemoteStore",
    "create_remote_store",
    "SyncEngine",
    "SyncIndicator",
    "SyncReason",
    "SyncResult",
    "SyncState",
    "project_state",
]
