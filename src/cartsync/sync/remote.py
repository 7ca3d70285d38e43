"""Remote store client.

The reconciliation engine only needs per-table fetch, bulk upsert and delete
plus a PIN lookup. ``SupabaseRemoteStore`` provides them over Supabase's
PostgREST endpoint; every failure is logged and reported as ``None`` or
``False`` so one table's failure never aborts the rest of a sync cycle.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests

from cartsync.config import DEFAULT_REQUEST_TIMEOUT, SyncSettings
from cartsync.domain.entities import Table, User
from cartsync.domain.errors import RemoteStoreError
from cartsync.sync.tables import spec_for

logger = logging.getLogger(__name__)


class RemoteStore(ABC):
    """Interface of the remote backend as seen by the reconciliation engine."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether a remote backend is configured at all."""
        pass

    @abstractmethod
    def fetch_all(self, table: Table) -> Optional[list[Any]]:
        """Fetch the table's current remote state.

        Returns:
            Decoded records, or None on failure (distinct from an empty table)
        """
        pass

    @abstractmethod
    def push_batch(self, table: Table, records: list[Any]) -> bool:
        """Upsert records by ID. Returns True on success."""
        pass

    @abstractmethod
    def delete_by_id(self, table: Table, record_id: str) -> bool:
        """Delete one remote record. Returns True on success."""
        pass

    @abstractmethod
    def find_user_by_pin(self, pin: str) -> Optional[User]:
        """Look up the remote user owning a PIN (None if absent or on failure)."""
        pass


class SupabaseRemoteStore(RemoteStore):
    """Remote store backed by a Supabase project's REST API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            url: Project URL (e.g., 'https://abc.supabase.co'); empty means unconfigured
            api_key: Project API key; empty means unconfigured
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session (mainly for tests)
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()
        if api_key:
            self._session.headers.update(
                {
                    "apikey": api_key,
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                }
            )

    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)

    def _endpoint(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs) -> requests.Response:
        """Send one request, raising RemoteStoreError on any failure."""
        if not self.is_configured():
            raise RemoteStoreError("Remote store is not configured")
        try:
            response = self._session.request(
                method, self._endpoint(table), timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise RemoteStoreError(f"{method} {table} failed: {e}") from e
        return response

    def fetch_all(self, table: Table) -> Optional[list[Any]]:
        spec = spec_for(table)
        params = {"select": "*"}
        if spec.order_by:
            params["order"] = spec.order_by
        if spec.limit:
            params["limit"] = str(spec.limit)
        try:
            rows = self._request("GET", spec.name, params=params).json()
            return [spec.decode(row) for row in rows]
        except (RemoteStoreError, ValueError, TypeError) as e:
            logger.warning("Error fetching %s from remote: %s", spec.name, e)
            return None

    def push_batch(self, table: Table, records: list[Any]) -> bool:
        if not records:
            return True
        spec = spec_for(table)
        try:
            self._request(
                "POST",
                spec.name,
                params={"on_conflict": "id"},
                json=[spec.encode(record) for record in records],
                headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
        except RemoteStoreError as e:
            logger.warning("Error pushing %d %s to remote: %s", len(records), spec.name, e)
            return False
        return True

    def delete_by_id(self, table: Table, record_id: str) -> bool:
        try:
            self._request("DELETE", table.value, params={"id": f"eq.{record_id}"})
        except RemoteStoreError as e:
            logger.warning("Error deleting %s %s from remote: %s", table.value, record_id, e)
            return False
        return True

    def find_user_by_pin(self, pin: str) -> Optional[User]:
        spec = spec_for(Table.USERS)
        try:
            rows = self._request(
                "GET", spec.name, params={"select": "*", "pin": f"eq.{pin}", "limit": "1"}
            ).json()
            return spec.decode(rows[0]) if rows else None
        except (RemoteStoreError, ValueError, TypeError) as e:
            logger.warning("Error finding user by PIN: %s", e)
            return None


def create_remote_store(settings: SyncSettings) -> SupabaseRemoteStore:
    """Build the remote client from settings (unconfigured if URL or key is empty)."""
    return SupabaseRemoteStore(
        settings.supabase_url,
        settings.supabase_key,
        timeout=settings.request_timeout,
    )
