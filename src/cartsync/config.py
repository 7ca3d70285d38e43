"""Runtime configuration for the sync layer.

Values come from environment variables; the CLI overrides them with its own
options before building the remote client.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_PROBE_TIMEOUT = 3.0


@dataclass(frozen=True)
class SyncSettings:
    """Remote backend and reconciliation settings."""

    supabase_url: str = ""
    supabase_key: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    fallback_pin: Optional[str] = None
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT

    @property
    def remote_configured(self) -> bool:
        """True when both the backend URL and its API key are set."""
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Build settings from CARTSYNC_* environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        return cls(
            supabase_url=os.environ.get("CARTSYNC_SUPABASE_URL", "").strip(),
            supabase_key=os.environ.get("CARTSYNC_SUPABASE_KEY", "").strip(),
            request_timeout=_float_env("CARTSYNC_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            fallback_pin=os.environ.get("CARTSYNC_FALLBACK_PIN") or None,
            probe_timeout=_float_env("CARTSYNC_PROBE_TIMEOUT", DEFAULT_PROBE_TIMEOUT),
        )

    def with_overrides(self, **overrides) -> "SyncSettings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got '{raw}'")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got '{raw}'")
    return value
