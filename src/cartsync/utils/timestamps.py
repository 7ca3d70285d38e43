"""Timestamp helpers.

Records carry ISO-8601 text timestamps so they round-trip unchanged through
the local database and the remote store.
"""

from datetime import datetime, UTC

from dateutil import parser as date_parser


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are assumed to be UTC so local and remote timestamps compare
    safely against each other.

    Raises:
        ValueError: If the value is not a parseable timestamp
    """
    try:
        parsed = date_parser.isoparse(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not parse timestamp '{value}': {e}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
