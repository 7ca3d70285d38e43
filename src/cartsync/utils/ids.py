"""Record identifier generation."""

import uuid


def generate_id() -> str:
    """Return a new globally unique record ID."""
    return str(uuid.uuid4())
