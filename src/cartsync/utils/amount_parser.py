"""Money and quantity parsing."""

import re
from decimal import Decimal, InvalidOperation

_CURRENCY = re.compile(r"[₱$]|php|PHP")


def parse_amount(text: str, allow_negative: bool = False) -> Decimal:
    """Parse a peso amount typed at the cart.

    Handles "120", "₱1,250.50", "$3.75", "PHP 99" and, when
    ``allow_negative`` is set, "-5" and "(5)".

    Args:
        text: Amount text
        allow_negative: Accept negative values

    Returns:
        Decimal amount

    Raises:
        ValueError: If the text is empty, not a number, or negative when not allowed
    """
    if not text or not text.strip():
        raise ValueError("Empty amount")

    cleaned = text.strip()
    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1]
    cleaned = _CURRENCY.sub("", cleaned).replace(",", "").strip()
    if cleaned.startswith("-"):
        negative = not negative
        cleaned = cleaned[1:].strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{text}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{text}'")

    if negative:
        amount = -amount
    if amount < 0 and not allow_negative:
        raise ValueError(f"Amount cannot be negative: '{text}'")
    return amount


def parse_quantity(text: str) -> Decimal:
    """Parse a non-negative stock quantity (no currency symbols)."""
    try:
        quantity = Decimal(text.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(f"Could not parse quantity '{text}'")
    if not quantity.is_finite() or quantity < 0:
        raise ValueError(f"Quantity must be a non-negative number, got '{text}'")
    return quantity
