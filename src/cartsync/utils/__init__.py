"""Utility functions for cartsync."""

from cartsync.utils.date_parser import parse_business_date, get_period_range
from cartsync.utils.amount_parser import parse_amount, parse_quantity
from cartsync.utils.ids import generate_id
from cartsync.utils.timestamps import now_iso, parse_timestamp

__all__ = [
    "parse_business_date",
    "get_period_range",
    "parse_amount",
    "parse_quantity",
    "generate_id",
    "now_iso",
    "parse_timestamp",
]
