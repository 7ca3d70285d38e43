"""Business-day parsing for sales and expense entry."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def parse_business_date(value: str, today: Optional[date] = None) -> date:
    """Parse the business day a sale or expense is posted to.

    Accepts ISO and free-form dates ("2024-03-15", "Mar 15 2024") plus the
    relative forms cart staff actually type: "today", "yesterday", a weekday
    name (the most recent such day, never in the future) and "N days ago".

    Args:
        value: Date text
        today: Reference day (defaults to the current date)

    Returns:
        The business day

    Raises:
        ValueError: If the text cannot be parsed
    """
    text = value.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text in _WEEKDAYS:
        days_ago = (today.weekday() - _WEEKDAYS.index(text)) % 7
        return today - timedelta(days=days_ago)
    if text.endswith(" days ago"):
        count = text[: -len(" days ago")].strip()
        if not count.isdigit():
            raise ValueError(f"Could not parse date '{value}'")
        return today - timedelta(days=int(count))

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")


def get_period_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the inclusive day range of a named reporting period.

    Args:
        period: One of today, yesterday, this-week, last-week, this-month, last-month
        today: Reference day (defaults to the current date)

    Returns:
        (start_date, end_date)

    Raises:
        ValueError: If the period is not recognized
    """
    key = period.strip().lower()
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    first_of_month = today.replace(day=1)

    if key == "today":
        return (today, today)
    if key == "yesterday":
        day = today - timedelta(days=1)
        return (day, day)
    if key == "this-week":
        return (monday, today)
    if key == "last-week":
        start = monday - timedelta(days=7)
        return (start, start + timedelta(days=6))
    if key == "this-month":
        return (first_of_month, today)
    if key == "last-month":
        return (first_of_month - relativedelta(months=1), first_of_month - timedelta(days=1))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: today, yesterday, "
        "this-week, last-week, this-month, last-month"
    )
