"""UTC timestamps and calendar-date handling for quote days."""

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def format_storage_date(value: date) -> str:
    """Format a calendar date as YYYY-MM-DD for storage."""
    return value.strftime("%Y-%m-%d")


def parse_stored_date(value: str | date | None) -> date | None:
    """
    Parse a stored day date.

    Accepts the current YYYY-MM-DD format as well as legacy full ISO
    timestamps ("2024-05-01T00:00:00.000Z"), which are reduced to their
    calendar date. Day dates carry no timezone: they are the local date the
    shoot happens on.

    Raises ValueError if the string is not a recognizable date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if "T" in value:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return date.fromisoformat(value)


def format_display_date(value: date) -> str:
    """Short human date, e.g. 'Sat, Jun 1, 2024'."""
    return f"{value.strftime('%a, %b')} {value.day}, {value.year}"
