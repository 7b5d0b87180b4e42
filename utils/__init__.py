"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, format_storage_date, parse_stored_date, format_display_date
