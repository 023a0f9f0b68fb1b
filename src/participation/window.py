"""
Search window resolution.

Turns the endpoint's date parameters into a SearchWindow:
- updated_date=YYYY-MM-DD         -> that UTC day, 00:00:00 to 23:59:59
- updated_since / updated_before  -> epoch seconds or date/datetime strings
- nothing                         -> today (UTC)
"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional, Tuple

from pydantic import ValidationError

from src.participation.models import SearchWindow
from src.utils.normalize import normalize_timestamp


class WindowError(ValueError):
    """Raised when date parameters cannot form a valid search window."""


def day_bounds(day: date) -> Tuple[int, int]:
    """Return (since, before) epoch seconds for one UTC calendar day."""
    start = datetime.combine(day, time(0, 0, 0), tzinfo=timezone.utc)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)
    return int(start.timestamp()), int(end.timestamp())


def parse_day(value: str) -> date:
    """Parse a YYYY-MM-DD string, raising WindowError on bad input."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise WindowError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def parse_time_bound(value: str) -> int:
    """Parse an epoch timestamp or date/datetime string to epoch seconds."""
    timestamp = normalize_timestamp(value)
    if timestamp is None:
        raise WindowError(f"Invalid timestamp or date: '{value}'")
    return timestamp


def _build(admin_id: Any, since: int, before: int) -> SearchWindow:
    try:
        return SearchWindow(admin_id=admin_id, since=since, before=before)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise WindowError(messages) from e


def window_for_date(admin_id: Any, day: date) -> SearchWindow:
    """SearchWindow covering a whole UTC day."""
    since, before = day_bounds(day)
    return _build(admin_id, since, before)


def resolve_window(
    admin_id: Any,
    updated_date: Optional[str] = None,
    updated_since: Optional[str] = None,
    updated_before: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[SearchWindow, str]:
    """
    Resolve endpoint parameters into a SearchWindow and a display date.

    updated_date wins over updated_since/updated_before. Both bounds must be
    given together; a lone bound falls back to today.

    Returns:
        (window, date_label) where date_label is YYYY-MM-DD

    Raises:
        WindowError: Unparseable dates or since >= before
    """
    if updated_date:
        day = parse_day(updated_date)
        return window_for_date(admin_id, day), day.isoformat()

    if updated_since and updated_before:
        since = parse_time_bound(updated_since)
        before = parse_time_bound(updated_before)
        window = _build(admin_id, since, before)
        label = datetime.fromtimestamp(since, tz=timezone.utc).date().isoformat()
        return window, label

    day = today or datetime.now(timezone.utc).date()
    return window_for_date(admin_id, day), day.isoformat()


__all__ = [
    "WindowError",
    "day_bounds",
    "parse_day",
    "parse_time_bound",
    "resolve_window",
    "window_for_date",
]
