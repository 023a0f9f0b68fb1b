"""
Normalization utilities for identifiers and timestamps coming from Intercom.

Intercom is not consistent about representation:
- Admin and author ids arrive as strings ("8742044") or integers (8742044)
- Timestamps arrive as epoch seconds, epoch milliseconds, or ISO-8601 strings

Everything that compares or filters on these fields goes through the helpers
here, so the rest of the pipeline only ever sees canonical values:
- Ids are decimal strings
- Timestamps are whole-second UTC Unix time
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional


# Epoch values at or above this are milliseconds (10^10 s is the year 2286)
MILLISECONDS_THRESHOLD = 10_000_000_000

_DIGITS = re.compile(r"^\d+$")
_NUMERIC = re.compile(r"^-?\d+(\.\d+)?$")


def normalize_admin_id(value: Any) -> Optional[str]:
    """
    Canonicalize an admin/author id to a decimal string.

    Rules:
    - None, booleans and blank strings -> None
    - Integers (and integral floats) -> decimal string
    - Digit strings lose surrounding whitespace and leading zeros
    - Any other string is kept as-is (stripped)

    Examples:
        8742044 -> "8742044"
        " 8742044 " -> "8742044"
        "0123" -> "123"
        "bot_42" -> "bot_42"

    Args:
        value: Raw id value from a query parameter or upstream payload

    Returns:
        Canonical id string, or None when no id is present
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)

    text = str(value).strip()
    if not text:
        return None

    if _DIGITS.match(text):
        return str(int(text))

    return text


def normalize_timestamp(value: Any) -> Optional[int]:
    """
    Normalize an upstream timestamp to whole-second UTC Unix time.

    Numbers below MILLISECONDS_THRESHOLD are seconds; larger numbers are
    milliseconds and are floor-divided by 1000. Numeric strings behave like
    numbers. Other strings are parsed as ISO-8601 (naive values are UTC).

    Examples:
        1700000000 -> 1700000000
        1700000000000 -> 1700000000
        "2023-11-14T22:13:20Z" -> 1700000000

    Returns:
        Epoch seconds, or None if the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _seconds_from_number(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _NUMERIC.match(text):
            return _seconds_from_number(float(text))
        parsed = parse_datetime(text)
        if parsed is None:
            return None
        try:
            return int(parsed.timestamp())
        except (OverflowError, OSError, ValueError):
            return None

    return None


def _seconds_from_number(value: float) -> Optional[int]:
    if not math.isfinite(value):
        return None
    if value < MILLISECONDS_THRESHOLD:
        return int(value // 1)
    return int(value // 1000)


def parse_datetime(text: str) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or datetime string into an aware UTC datetime.

    Accepts "2025-11-10", "2025-11-10 00:00:00", "2025-11-10T00:00:00Z" and
    offsets like "+02:00". Returns None for anything else.
    """
    candidate = text.strip()
    if candidate.endswith("Z") or candidate.endswith("z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, OSError, ValueError):
        # Offset pushes the value outside datetime's range
        return None


def to_iso(timestamp: Optional[int]) -> Optional[str]:
    """
    Render epoch seconds as an ISO-8601 UTC string.

    None and values outside the representable range give None.
    """
    if timestamp is None:
        return None
    try:
        rendered = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return rendered.isoformat().replace("+00:00", "Z")
