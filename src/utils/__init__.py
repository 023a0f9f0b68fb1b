"""Utility modules for Quality Audit."""

from .normalize import (
    MILLISECONDS_THRESHOLD,
    normalize_admin_id,
    normalize_timestamp,
    parse_datetime,
    to_iso,
)

__all__ = [
    "MILLISECONDS_THRESHOLD",
    "normalize_admin_id",
    "normalize_timestamp",
    "parse_datetime",
    "to_iso",
]
