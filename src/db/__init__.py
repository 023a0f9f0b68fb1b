"""Database module for Quality Audit."""

from .models import PullHistoryCreate, PullHistoryEntry, PullHistoryListResponse
from .connection import get_connection, init_db
from .pull_history import PullHistoryStore

__all__ = [
    "PullHistoryCreate",
    "PullHistoryEntry",
    "PullHistoryListResponse",
    "PullHistoryStore",
    "get_connection",
    "init_db",
]
