"""
Participation Module

Finds the Intercom conversations an admin actually worked on for a given day.

Key Components:
- discover_candidates: Coarse search on teammate_ids + created/updated window
- fetch_conversation: Hydrates one candidate in plaintext
- evaluate_participation: Counts parts the admin authored inside the window
- ParticipationOrchestrator: Batches, budgets and aggregates the above
"""

from .discovery import build_search_query, discover_candidates, extract_next_cursor
from .evaluator import build_participation_record, evaluate_participation
from .fetcher import fetch_conversation
from .models import (
    BatchProgress,
    DiscoveryPage,
    ParticipationRecord,
    ParticipationResponse,
    ParticipationResult,
    Part,
    SearchWindow,
)
from .orchestrator import ParticipationOrchestrator
from .parts import normalize_parts
from .window import WindowError, resolve_window, window_for_date

__all__ = [
    "BatchProgress",
    "DiscoveryPage",
    "Part",
    "ParticipationOrchestrator",
    "ParticipationRecord",
    "ParticipationResponse",
    "ParticipationResult",
    "SearchWindow",
    "WindowError",
    "build_participation_record",
    "build_search_query",
    "discover_candidates",
    "evaluate_participation",
    "extract_next_cursor",
    "fetch_conversation",
    "normalize_parts",
    "resolve_window",
    "window_for_date",
]
