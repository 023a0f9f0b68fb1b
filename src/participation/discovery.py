"""
Candidate discovery via the Intercom Search API.

Finds every conversation where the admin is in the teammate set and that was
either created or updated inside the window. The result is a superset:
being in teammate_ids includes plain assignment, so the evaluator has to
confirm actual participation afterwards.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import parse_qs, urlsplit

import aiohttp

from src.intercom_client import IntercomClient
from src.participation.models import DiscoveryPage, SearchWindow

logger = logging.getLogger(__name__)

MAX_CONVERSATIONS = 150


def build_search_query(window: SearchWindow) -> dict:
    """
    Build the OR-of-ANDs query for created-in-window or updated-in-window.

    Intercom expects teammate_ids as a string, and its > / < operators are
    strict, so the search is a little narrower at the edges than the
    evaluator's inclusive window.
    """
    clauses = []
    for field in ("created_at", "updated_at"):
        clauses.append(
            {
                "operator": "AND",
                "value": [
                    {"field": "teammate_ids", "operator": "=", "value": window.admin_id},
                    {"field": field, "operator": ">", "value": window.since},
                    {"field": field, "operator": "<", "value": window.before},
                ],
            }
        )
    return {"operator": "OR", "value": clauses}


def extract_next_cursor(pages: Any) -> Optional[str]:
    """
    Pull the continuation cursor out of a search response's `pages` block.

    `pages.next` has been seen as:
    - a bare cursor string
    - a URL or query string carrying starting_after=...
    - an object with `starting_after` or `cursor`

    Anything unrecognised yields None, which callers treat as "no more pages".
    """
    if not isinstance(pages, dict):
        return None

    next_page = pages.get("next")
    if not next_page:
        return None

    if isinstance(next_page, str):
        if "?" in next_page or "starting_after=" in next_page:
            query = urlsplit(next_page).query if "?" in next_page else next_page
            values = parse_qs(query).get("starting_after")
            return values[0] if values else None
        return next_page

    if isinstance(next_page, dict):
        cursor = next_page.get("starting_after") or next_page.get("cursor")
        if isinstance(cursor, str) and cursor:
            return cursor
        return None

    return None


def _unique_ids(conversations: List[Any]) -> List[str]:
    seen = set()
    ids = []
    for conv in conversations:
        if not isinstance(conv, dict) or conv.get("id") is None:
            continue
        conv_id = str(conv["id"])
        if conv_id in seen:
            continue
        seen.add(conv_id)
        ids.append(conv_id)
    return ids


async def discover_candidates(
    client: IntercomClient,
    session: aiohttp.ClientSession,
    window: SearchWindow,
    cursor: Optional[str] = None,
    max_conversations: int = MAX_CONVERSATIONS,
) -> DiscoveryPage:
    """
    Run one search page and return the candidate ids.

    Args:
        client: IntercomClient
        session: Open aiohttp session from client.create_session()
        window: Admin and time window
        cursor: starting_after cursor from a previous page
        max_conversations: Hard cap on returned ids

    Returns:
        DiscoveryPage with de-duplicated ids in upstream order

    Raises:
        IntercomAPIError: Search failed; not retried
    """
    logger.info(
        f"Searching conversations: admin={window.admin_id}, "
        f"window={window.since}..{window.before}, cursor={'<present>' if cursor else None}"
    )

    data = await client.search_conversations_async(
        session,
        build_search_query(window),
        per_page=max_conversations,
        starting_after=cursor,
    )

    ids = _unique_ids(data.get("conversations") or [])[:max_conversations]
    total_count = data.get("total_count") or len(ids)
    pages = data.get("pages") if isinstance(data.get("pages"), dict) else None
    next_cursor = extract_next_cursor(pages)

    logger.info(f"Found {len(ids)} candidate conversations (total: {total_count})")
    if next_cursor:
        logger.info("More search results available after this page")

    return DiscoveryPage(
        conversation_ids=ids,
        intercom_total_count=total_count,
        next_cursor=next_cursor,
        has_more_pages=next_cursor is not None,
        pages=pages,
    )
