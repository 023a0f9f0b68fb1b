"""
Conversation part adapter.

Intercom's conversation payload does not have a stable shape for its parts.
Observed variants of the `conversation_parts` field:

    [ {...}, {...} ]                                   flat list
    {"type": "conversation_part.list",
     "conversation_parts": [ {...} ]}                  wrapped (API default)
    {"parts": [ {...} ]}                               wrapped, short key
    missing / None / anything else                     no parts

normalize_parts() is the only place that knows about these shapes; everything
downstream works on a list of Part models.
"""

import logging
from typing import Any, List, Optional

from src.participation.models import Part
from src.utils.normalize import normalize_admin_id, normalize_timestamp

logger = logging.getLogger(__name__)

WRAPPER_KEYS = ("conversation_parts", "parts")


def raw_parts(conversation: dict) -> List[Any]:
    """Return the raw part list from any known conversation_parts shape."""
    container = conversation.get("conversation_parts")

    if isinstance(container, list):
        return container

    if isinstance(container, dict):
        for key in WRAPPER_KEYS:
            inner = container.get(key)
            if isinstance(inner, list):
                return inner

    return []


def to_part(raw: Any) -> Optional[Part]:
    """Convert one raw part dict to a Part; None for non-dict entries."""
    if not isinstance(raw, dict):
        return None

    author = raw.get("author")
    if not isinstance(author, dict):
        author = {}

    part_id = raw.get("id")
    return Part(
        id=str(part_id) if part_id is not None else None,
        part_type=raw.get("part_type"),
        author_type=author.get("type"),
        author_id=normalize_admin_id(author.get("id")),
        author_name=author.get("name"),
        body=raw.get("body") if isinstance(raw.get("body"), str) else None,
        created_at=normalize_timestamp(raw.get("created_at")),
    )


def normalize_parts(conversation: dict) -> List[Part]:
    """
    Canonical Part list for a hydrated conversation.

    Entries that are not objects are dropped with a debug log; entries with
    missing author or timestamp are kept (with None fields) and left for the
    evaluator to skip.
    """
    parts = []
    for raw in raw_parts(conversation):
        part = to_part(raw)
        if part is None:
            logger.debug(
                f"Dropping malformed part in conversation {conversation.get('id')}: {type(raw).__name__}"
            )
            continue
        parts.append(part)
    return parts
