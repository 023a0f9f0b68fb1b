"""
Row formatting for the admin conversations table.

Pulls client name/email, subject, rating and dates out of raw Intercom
conversation dicts, which put the same information in several places.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

SUBJECT_PREVIEW_CHARS = 100


def _first_contact(container: Any) -> Dict[str, Any]:
    if isinstance(container, dict):
        contacts = container.get("contacts")
        if isinstance(contacts, list) and contacts and isinstance(contacts[0], dict):
            return contacts[0]
    return {}


def _parts(conversation: dict) -> List[dict]:
    container = conversation.get("conversation_parts")
    if isinstance(container, list):
        return [p for p in container if isinstance(p, dict)]
    if isinstance(container, dict):
        for key in ("conversation_parts", "parts"):
            inner = container.get(key)
            if isinstance(inner, list):
                return [p for p in inner if isinstance(p, dict)]
    return []


def extract_client_name(conversation: dict) -> str:
    """Client name from source author, contacts, or the first user-authored part."""
    source = conversation.get("source") or {}
    author = source.get("author") or {}
    if author.get("name"):
        return author["name"]

    for container in (conversation.get("contacts"), source.get("contacts")):
        name = _first_contact(container).get("name")
        if name:
            return name

    for part in _parts(conversation):
        part_author = part.get("author") or {}
        if part_author.get("type") in ("user", "contact") and part_author.get("name"):
            return part_author["name"]

    return "Unknown"


def extract_client_email(conversation: dict) -> str:
    source = conversation.get("source") or {}
    author = source.get("author") or {}
    if author.get("email"):
        return author["email"]

    for container in (conversation.get("contacts"), source.get("contacts")):
        email = _first_contact(container).get("email")
        if email:
            return email

    return ""


def get_conversation_rating(conversation: dict) -> Optional[int]:
    """Rating 1-5, or None when absent or out of range."""
    rating_block = conversation.get("conversation_rating") or {}
    if not isinstance(rating_block, dict):
        return None
    try:
        rating = int(rating_block.get("rating"))
    except (TypeError, ValueError):
        return None
    if 1 <= rating <= 5:
        return rating
    return None


def subject_preview(conversation: dict) -> str:
    source = conversation.get("source") or {}
    subject = source.get("subject") or ""
    if not subject:
        parts = _parts(conversation)
        subject = (parts[0].get("body") or "") if parts else ""
    if not subject:
        return "No subject"
    if len(subject) > SUBJECT_PREVIEW_CHARS:
        return subject[:SUBJECT_PREVIEW_CHARS] + "..."
    return subject


def format_timestamp(timestamp: Optional[int]) -> str:
    """DD/MM/YYYY HH:MM in UTC, or N/A."""
    if not timestamp:
        return "N/A"
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%d/%m/%Y %H:%M")
    except (OverflowError, OSError, ValueError):
        return "N/A"


def pull_date_for(query: Optional[dict]) -> Optional[str]:
    """The day a load can be recorded under, or None for multi-day loads."""
    if not query or query.get("start") != query.get("end"):
        return None
    return query["start"]


def to_table_row(conversation: dict) -> Dict[str, Any]:
    """One row for the conversations table."""
    rating = get_conversation_rating(conversation)
    return {
        "Client": extract_client_name(conversation),
        "Email": extract_client_email(conversation),
        "Conversation ID": str(conversation.get("id", "N/A")),
        "Subject": subject_preview(conversation),
        "Rating": "★" * rating if rating else "",
        "State": conversation.get("state") or "unknown",
        "Replies": conversation.get("participation_part_count", 0),
        "Created": format_timestamp(conversation.get("created_at")),
        "Updated": format_timestamp(conversation.get("updated_at")),
    }
