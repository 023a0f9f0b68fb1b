"""
Participation evaluator.

Search results only tell us an admin is in a conversation's teammate set,
which includes plain assignment. A conversation counts as participation only
when the admin authored at least one part inside the search window.
"""

from typing import Any

from src.participation.models import ParticipationRecord, ParticipationResult
from src.participation.parts import normalize_parts
from src.utils.normalize import normalize_admin_id

ADMIN_AUTHOR_TYPE = "admin"


def evaluate_participation(
    conversation: dict,
    admin_id: Any,
    since: int,
    before: int,
) -> ParticipationResult:
    """
    Count the parts authored by `admin_id` within [since, before].

    A part counts only if all hold:
    - author type is "admin" (bots, users and leads never count)
    - the canonical author id equals the canonical admin id
    - its normalized created_at lies in [since, before], inclusive

    Parts missing an author id or a usable timestamp are skipped individually.

    Args:
        conversation: Hydrated conversation dict from Intercom
        admin_id: Target admin id (string or integer)
        since: Window start, epoch seconds
        before: Window end, epoch seconds

    Returns:
        ParticipationResult with matched = part_count > 0
    """
    target = normalize_admin_id(admin_id)
    if target is None:
        return ParticipationResult(matched=False, part_count=0)

    part_count = 0
    for part in normalize_parts(conversation):
        if part.author_type != ADMIN_AUTHOR_TYPE:
            continue
        if part.author_id is None or part.author_id != target:
            continue
        if part.created_at is None:
            continue
        if since <= part.created_at <= before:
            part_count += 1

    return ParticipationResult(matched=part_count > 0, part_count=part_count)


def build_participation_record(
    conversation: dict,
    admin_id: Any,
    since: int,
    before: int,
) -> ParticipationRecord:
    """Evaluate a conversation and wrap the verdict as a ParticipationRecord."""
    result = evaluate_participation(conversation, admin_id, since, before)
    return ParticipationRecord(
        conversation_id=str(conversation.get("id")),
        admin_id=normalize_admin_id(admin_id) or "",
        matched_part_count=result.part_count,
        matched=result.matched,
    )
