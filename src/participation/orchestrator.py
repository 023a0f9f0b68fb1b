"""
Participation Orchestrator

Drives discovery, fetching and evaluation for one admin/window request:

    discover_candidates()  ->  [id, id, ...]            (one search page)
    batches of BATCH_SIZE  ->  fetch_conversation() x N  (concurrent)
                           ->  evaluate_participation()
    aggregate              ->  ParticipationResponse

Batch N is fully fetched and evaluated before batch N+1 starts, which bounds
in-flight requests to the batch size. The time budget is checked at batch
boundaries, and every fetch gets its own deadline derived from the remaining
budget, so a single hung request cannot overrun it.
"""

import asyncio
import logging
import os
import time
from typing import Callable, List, Optional

import aiohttp

from src.intercom_client import IntercomClient
from src.participation.discovery import MAX_CONVERSATIONS, discover_candidates
from src.participation.evaluator import build_participation_record
from src.participation.fetcher import fetch_conversation
from src.participation.models import BatchProgress, ParticipationResponse, SearchWindow
from src.utils.normalize import normalize_timestamp, to_iso

logger = logging.getLogger(__name__)


class ParticipationOrchestrator:
    """Runs the coarse-search + exact-verify pipeline for one request."""

    # Runtime configuration knobs, clamped to sane ranges
    BATCH_SIZE = max(1, min(50, int(os.getenv("PARTICIPATION_BATCH_SIZE", "10"))))
    BATCH_DELAY = max(0, min(5000, int(os.getenv("PARTICIPATION_BATCH_DELAY_MS", "100")))) / 1000
    TIME_BUDGET = max(10.0, min(600.0, float(os.getenv("PARTICIPATION_TIME_BUDGET_SECONDS", "60"))))
    FETCH_TIMEOUT = max(1.0, min(120.0, float(os.getenv("PARTICIPATION_FETCH_TIMEOUT_SECONDS", "30"))))

    # Stop starting new batches this close to the budget
    TIMEOUT_BUFFER = 5.0
    MIN_FETCH_TIMEOUT = 1.0

    def __init__(
        self,
        client: IntercomClient,
        batch_size: Optional[int] = None,
        batch_delay: Optional[float] = None,
        time_budget: Optional[float] = None,
        timeout_buffer: Optional[float] = None,
        fetch_timeout: Optional[float] = None,
        max_conversations: int = MAX_CONVERSATIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.batch_size = batch_size if batch_size is not None else self.BATCH_SIZE
        self.batch_delay = batch_delay if batch_delay is not None else self.BATCH_DELAY
        self.time_budget = time_budget if time_budget is not None else self.TIME_BUDGET
        self.timeout_buffer = timeout_buffer if timeout_buffer is not None else self.TIMEOUT_BUFFER
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else self.FETCH_TIMEOUT
        self.max_conversations = max_conversations
        self.clock = clock

    async def run(
        self,
        window: SearchWindow,
        cursor: Optional[str] = None,
        date_label: Optional[str] = None,
    ) -> ParticipationResponse:
        """
        Discover, verify and assemble the response for one search page.

        Raises:
            IntercomAPIError: Discovery failed (fatal, no partial results)
        """
        started_at = self.clock()
        label = date_label or ""

        async with self.client.create_session() as session:
            page = await discover_candidates(
                self.client, session, window, cursor=cursor, max_conversations=self.max_conversations
            )

            if not page.conversation_ids:
                return ParticipationResponse(
                    conversations=[],
                    total_count=0,
                    intercom_total_count=page.intercom_total_count,
                    has_more=False,
                    next_cursor=None,
                    pages=page.pages,
                    admin_id=window.admin_id,
                    date=label,
                    participation_count=0,
                )

            logger.info(f"Fetching {len(page.conversation_ids)} conversations to check participation")
            progress = await self.process_candidates(
                session, page.conversation_ids, window, started_at=started_at
            )

        has_more = (
            page.has_more_pages
            or len(page.conversation_ids) >= self.max_conversations
            or progress.timed_out
        )

        logger.info(
            f"Completed: {len(progress.results)} conversations with participation out of "
            f"{progress.processed_count} processed ({progress.error_count} errors), "
            f"{progress.participation_count} participation parts, {progress.elapsed_ms}ms"
        )

        return ParticipationResponse(
            conversations=progress.results,
            total_count=len(progress.results),
            intercom_total_count=page.intercom_total_count,
            has_more=has_more,
            next_cursor=page.next_cursor,
            pages=page.pages,
            admin_id=window.admin_id,
            date=label,
            participation_count=progress.participation_count,
            processed_count=progress.processed_count,
            error_count=progress.error_count,
            timed_out=progress.timed_out,
            unprocessed_count=progress.unprocessed_count,
        )

    async def process_candidates(
        self,
        session: aiohttp.ClientSession,
        candidate_ids: List[str],
        window: SearchWindow,
        started_at: Optional[float] = None,
    ) -> BatchProgress:
        """
        Fetch and evaluate candidates batch by batch.

        Args:
            session: Shared aiohttp session
            candidate_ids: Ids from discovery (duplicates are dropped)
            window: Admin and time window
            started_at: clock() value the budget counts from (default: now)

        Returns:
            BatchProgress with matched conversations ranked by participation
        """
        start = started_at if started_at is not None else self.clock()
        ids = list(dict.fromkeys(candidate_ids))
        progress = BatchProgress()
        matched = []

        for offset in range(0, len(ids), self.batch_size):
            elapsed = self.clock() - start
            if elapsed >= self.time_budget - self.timeout_buffer:
                progress.timed_out = True
                progress.unprocessed_count = len(ids) - offset
                logger.warning(
                    f"Time budget nearly spent ({elapsed:.1f}s of {self.time_budget:.0f}s), "
                    f"stopping with {progress.unprocessed_count} conversations unprocessed"
                )
                break

            batch = ids[offset:offset + self.batch_size]
            logger.info(
                f"Processing batch {offset // self.batch_size + 1}: "
                f"conversations {offset + 1}-{offset + len(batch)}"
            )

            remaining = self.time_budget - elapsed
            deadline = max(self.MIN_FETCH_TIMEOUT, min(self.fetch_timeout, remaining))
            conversations = await asyncio.gather(
                *(fetch_conversation(self.client, session, conv_id, timeout=deadline) for conv_id in batch)
            )

            for conversation in conversations:
                if conversation is None:
                    progress.error_count += 1
                    continue

                progress.processed_count += 1
                record = build_participation_record(conversation, window.admin_id, window.since, window.before)
                if record.matched:
                    matched.append(self._annotate(conversation, record.matched_part_count))

            if offset + self.batch_size < len(ids):
                await asyncio.sleep(self.batch_delay)

        # Stable sort keeps discovery order among equal counts
        matched.sort(key=lambda conv: conv["participation_part_count"], reverse=True)
        progress.results = matched
        progress.elapsed_ms = int((self.clock() - start) * 1000)
        return progress

    @staticmethod
    def _annotate(conversation: dict, part_count: int) -> dict:
        """Copy of the conversation with normalized timestamps and the part count."""
        created_at = normalize_timestamp(conversation.get("created_at"))
        updated_at = normalize_timestamp(conversation.get("updated_at"))
        annotated = dict(conversation)
        annotated.update(
            {
                "id": str(conversation.get("id")),
                "created_at": created_at,
                "updated_at": updated_at,
                "created_at_iso": to_iso(created_at),
                "updated_at_iso": to_iso(updated_at),
                "participation_part_count": part_count,
            }
        )
        return annotated
