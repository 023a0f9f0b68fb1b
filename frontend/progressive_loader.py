"""
Progressive loader for participation-filtered conversations.

Requests one server page at a time (following next_cursor) and accumulates
rows so the page can render the first 20 as soon as they arrive while later
pages keep loading in the background.

    IDLE -> FETCHING(n) -> MORE_AVAILABLE -> FETCHING(n+1) ... -> DONE
    FETCHING(n) -> FAILED (request error or malformed response)

Every load gets its own session id. Starting a new load makes the previous
session stale: anything a stale loop delivers afterwards is discarded and the
loop stops at its next step, so an old run can never write into a new one.
"""

import logging
import math
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import requests

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MORE_AVAILABLE = "more_available"
    DONE = "done"
    FAILED = "failed"


class PageState(str, Enum):
    READY = "ready"        # rows for this page are present
    LOADING = "loading"    # beyond current rows, within the projected total, still fetching
    DISABLED = "disabled"  # beyond any known or projected page


@dataclass(frozen=True)
class LoadSnapshot:
    """Immutable view of one load session, for rendering."""

    session_id: Optional[str] = None
    status: LoadStatus = LoadStatus.IDLE
    rows: Tuple[dict, ...] = ()
    pages_fetched: int = 0
    known_total: int = 0
    participation_count: int = 0
    error_count: int = 0
    error: Optional[str] = None
    page_size: int = 20

    # Extra placeholder pages shown while the total is still unknown
    LOOKAHEAD_PAGES = 2

    @property
    def is_loading(self) -> bool:
        return self.status in (LoadStatus.FETCHING, LoadStatus.MORE_AVAILABLE)

    @property
    def available_pages(self) -> int:
        return math.ceil(len(self.rows) / self.page_size)

    @property
    def projected_pages(self) -> int:
        if not self.is_loading:
            return self.available_pages
        return max(
            math.ceil(self.known_total / self.page_size),
            self.available_pages + self.LOOKAHEAD_PAGES,
        )

    def page_state(self, page: int) -> PageState:
        if 1 <= page <= self.available_pages:
            return PageState.READY
        if self.is_loading and 1 <= page <= self.projected_pages:
            return PageState.LOADING
        return PageState.DISABLED

    def page_rows(self, page: int) -> List[dict]:
        """Rows shown on a 1-based UI page (empty if not ready)."""
        if self.page_state(page) is not PageState.READY:
            return []
        start = (page - 1) * self.page_size
        return list(self.rows[start:start + self.page_size])

    @property
    def progress_text(self) -> str:
        ready = self.available_pages
        plural = "s" if ready != 1 else ""
        if self.status is LoadStatus.DONE:
            return f"All conversations loaded ({len(self.rows)} total)"
        if self.status is LoadStatus.FAILED:
            return f"Loading failed after {len(self.rows)} conversations: {self.error}"
        if self.is_loading:
            return (
                f"Loading... Page {self.pages_fetched + 1} "
                f"({len(self.rows)} conversations, {ready} page{plural} ready)"
            )
        return ""


@dataclass
class _LoadSession:
    session_id: str
    admin_id: str
    updated_since: str
    updated_before: str
    status: LoadStatus = LoadStatus.IDLE
    rows: List[dict] = field(default_factory=list)
    pages_fetched: int = 0
    known_total: int = 0
    participation_count: int = 0
    error_count: int = 0
    error: Optional[str] = None


class ProgressiveLoader:
    """Background page loop over the conversations endpoint."""

    def __init__(
        self,
        api,
        page_size: int = 20,
        max_pages: int = 100,
        on_update: Optional[Callable[[LoadSnapshot], None]] = None,
    ):
        """
        Args:
            api: QualityAuditAPI (anything with get_admin_conversations)
            page_size: Rows per UI page
            max_pages: Safety cap on server pages per load
            on_update: Called with a fresh snapshot after every accepted change
        """
        self.api = api
        self.page_size = page_size
        self.max_pages = max_pages
        self.on_update = on_update
        self._lock = threading.Lock()
        self._current: Optional[_LoadSession] = None
        self._thread: Optional[threading.Thread] = None

    def start(
        self,
        admin_id: str,
        updated_since: str,
        updated_before: str,
        background: bool = True,
    ) -> str:
        """
        Begin a fresh load, superseding any load in progress.

        Returns:
            The new session id
        """
        session = _LoadSession(
            session_id=uuid.uuid4().hex,
            admin_id=admin_id,
            updated_since=updated_since,
            updated_before=updated_before,
        )
        with self._lock:
            self._current = session

        logger.info(f"Starting load {session.session_id} for admin {admin_id}")

        if background:
            self._thread = threading.Thread(
                target=self._run,
                args=(session.session_id, admin_id, updated_since, updated_before),
                daemon=True,
            )
            self._thread.start()
        else:
            self._run(session.session_id, admin_id, updated_since, updated_before)

        return session.session_id

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the most recent background load finishes."""
        if self._thread is not None:
            self._thread.join(timeout)

    def is_current(self, session_id: str) -> bool:
        with self._lock:
            return self._current is not None and self._current.session_id == session_id

    def snapshot(self) -> LoadSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> LoadSnapshot:
        session = self._current
        if session is None:
            return LoadSnapshot(page_size=self.page_size)
        return LoadSnapshot(
            session_id=session.session_id,
            status=session.status,
            rows=tuple(session.rows),
            pages_fetched=session.pages_fetched,
            known_total=session.known_total,
            participation_count=session.participation_count,
            error_count=session.error_count,
            error=session.error,
            page_size=self.page_size,
        )

    def _update(self, session_id: str, mutate: Callable[[_LoadSession], None]) -> bool:
        """Apply `mutate` if session_id is still current. False means stale."""
        with self._lock:
            session = self._current
            if session is None or session.session_id != session_id:
                return False
            mutate(session)
            snapshot = self._snapshot_locked()

        if self.on_update is not None:
            self.on_update(snapshot)
        return True

    def _run(self, session_id: str, admin_id: str, updated_since: str, updated_before: str) -> None:
        try:
            self._load_pages(session_id, admin_id, updated_since, updated_before)
        except Exception as e:
            # A load never stays in FETCHING once its loop has exited
            logger.exception(f"Load {session_id} stopped unexpectedly")
            self._update(session_id, lambda s: _fail(s, f"Unexpected error: {e}"))

    def _load_pages(self, session_id: str, admin_id: str, updated_since: str, updated_before: str) -> None:
        cursor = None
        page = 0
        finished_cleanly = False

        while page < self.max_pages:
            page += 1
            if not self._update(session_id, lambda s: setattr(s, "status", LoadStatus.FETCHING)):
                logger.info(f"Load {session_id} superseded, stopping before page {page}")
                return

            try:
                data = self.api.get_admin_conversations(
                    admin_id, updated_since, updated_before, starting_after=cursor
                )
            except requests.RequestException as e:
                logger.error(f"Load {session_id} failed on page {page}: {e}")
                self._update(session_id, lambda s: _fail(s, str(e)))
                return

            if not self._update(session_id, lambda s: _accept_page(s, data)):
                logger.info(f"Discarding page {page} from superseded load {session_id}")
                return

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                finished_cleanly = True
                break

            if not self._update(session_id, lambda s: setattr(s, "status", LoadStatus.MORE_AVAILABLE)):
                return

        if not finished_cleanly:
            logger.warning(f"Load {session_id} hit the {self.max_pages}-page safety cap")

        self._update(session_id, lambda s: setattr(s, "status", LoadStatus.DONE))
        snapshot = self.snapshot()
        if snapshot.session_id == session_id:
            logger.info(
                f"Finished load {session_id}: {len(snapshot.rows)} conversations "
                f"across {snapshot.pages_fetched} page(s)"
            )


def _accept_page(session: _LoadSession, data: dict) -> None:
    conversations = data.get("conversations")
    if isinstance(conversations, list):
        session.rows.extend(conv for conv in conversations if isinstance(conv, dict))
    session.pages_fetched += 1
    session.known_total = max(session.known_total, int(data.get("intercom_total_count") or 0))
    session.participation_count += int(data.get("participation_count") or 0)
    session.error_count += int(data.get("error_count") or 0)


def _fail(session: _LoadSession, message: str) -> None:
    session.status = LoadStatus.FAILED
    session.error = message


__all__ = ["LoadSnapshot", "LoadStatus", "PageState", "ProgressiveLoader"]
