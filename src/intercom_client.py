"""
Intercom API client for the participation pipeline.

Wraps the handful of Intercom endpoints the audit tooling needs:
- POST /conversations/search (candidate discovery)
- GET /conversations/{id} (full conversation with parts)
- GET /admins, GET /teams (passthrough listings)

Supports both sync and async modes:
- Sync: Uses requests.Session (for CLI, simple scripts)
- Async: Uses aiohttp (for the participation pipeline and FastAPI)

Requests are NOT retried. A failed search is fatal for the caller and a
failed conversation fetch only shrinks the batch, so both layers decide for
themselves what to do with an IntercomAPIError.
"""

import logging
import os
from typing import Optional

import aiohttp
import requests

logger = logging.getLogger(__name__)


class IntercomAPIError(Exception):
    """Non-success response from the Intercom API.

    Keeps the upstream status and body so they can be surfaced to the caller
    for diagnostics.
    """

    def __init__(self, status: int, body: str, endpoint: Optional[str] = None):
        self.status = status
        self.body = body
        self.endpoint = endpoint
        super().__init__(f"Intercom API error ({status}): {body}")


class IntercomClient:
    """Client for the Intercom REST API."""

    BASE_URL = "https://api.intercom.io"
    API_VERSION = os.getenv("INTERCOM_API_VERSION", "2.14")

    # HTTP timeout: (connect_timeout, read_timeout) in seconds
    DEFAULT_TIMEOUT = (10, 30)

    # Intercom caps search pages at 150 results
    MAX_PER_PAGE = 150

    # Below this many remaining requests the rate limit is logged as a warning
    RATE_LIMIT_WARNING_THRESHOLD = 100

    LISTABLE_RESOURCES = ("admins", "teams")

    def __init__(self, access_token: Optional[str] = None, timeout: tuple = None):
        self.access_token = access_token or os.getenv("INTERCOM_ACCESS_TOKEN")
        if not self.access_token:
            raise ValueError("INTERCOM_ACCESS_TOKEN not set")

        self.timeout = timeout or self.DEFAULT_TIMEOUT

        self.session = requests.Session()
        self.session.headers.update(self._headers())

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Intercom-Version": self.API_VERSION,
        }

    @classmethod
    def _log_rate_limit(cls, headers, endpoint: str) -> None:
        """Log the X-RateLimit-Remaining header if Intercom sent one."""
        remaining = headers.get("X-RateLimit-Remaining")
        if remaining is None:
            return
        try:
            remaining_int = int(remaining)
        except (ValueError, TypeError):
            return  # Ignore invalid header values

        if remaining_int < cls.RATE_LIMIT_WARNING_THRESHOLD:
            logger.warning(f"Rate limit low: {remaining_int} requests remaining on {endpoint}")
        else:
            logger.debug(f"Rate limit remaining: {remaining_int} on {endpoint}")

    # ==================== SYNC METHODS ====================

    def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> dict:
        """
        Make a single HTTP request and return the parsed JSON body.

        Raises:
            IntercomAPIError: On any non-2xx response
            requests.RequestException: On connection errors and timeouts
        """
        url = f"{self.BASE_URL}{endpoint}"
        if method == "GET":
            response = self.session.get(url, params=params, timeout=self.timeout)
        else:
            response = self.session.post(url, json=json, timeout=self.timeout)

        self._log_rate_limit(response.headers, endpoint)

        if not response.ok:
            raise IntercomAPIError(response.status_code, response.text, endpoint)
        return response.json()

    def get_conversation(self, conv_id: str, display_as: str = "plaintext") -> dict:
        """Fetch a single conversation by ID."""
        return self._request("GET", f"/conversations/{conv_id}", params={"display_as": display_as})

    def list_resource(self, resource: str) -> dict:
        """Fetch /admins or /teams."""
        if resource not in self.LISTABLE_RESOURCES:
            raise ValueError(f"Unsupported resource: {resource}")
        return self._request("GET", f"/{resource}")

    # ==================== ASYNC METHODS ====================
    # These methods use aiohttp for true async operation.
    # Use these in async contexts (FastAPI, pipeline) to avoid
    # thread + event loop conflicts.

    def create_session(self) -> aiohttp.ClientSession:
        """Create an aiohttp session with auth headers and timeouts.

        Timeout configuration matches sync version:
        - connect: Connection establishment timeout (default 10s)
        - sock_read: Per-read operation timeout (default 30s)
        - total: Overall request timeout
        """
        timeout = aiohttp.ClientTimeout(
            connect=self.timeout[0],
            sock_read=self.timeout[1],
            total=self.timeout[0] + self.timeout[1],
        )
        return aiohttp.ClientSession(timeout=timeout, headers=self._headers())

    async def _request_async(
        self,
        session: aiohttp.ClientSession,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Optional[dict] = None,
    ) -> dict:
        """
        Make a single async HTTP request.

        Args:
            session: aiohttp ClientSession with auth headers
            method: HTTP method (GET or POST)
            endpoint: API endpoint path
            params: Query parameters for GET requests
            json_data: JSON body for POST requests

        Returns:
            Parsed JSON response

        Raises:
            IntercomAPIError: On any non-2xx response (status and body preserved)
            aiohttp.ClientError: On connection-level failures
        """
        url = f"{self.BASE_URL}{endpoint}"

        if method == "GET":
            request_ctx = session.get(url, params=params)
        else:
            request_ctx = session.post(url, json=json_data)

        async with request_ctx as response:
            self._log_rate_limit(response.headers, endpoint)

            if response.status < 200 or response.status >= 300:
                body = await response.text()
                raise IntercomAPIError(response.status, body, endpoint)

            return await response.json()

    async def search_conversations_async(
        self,
        session: aiohttp.ClientSession,
        query: dict,
        per_page: Optional[int] = None,
        starting_after: Optional[str] = None,
    ) -> dict:
        """
        Run one page of POST /conversations/search.

        Args:
            session: Open aiohttp session (see create_session)
            query: Intercom search query tree
            per_page: Results per page, capped at MAX_PER_PAGE
            starting_after: Cursor from a previous page

        Returns:
            Raw search response (conversations, total_count, pages)
        """
        effective_per_page = min(per_page or self.MAX_PER_PAGE, self.MAX_PER_PAGE)
        body = {
            "query": query,
            "pagination": {"per_page": effective_per_page},
        }
        if starting_after:
            body["pagination"]["starting_after"] = starting_after

        return await self._request_async(session, "POST", "/conversations/search", json_data=body)

    async def get_conversation_async(
        self,
        session: aiohttp.ClientSession,
        conv_id: str,
        display_as: str = "plaintext",
    ) -> dict:
        """Fetch a single conversation by ID (async version).

        Note: Requires an existing session to be passed in for efficiency
        when fetching multiple conversations.
        """
        return await self._request_async(
            session, "GET", f"/conversations/{conv_id}", params={"display_as": display_as}
        )

    async def list_resource_async(self, session: aiohttp.ClientSession, resource: str) -> dict:
        """Fetch /admins or /teams (async version)."""
        if resource not in self.LISTABLE_RESOURCES:
            raise ValueError(f"Unsupported resource: {resource}")
        return await self._request_async(session, "GET", f"/{resource}")
