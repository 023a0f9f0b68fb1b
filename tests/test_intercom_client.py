"""
Intercom Client Tests

Tests for the sync and async request paths, search body construction and
rate limit logging.
Run with: pytest tests/test_intercom_client.py -v
"""

import logging
import pytest
from unittest.mock import AsyncMock, Mock, patch
from contextlib import asynccontextmanager

from src.intercom_client import IntercomAPIError, IntercomClient

pytestmark = pytest.mark.medium


@pytest.fixture
def client():
    """Create client with mocked token."""
    with patch.dict("os.environ", {"INTERCOM_ACCESS_TOKEN": "test_token"}):
        return IntercomClient()


def mock_response(status=200, payload=None, text="", headers=None):
    response = AsyncMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=payload if payload is not None else {})
    response.text = AsyncMock(return_value=text)
    return response


def mock_session(response, captured):
    """Session whose get/post record their kwargs and yield `response`."""
    session = Mock()

    @asynccontextmanager
    async def mock_post(url, **kwargs):
        captured.append(("POST", url, kwargs))
        yield response

    @asynccontextmanager
    async def mock_get(url, **kwargs):
        captured.append(("GET", url, kwargs))
        yield response

    session.post = mock_post
    session.get = mock_get
    return session


class TestClientInit:
    """Tests for constructor and headers."""

    def test_missing_token_raises(self):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(ValueError, match="INTERCOM_ACCESS_TOKEN"):
                IntercomClient()

    def test_explicit_token(self):
        client = IntercomClient(access_token="explicit")
        assert client.session.headers["Authorization"] == "Bearer explicit"

    def test_version_header(self, client):
        assert client._headers()["Intercom-Version"] == IntercomClient.API_VERSION


class TestSearchConversationsAsync:
    """Tests for search_conversations_async."""

    @pytest.mark.asyncio
    async def test_builds_search_body(self, client):
        captured = []
        session = mock_session(mock_response(payload={"conversations": []}), captured)
        query = {"operator": "OR", "value": []}

        await client.search_conversations_async(session, query, per_page=50)

        method, url, kwargs = captured[0]
        assert method == "POST"
        assert url.endswith("/conversations/search")
        assert kwargs["json"] == {"query": query, "pagination": {"per_page": 50}}

    @pytest.mark.asyncio
    async def test_cursor_and_page_cap(self, client):
        captured = []
        session = mock_session(mock_response(payload={}), captured)

        await client.search_conversations_async(session, {}, per_page=500, starting_after="abc")

        pagination = captured[0][2]["json"]["pagination"]
        assert pagination == {"per_page": IntercomClient.MAX_PER_PAGE, "starting_after": "abc"}

    @pytest.mark.asyncio
    async def test_error_preserves_status_and_body(self, client):
        session = mock_session(mock_response(status=429, text='{"errors":[{"code":"rate_limit_exceeded"}]}'), [])

        with pytest.raises(IntercomAPIError) as exc_info:
            await client.search_conversations_async(session, {})

        assert exc_info.value.status == 429
        assert "rate_limit_exceeded" in exc_info.value.body
        assert exc_info.value.endpoint == "/conversations/search"


class TestGetConversationAsync:
    """Tests for get_conversation_async."""

    @pytest.mark.asyncio
    async def test_requests_plaintext(self, client):
        captured = []
        session = mock_session(mock_response(payload={"id": "42"}), captured)

        result = await client.get_conversation_async(session, "42")

        method, url, kwargs = captured[0]
        assert method == "GET"
        assert url == "https://api.intercom.io/conversations/42"
        assert kwargs["params"] == {"display_as": "plaintext"}
        assert result == {"id": "42"}

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        session = mock_session(mock_response(status=404, text="not found"), [])

        with pytest.raises(IntercomAPIError) as exc_info:
            await client.get_conversation_async(session, "42")

        assert exc_info.value.status == 404


class TestListResource:
    """Tests for admins/teams passthrough."""

    @pytest.mark.asyncio
    async def test_admins(self, client):
        captured = []
        session = mock_session(mock_response(payload={"type": "admin.list", "admins": []}), captured)

        result = await client.list_resource_async(session, "admins")

        assert captured[0][1].endswith("/admins")
        assert result["type"] == "admin.list"

    @pytest.mark.asyncio
    async def test_unknown_resource(self, client):
        with pytest.raises(ValueError):
            await client.list_resource_async(Mock(), "contacts")

    def test_sync_get_conversation(self, client):
        response = Mock(ok=True, headers={}, status_code=200)
        response.json.return_value = {"id": "42"}

        with patch.object(client.session, "get", return_value=response) as mock_get:
            result = client.get_conversation("42")

        assert result == {"id": "42"}
        assert mock_get.call_args.kwargs["params"] == {"display_as": "plaintext"}

    def test_sync_error(self, client):
        response = Mock(ok=False, headers={}, status_code=401, text="unauthorized")

        with patch.object(client.session, "get", return_value=response):
            with pytest.raises(IntercomAPIError) as exc_info:
                client.list_resource("teams")

        assert exc_info.value.status == 401


class TestRateLimitLogging:
    """Tests for X-RateLimit-Remaining handling."""

    def test_low_remaining_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="src.intercom_client"):
            IntercomClient._log_rate_limit({"X-RateLimit-Remaining": "12"}, "/conversations/search")

        assert "Rate limit low: 12" in caplog.text

    def test_plenty_remaining_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING, logger="src.intercom_client"):
            IntercomClient._log_rate_limit({"X-RateLimit-Remaining": "900"}, "/admins")

        assert caplog.text == ""

    def test_invalid_header_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="src.intercom_client"):
            IntercomClient._log_rate_limit({"X-RateLimit-Remaining": "lots"}, "/admins")

        assert caplog.text == ""
