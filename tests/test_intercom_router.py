"""
Intercom Proxy Router Tests

Tests for GET /api/intercom-proxy dispatch, error mapping and auth.
Run with: pytest tests/test_intercom_router.py -v
"""

import pytest

# Mark entire module as medium - uses TestClient with mocked dependencies
pytestmark = pytest.mark.medium
import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, Mock

import aiohttp
from fastapi.testclient import TestClient

from src.api.deps import get_intercom_client
from src.api.main import app
from src.api.routers.intercom import MISSING_PARAMS_MESSAGE, get_orchestrator
from src.intercom_client import IntercomAPIError, IntercomClient
from src.participation.models import ParticipationResponse


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_intercom():
    """Mock IntercomClient with an async session context."""
    client = Mock()

    @asynccontextmanager
    async def session_ctx():
        yield Mock()

    client.create_session = session_ctx
    client.get_conversation_async = AsyncMock(return_value={"type": "conversation", "id": "42"})
    client.list_resource_async = AsyncMock(return_value={"type": "admin.list", "admins": []})
    return client


@pytest.fixture
def mock_orchestrator():
    orchestrator = Mock()
    orchestrator.run = AsyncMock(return_value=ParticipationResponse(
        conversations=[{"id": "1", "participation_part_count": 2}],
        total_count=1,
        intercom_total_count=4,
        has_more=False,
        admin_id="8742044",
        date="2025-11-10",
        participation_count=2,
        processed_count=4,
    ))
    return orchestrator


@pytest.fixture
def client(mock_intercom, mock_orchestrator, monkeypatch):
    """Create a test client with overridden dependencies."""
    monkeypatch.delenv("AUDIT_API_KEY", raising=False)
    app.dependency_overrides[get_intercom_client] = lambda: mock_intercom
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


# -----------------------------------------------------------------------------
# Participation mode
# -----------------------------------------------------------------------------


class TestParticipationConversations:
    """endpoint=conversations&admin_id=..."""

    def test_returns_filtered_response(self, client, mock_orchestrator):
        response = client.get(
            "/api/intercom-proxy",
            params={"endpoint": "conversations", "admin_id": "8742044", "updated_date": "2025-11-10"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "conversation.list"
        assert data["participation_count"] == 2
        assert data["intercom_total_count"] == 4
        assert data["conversations"][0]["participation_part_count"] == 2

        window = mock_orchestrator.run.call_args.args[0]
        assert (window.admin_id, window.since, window.before) == ("8742044", 1762732800, 1762819199)
        assert mock_orchestrator.run.call_args.kwargs["date_label"] == "2025-11-10"

    def test_since_before_and_cursor(self, client, mock_orchestrator):
        response = client.get(
            "/api/intercom-proxy",
            params={
                "endpoint": "conversations",
                "admin_id": "8742044",
                "updated_since": "2025-11-06 00:00:00",
                "updated_before": "2025-11-10 23:59:59",
                "starting_after": "cur-2",
            },
        )

        assert response.status_code == 200
        window = mock_orchestrator.run.call_args.args[0]
        assert window.since == 1762387200
        assert mock_orchestrator.run.call_args.kwargs["cursor"] == "cur-2"

    def test_invalid_date_is_400(self, client, mock_orchestrator):
        response = client.get(
            "/api/intercom-proxy",
            params={"endpoint": "conversations", "admin_id": "1", "updated_date": "yesterday"},
        )

        assert response.status_code == 400
        assert "YYYY-MM-DD" in response.json()["error"]
        mock_orchestrator.run.assert_not_called()

    def test_search_failure_surfaces_upstream_status(self, client, mock_orchestrator):
        mock_orchestrator.run.side_effect = IntercomAPIError(401, '{"type":"error.list"}', "/conversations/search")

        response = client.get(
            "/api/intercom-proxy",
            params={"endpoint": "conversations", "admin_id": "1", "updated_date": "2025-11-10"},
        )

        assert response.status_code == 401
        assert "error.list" in response.json()["error"]

    def test_conversations_without_admin_is_400(self, client):
        response = client.get("/api/intercom-proxy", params={"endpoint": "conversations"})

        assert response.status_code == 400
        assert response.json() == {"error": MISSING_PARAMS_MESSAGE}


# -----------------------------------------------------------------------------
# Passthrough modes
# -----------------------------------------------------------------------------


class TestPassthrough:
    """conversation_id and admins/teams modes."""

    def test_single_conversation(self, client, mock_intercom):
        response = client.get("/api/intercom-proxy", params={"conversation_id": "42"})

        assert response.status_code == 200
        assert response.json()["id"] == "42"
        assert mock_intercom.get_conversation_async.call_args.kwargs["display_as"] == "plaintext"

    def test_single_conversation_html(self, client, mock_intercom):
        client.get("/api/intercom-proxy", params={"conversation_id": "42", "display_as": "html"})

        assert mock_intercom.get_conversation_async.call_args.kwargs["display_as"] == "html"

    def test_invalid_display_mode(self, client):
        response = client.get("/api/intercom-proxy", params={"conversation_id": "42", "display_as": "markdown"})

        assert response.status_code == 400

    def test_not_found_passthrough(self, client, mock_intercom):
        mock_intercom.get_conversation_async.side_effect = IntercomAPIError(404, "not found")

        response = client.get("/api/intercom-proxy", params={"conversation_id": "42"})

        assert response.status_code == 404

    @pytest.mark.parametrize("resource", ["admins", "teams"])
    def test_listings(self, client, mock_intercom, resource):
        response = client.get("/api/intercom-proxy", params={"endpoint": resource})

        assert response.status_code == 200
        assert mock_intercom.list_resource_async.call_args.args[1] == resource

    def test_no_params(self, client):
        response = client.get("/api/intercom-proxy")

        assert response.status_code == 400
        assert response.json()["error"] == MISSING_PARAMS_MESSAGE


# -----------------------------------------------------------------------------
# Transport failures
# -----------------------------------------------------------------------------


class TestTransportErrors:
    """Connection, timeout and decode failures still answer with {error}."""

    def test_connection_reset_during_search(self, client, mock_orchestrator):
        mock_orchestrator.run.side_effect = aiohttp.ClientConnectionError("reset")

        response = client.get(
            "/api/intercom-proxy",
            params={"endpoint": "conversations", "admin_id": "1", "updated_date": "2025-11-10"},
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert "reset" in response.json()["error"]

    def test_search_timeout(self, client, mock_orchestrator):
        mock_orchestrator.run.side_effect = asyncio.TimeoutError()

        response = client.get(
            "/api/intercom-proxy",
            params={"endpoint": "conversations", "admin_id": "1", "updated_date": "2025-11-10"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Intercom request timed out"}

    def test_bad_json_on_single_conversation(self, client, mock_intercom):
        mock_intercom.get_conversation_async.side_effect = ValueError("Expecting value")

        response = client.get("/api/intercom-proxy", params={"conversation_id": "42"})

        assert response.status_code == 500
        assert "Expecting value" in response.json()["error"]

    def test_connection_error_on_listing(self, client, mock_intercom):
        mock_intercom.list_resource_async.side_effect = aiohttp.ClientError("boom")

        response = client.get("/api/intercom-proxy", params={"endpoint": "teams"})

        assert response.status_code == 500
        assert "error" in response.json()


# -----------------------------------------------------------------------------
# Auth and configuration
# -----------------------------------------------------------------------------


class TestAuth:
    """AUDIT_API_KEY handling."""

    def test_key_required_when_configured(self, client, monkeypatch):
        monkeypatch.setenv("AUDIT_API_KEY", "secret")

        response = client.get("/api/intercom-proxy", params={"endpoint": "admins"})

        assert response.status_code == 401

    @pytest.mark.parametrize("headers", [
        {"Authorization": "Bearer secret"},
        {"apikey": "secret"},
    ])
    def test_key_accepted(self, client, monkeypatch, headers):
        monkeypatch.setenv("AUDIT_API_KEY", "secret")

        response = client.get("/api/intercom-proxy", params={"endpoint": "admins"}, headers=headers)

        assert response.status_code == 200

    def test_wrong_key(self, client, monkeypatch):
        monkeypatch.setenv("AUDIT_API_KEY", "secret")

        response = client.get(
            "/api/intercom-proxy", params={"endpoint": "admins"}, headers={"Authorization": "Bearer nope"}
        )

        assert response.status_code == 401


def test_missing_token_is_500(monkeypatch):
    monkeypatch.delenv("INTERCOM_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("AUDIT_API_KEY", raising=False)
    app.dependency_overrides.clear()

    response = TestClient(app).get("/api/intercom-proxy", params={"endpoint": "admins"})

    assert response.status_code == 500
    assert "INTERCOM_ACCESS_TOKEN" in response.json()["detail"]


def test_orchestrator_dependency_wraps_client():
    client = IntercomClient(access_token="token")

    assert get_orchestrator(client).client is client
