"""
Intercom Proxy Endpoint

Single GET endpoint the audit pages call instead of talking to Intercom
directly (keeps the access token server-side):

- endpoint=conversations&admin_id=...  participation-filtered conversations
- conversation_id=...                  one conversation (plaintext by default)
- endpoint=admins | endpoint=teams     passthrough listings
"""

import asyncio
import logging
from typing import Optional

import aiohttp
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.deps import get_intercom_client, verify_api_key
from src.intercom_client import IntercomAPIError, IntercomClient
from src.participation import ParticipationOrchestrator, WindowError, resolve_window

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api", tags=["intercom"])

DISPLAY_MODES = ("plaintext", "html")

MISSING_PARAMS_MESSAGE = (
    "Missing required parameter: either endpoint=teams, endpoint=admins, "
    "endpoint=conversations (with admin_id and optionally updated_date or "
    "updated_since/updated_before), or conversation_id must be provided"
)


def get_orchestrator(client: IntercomClient = Depends(get_intercom_client)) -> ParticipationOrchestrator:
    """Dependency for ParticipationOrchestrator."""
    return ParticipationOrchestrator(client)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _upstream_status(error: IntercomAPIError) -> int:
    """Surface the upstream status when it is an HTTP error status, else 500."""
    if 400 <= error.status < 600:
        return error.status
    return 500


@router.get("/intercom-proxy")
async def intercom_proxy(
    endpoint: Optional[str] = None,
    admin_id: Optional[str] = None,
    updated_date: Optional[str] = None,
    updated_since: Optional[str] = None,
    updated_before: Optional[str] = None,
    starting_after: Optional[str] = None,
    conversation_id: Optional[str] = None,
    display_as: str = "plaintext",
    _authorized: bool = Depends(verify_api_key),
    client: IntercomClient = Depends(get_intercom_client),
    orchestrator: ParticipationOrchestrator = Depends(get_orchestrator),
):
    """
    Proxy for the audit pages.

    The conversations mode returns only conversations the admin authored at
    least one part in during the window, with per-conversation
    participation_part_count and a cursor for the next search page.
    """
    try:
        if endpoint == "conversations" and admin_id:
            return await _participation_conversations(
                orchestrator, admin_id, updated_date, updated_since, updated_before, starting_after
            )

        if conversation_id:
            if display_as not in DISPLAY_MODES:
                return _error(400, f"display_as must be one of: {', '.join(DISPLAY_MODES)}")
            async with client.create_session() as session:
                return await client.get_conversation_async(session, conversation_id, display_as=display_as)

        if endpoint in IntercomClient.LISTABLE_RESOURCES:
            async with client.create_session() as session:
                return await client.list_resource_async(session, endpoint)

    except IntercomAPIError as e:
        logger.error(f"Intercom request failed: {e}")
        return _error(_upstream_status(e), str(e))
    except asyncio.TimeoutError:
        logger.error("Intercom request timed out")
        return _error(500, "Intercom request timed out")
    except (aiohttp.ClientError, ValueError) as e:
        logger.error(f"Intercom request failed: {type(e).__name__}: {e}")
        return _error(500, f"Intercom request failed: {e}")

    return _error(400, MISSING_PARAMS_MESSAGE)


async def _participation_conversations(
    orchestrator: ParticipationOrchestrator,
    admin_id: str,
    updated_date: Optional[str],
    updated_since: Optional[str],
    updated_before: Optional[str],
    starting_after: Optional[str],
):
    try:
        window, date_label = resolve_window(
            admin_id,
            updated_date=updated_date,
            updated_since=updated_since,
            updated_before=updated_before,
        )
    except WindowError as e:
        return _error(400, str(e))

    logger.info(
        f"Starting participation-based search: admin={window.admin_id}, date={date_label}, "
        f"window={window.since}..{window.before}"
    )

    response = await orchestrator.run(window, cursor=starting_after, date_label=date_label)
    return response.model_dump()
