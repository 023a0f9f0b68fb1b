"""
Conversation fetcher.

Hydrates one candidate conversation (with its parts) in plaintext rendering,
so part bodies are free of HTML markup. Never raises: a failed fetch is logged
and returned as None so one bad id cannot abort a batch.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from src.intercom_client import IntercomAPIError, IntercomClient

logger = logging.getLogger(__name__)


async def fetch_conversation(
    client: IntercomClient,
    session: aiohttp.ClientSession,
    conversation_id: str,
    timeout: Optional[float] = None,
) -> Optional[dict]:
    """
    Fetch a conversation with parts, or None on any failure.

    Args:
        client: IntercomClient
        session: Shared aiohttp session for the batch
        conversation_id: Candidate conversation id
        timeout: Per-call deadline in seconds (None = session timeouts only)

    Returns:
        Conversation dict, or None if the fetch failed or timed out
    """
    try:
        request = client.get_conversation_async(session, conversation_id, display_as="plaintext")
        if timeout is not None:
            data = await asyncio.wait_for(request, timeout=timeout)
        else:
            data = await request
    except IntercomAPIError as e:
        logger.warning(f"Failed to fetch conversation {conversation_id}: {e.status} - {e.body}")
        return None
    except asyncio.TimeoutError:
        logger.warning(f"Timed out fetching conversation {conversation_id} (deadline={timeout}s)")
        return None
    except (aiohttp.ClientError, ValueError) as e:
        # ValueError covers invalid JSON bodies
        logger.warning(f"Error fetching conversation {conversation_id}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Unexpected payload for conversation {conversation_id}: {type(data).__name__}")
        return None

    if "conversation_parts" not in data:
        logger.warning(f"Conversation {conversation_id} has no conversation_parts field")

    return data
