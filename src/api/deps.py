"""
FastAPI Dependency Injection

Provides database connections, the Intercom client and the optional
API key check for API endpoints.
"""

import hmac
import logging
import os
from typing import Generator, Optional

from fastapi import Header, HTTPException

from src.db.connection import get_connection
from src.intercom_client import IntercomClient

logger = logging.getLogger(__name__)


def get_db() -> Generator:
    """
    FastAPI dependency for database connections.

    Rows come back as dicts (RealDictCursor). Commits when the request
    succeeds, rolls back when it raises.
    """
    with get_connection(dict_rows=True) as conn:
        yield conn


def get_intercom_client() -> IntercomClient:
    """Dependency for IntercomClient (token from INTERCOM_ACCESS_TOKEN)."""
    try:
        return IntercomClient()
    except ValueError as e:
        logger.error(f"Intercom client unavailable: {e}")
        raise HTTPException(status_code=500, detail=str(e))


def verify_api_key(
    apikey: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
) -> bool:
    """
    Check the caller's key when AUDIT_API_KEY is configured.

    Accepts either an `apikey` header or `Authorization: Bearer <key>`.
    With no key configured every request is allowed (local development).

    Raises HTTPException 401 if a key is configured and not presented.
    """
    expected = os.getenv("AUDIT_API_KEY")
    if not expected:
        return True

    presented = apikey
    if not presented and authorization and authorization.lower().startswith("bearer "):
        presented = authorization[7:].strip()

    if not presented or not hmac.compare_digest(presented, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return True
