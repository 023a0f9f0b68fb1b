"""
Health Check Endpoints

/health answers as long as the process is up. /health/full also checks the
pull history database and whether an Intercom token is configured, which is
what the audit pages show on their landing screen.
"""

import os
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.deps import get_db
from src.intercom_client import IntercomClient


router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


class DatabaseHealthResponse(BaseModel):
    connected: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class FullHealthResponse(BaseModel):
    """Aggregate status: healthy only when every check passes."""
    status: str
    timestamp: datetime
    database: DatabaseHealthResponse
    intercom_configured: bool
    intercom_api_version: str


def ping_database(db) -> DatabaseHealthResponse:
    """Round-trip a SELECT 1 and time it."""
    started = time.perf_counter()
    try:
        with db.cursor() as cur:
            cur.execute("SELECT 1")
            cur.fetchone()
    except Exception as e:
        return DatabaseHealthResponse(connected=False, error=str(e))
    return DatabaseHealthResponse(
        connected=True,
        latency_ms=round((time.perf_counter() - started) * 1000, 2),
    )


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Liveness only; touches no dependencies."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/health/full", response_model=FullHealthResponse)
def full_health_check(db=Depends(get_db)):
    database = ping_database(db)
    intercom_configured = bool(os.getenv("INTERCOM_ACCESS_TOKEN"))

    return FullHealthResponse(
        status="healthy" if database.connected and intercom_configured else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        database=database,
        intercom_configured=intercom_configured,
        intercom_api_version=IntercomClient.API_VERSION,
    )
