"""
Pull History Endpoints

Audit pages record each completed participation pull here, storing the full
list of conversation ids returned for an (admin, date).
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_db, verify_api_key
from src.db.models import PullHistoryCreate, PullHistoryEntry, PullHistoryListResponse
from src.db.pull_history import PullHistoryStore
from src.utils.normalize import normalize_admin_id


router = APIRouter(prefix="/api/pull-history", tags=["pull-history"])


def get_pull_history_store(db=Depends(get_db)) -> PullHistoryStore:
    """Dependency for PullHistoryStore."""
    return PullHistoryStore(db)


@router.post("", response_model=PullHistoryEntry, status_code=201)
def record_pull(
    pull: PullHistoryCreate,
    _authorized: bool = Depends(verify_api_key),
    store: PullHistoryStore = Depends(get_pull_history_store),
):
    """Record the conversation ids one pull returned."""
    return store.record_pull(pull)


@router.get("", response_model=PullHistoryListResponse)
def list_pulls(
    admin_id: Optional[str] = None,
    pull_date: Optional[date] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    _authorized: bool = Depends(verify_api_key),
    store: PullHistoryStore = Depends(get_pull_history_store),
):
    """List recorded pulls, newest first, optionally for one admin and date."""
    entries, total = store.list_pulls(
        admin_id=normalize_admin_id(admin_id),
        pull_date=pull_date,
        limit=limit,
        offset=offset,
    )
    return PullHistoryListResponse(entries=entries, total=total)
