"""
Participation Pipeline Models

Pydantic models for search windows, normalized conversation parts,
participation results and the endpoint response.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.utils.normalize import normalize_admin_id


class SearchWindow(BaseModel):
    """Admin plus the [since, before] window to search, in UTC epoch seconds."""

    admin_id: str = Field(..., description="Canonical Intercom admin id")
    since: int = Field(..., description="Window start, inclusive (epoch seconds)")
    before: int = Field(..., description="Window end, inclusive (epoch seconds)")

    @field_validator("admin_id", mode="before")
    @classmethod
    def canonical_admin_id(cls, value: Any) -> str:
        admin_id = normalize_admin_id(value)
        if admin_id is None:
            raise ValueError("admin_id is required")
        return admin_id

    @model_validator(mode="after")
    def since_before_order(self) -> "SearchWindow":
        if self.since >= self.before:
            raise ValueError(f"since ({self.since}) must be earlier than before ({self.before})")
        return self


class Part(BaseModel):
    """One conversation part, reduced to what participation checks need."""

    id: Optional[str] = None
    part_type: Optional[str] = None
    author_type: Optional[str] = None
    author_id: Optional[str] = None       # canonical, see normalize_admin_id
    author_name: Optional[str] = None
    body: Optional[str] = None
    created_at: Optional[int] = None      # epoch seconds, None if unparseable


class ParticipationResult(BaseModel):
    """Evaluator verdict for one conversation."""

    matched: bool
    part_count: int = 0


class ParticipationRecord(BaseModel):
    """Derived per (conversation, admin, window); never persisted."""

    conversation_id: str
    admin_id: str
    matched_part_count: int = 0
    matched: bool = False


class DiscoveryPage(BaseModel):
    """One page of candidate conversation ids from the search stage."""

    conversation_ids: List[str] = Field(default_factory=list)
    intercom_total_count: int = 0
    next_cursor: Optional[str] = None
    has_more_pages: bool = False
    pages: Optional[Dict[str, Any]] = None


class BatchProgress(BaseModel):
    """Request-scoped accumulator for the batch orchestrator."""

    processed_count: int = 0
    error_count: int = 0
    elapsed_ms: int = 0
    timed_out: bool = False
    unprocessed_count: int = 0
    results: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def participation_count(self) -> int:
        return sum(conv.get("participation_part_count", 0) for conv in self.results)


class ParticipationResponse(BaseModel):
    """Response body of the conversations endpoint."""

    type: str = "conversation.list"
    conversations: List[Dict[str, Any]] = Field(default_factory=list)
    total_count: int = 0
    intercom_total_count: int = 0
    has_more: bool = False
    next_cursor: Optional[str] = None
    pages: Optional[Dict[str, Any]] = None
    admin_id: str
    date: str
    participation_count: int = 0
    processed_count: int = 0
    error_count: int = 0
    timed_out: bool = False
    unprocessed_count: int = 0

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "conversation.list",
                "conversations": [
                    {
                        "id": "215471462705191",
                        "state": "closed",
                        "created_at": 1762741000,
                        "updated_at": 1762745000,
                        "created_at_iso": "2025-11-10T02:16:40Z",
                        "updated_at_iso": "2025-11-10T03:23:20Z",
                        "participation_part_count": 2,
                    }
                ],
                "total_count": 1,
                "intercom_total_count": 4,
                "has_more": False,
                "next_cursor": None,
                "admin_id": "8742044",
                "date": "2025-11-10",
                "participation_count": 2,
                "processed_count": 4,
                "error_count": 0,
            }
        }
    )
