"""Pydantic models for database entities."""

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.utils.normalize import normalize_admin_id

AiAuditStatus = Literal["sent", "done"]


class PullHistoryCreate(BaseModel):
    """A completed participation pull, as recorded by the calling page."""

    pulled_by_email: str = Field(..., min_length=1)
    pulled_by_name: Optional[str] = None
    employee_name: str = Field(..., min_length=1)
    employee_email: str = Field(..., min_length=1)
    employee_admin_id: str
    employee_intercom_name: Optional[str] = None
    pull_date: date
    conversation_ids: List[str] = Field(default_factory=list)

    @field_validator("employee_admin_id", mode="before")
    @classmethod
    def canonical_admin_id(cls, value):
        admin_id = normalize_admin_id(value)
        if admin_id is None:
            raise ValueError("employee_admin_id is required")
        return admin_id

    @field_validator("conversation_ids", mode="before")
    @classmethod
    def ids_as_strings(cls, value):
        if value is None:
            return []
        # Keep first occurrence order, drop duplicates
        return list(dict.fromkeys(str(v) for v in value))

    @property
    def conversation_count(self) -> int:
        return len(self.conversation_ids)


class PullHistoryEntry(BaseModel):
    """A stored conversation_pull_history row."""

    id: UUID
    pulled_by_email: str
    pulled_by_name: Optional[str] = None
    employee_name: str
    employee_email: str
    employee_admin_id: str
    employee_intercom_name: Optional[str] = None
    pull_date: date
    conversation_count: int = 0
    conversation_ids: List[str] = Field(default_factory=list)
    ai_audit_conversation_ids: List[str] = Field(default_factory=list)
    ai_audit_status: Optional[AiAuditStatus] = None
    created_at: datetime
    updated_at: datetime


class PullHistoryListResponse(BaseModel):
    """Paginated pull history."""

    entries: List[PullHistoryEntry]
    total: int
