"""System event schemas."""
from typing import Optional
from uuid import UUID
from pydantic import BaseModel
from datetime import datetime
from app.models.system_event import SystemEventType


class SystemEventResponse(BaseModel):
    """System event response schema."""

    id: int
    type: SystemEventType
    user_id: UUID
    user_name: Optional[str] = None
    project_id: Optional[int] = None
    task_id: Optional[int] = None
    action: str
    details: Optional[str] = None
    processed: bool
    processed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SweepResultResponse(BaseModel):
    """Outcome of one sweep pass."""

    fetched: int
    notified: int
    failed: int
    marked: int


class CronInitResponse(BaseModel):
    """Response of the lazy scheduler bootstrap endpoint."""

    status: str = "ok"
    message: str
    cron_initialized: bool = True
    already_initialized: bool
