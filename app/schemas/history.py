"""History schemas."""
from typing import Dict, Optional
from uuid import UUID
from pydantic import BaseModel
from datetime import datetime
from app.models.history import HistoryAction


class HistoryResponse(BaseModel):
    """History entry response schema."""

    id: int
    task_id: int
    user_id: UUID
    action: HistoryAction
    old_value: str
    new_value: str
    timestamp: datetime

    class Config:
        from_attributes = True


class ActivitySummary(BaseModel):
    """Per-user history summary."""

    total: int
    by_action: Dict[str, int]
    last_activity: Optional[datetime] = None
