"""Task schemas."""
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from datetime import datetime
from app.models.task import TaskPriority, TaskStatus
from app.schemas.comment import CommentResponse
from app.schemas.history import HistoryResponse


class TaskBase(BaseModel):
    """Full writable field set of a task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    project_id: int = Field(..., gt=0)
    assigned_to_id: Optional[UUID] = None
    due_date: Optional[datetime] = None
    estimated_hours: float = Field(0, ge=0)


class TaskCreate(TaskBase):
    """Task creation schema."""

    pass


class TaskUpdate(TaskBase):
    """Task update schema. Replaces every field."""

    actual_hours: Optional[float] = Field(None, ge=0)


class TaskResponse(TaskBase):
    """Task response schema."""

    id: int
    created_by_id: UUID
    actual_hours: float = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskDetailResponse(TaskResponse):
    """Task with comments and history."""

    comments: List[CommentResponse] = []
    history: List[HistoryResponse] = []
