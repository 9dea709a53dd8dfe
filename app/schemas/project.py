"""Project schemas."""
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from datetime import datetime
from app.models.task import TaskPriority, TaskStatus


class ProjectBase(BaseModel):
    """Base project schema."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class ProjectCreate(ProjectBase):
    """Project creation schema."""

    pass


class ProjectUpdate(ProjectBase):
    """Project update schema."""

    pass


class ProjectResponse(ProjectBase):
    """Project response schema."""

    id: int
    created_by_id: UUID
    created_at: datetime
    task_count: int = 0

    class Config:
        from_attributes = True


class ProjectTaskSummary(BaseModel):
    """Task row listed inside a project."""

    id: int
    title: str
    status: TaskStatus
    priority: TaskPriority

    class Config:
        from_attributes = True


class ProjectDetailResponse(ProjectResponse):
    """Project with its tasks."""

    tasks: List[ProjectTaskSummary] = []
