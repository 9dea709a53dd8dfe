"""Comment schemas."""
from uuid import UUID
from pydantic import BaseModel, Field
from datetime import datetime


class CommentCreate(BaseModel):
    """Comment creation schema."""

    task_id: int = Field(..., gt=0)
    text: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    """Comment response schema."""

    id: int
    text: str
    task_id: int
    user_id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
