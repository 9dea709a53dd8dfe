"""Notification schemas."""
from uuid import UUID
from pydantic import BaseModel
from datetime import datetime
from app.models.notification import NotificationType


class NotificationResponse(BaseModel):
    """Notification response schema."""

    id: int
    user_id: UUID
    message: str
    type: NotificationType
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAllReadResponse(BaseModel):
    updated: int
    message: str


class UnreadCountResponse(BaseModel):
    count: int
