"""Notification model."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum as SQLEnum, Text, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
from app.database import Base
from app.db.types import GUID


class NotificationType(str, Enum):
    """Notification types."""

    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
    TASK_CREATED = "TASK_CREATED"
    TASK_DELETED = "TASK_DELETED"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_DELETED = "PROJECT_DELETED"
    COMMENT_ADDED = "COMMENT_ADDED"


class Notification(Base):
    """In-app notification. Only the read flag is ever updated."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    type = Column(SQLEnum(NotificationType), nullable=False, index=True)
    read = Column(Boolean, default=False, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="notifications")
