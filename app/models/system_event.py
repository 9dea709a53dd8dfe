"""System event model (audit trail feeding admin notifications)."""
from enum import Enum
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Index, Enum as SQLEnum
from sqlalchemy.sql import func
from app.database import Base
from app.db.types import GUID


class SystemEventType(str, Enum):
    """Audited mutation kinds."""

    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_DELETED = "PROJECT_DELETED"
    TASK_CREATED = "TASK_CREATED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_DELETED = "TASK_DELETED"
    COMMENT_ADDED = "COMMENT_ADDED"


class SystemEvent(Base):
    """Immutable audit record, flipped to processed exactly once.

    project_id and task_id are plain columns: the event must survive the
    deletion of the entities it describes.
    """

    __tablename__ = "system_events"
    __table_args__ = (Index("ix_system_events_processed_created_at", "processed", "created_at"),)

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    type = Column(SQLEnum(SystemEventType), nullable=False, index=True)
    user_id = Column(GUID(), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    project_id = Column(Integer, nullable=True)
    task_id = Column(Integer, nullable=True)
    action = Column(Text, nullable=False)
    details = Column(Text, nullable=True)  # JSON-serialized payload
    processed = Column(Boolean, default=False, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
