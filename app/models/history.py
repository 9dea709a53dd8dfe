"""Task history model."""
from enum import Enum
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.db.types import GUID


class HistoryAction(str, Enum):
    """Field-level change kinds recorded for a task."""

    CREATED = "CREATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    TITLE_CHANGED = "TITLE_CHANGED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"
    ASSIGNED = "ASSIGNED"
    DUE_DATE_CHANGED = "DUE_DATE_CHANGED"
    DELETED = "DELETED"


class History(Base):
    """Append-only change record. Values are stored as strings, empty when absent."""

    __tablename__ = "history"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    action = Column(SQLEnum(HistoryAction), nullable=False, index=True)
    old_value = Column(Text, nullable=False, default="")
    new_value = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Relationships
    task = relationship("Task", back_populates="history")
    user = relationship("User")
