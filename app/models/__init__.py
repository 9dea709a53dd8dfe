"""Model modules."""
from app.models.user import User
from app.models.project import Project
from app.models.task import Task, TaskStatus, TaskPriority
from app.models.comment import Comment
from app.models.history import History, HistoryAction
from app.models.notification import Notification, NotificationType
from app.models.system_event import SystemEvent, SystemEventType

__all__ = [
    "User",
    "Project",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "Comment",
    "History",
    "HistoryAction",
    "Notification",
    "NotificationType",
    "SystemEvent",
    "SystemEventType",
]
