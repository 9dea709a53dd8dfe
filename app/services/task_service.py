"""Task mutations with their history, notifications and audit events."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.crud.history import history as history_crud
from app.crud.notification import notification as notification_crud
from app.crud.project import project as project_crud
from app.crud.task import task as task_crud
from app.crud.user import user as user_crud
from app.localization.helpers import get_translation
from app.models.history import HistoryAction
from app.models.notification import NotificationType
from app.models.system_event import SystemEventType
from app.models.task import Task, TaskStatus
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.event_service import record_audit_event

logger = logging.getLogger(__name__)

# Only these fields produce history entries.
TRACKED_FIELDS = (
    ("status", HistoryAction.STATUS_CHANGED),
    ("title", HistoryAction.TITLE_CHANGED),
    ("priority", HistoryAction.PRIORITY_CHANGED),
    ("assigned_to_id", HistoryAction.ASSIGNED),
    ("due_date", HistoryAction.DUE_DATE_CHANGED),
)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def normalize_value(value: Any) -> str:
    """String form used for history rows and change detection. Absent is ``""``."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    return str(value)


def snapshot(task_obj: Task) -> Dict[str, Any]:
    """Tracked and notification-relevant values of a task."""
    return {
        "status": task_obj.status,
        "title": task_obj.title,
        "priority": task_obj.priority,
        "assigned_to_id": task_obj.assigned_to_id,
        "due_date": task_obj.due_date,
    }


def diff_history(
    task_id: int,
    user_id: UUID,
    old: Mapping[str, Any],
    new: Mapping[str, Any],
) -> List[Dict[str, Any]]:
    """One history entry per tracked field whose normalized value changed."""
    entries = []
    for field, action in TRACKED_FIELDS:
        old_value = normalize_value(old.get(field))
        new_value = normalize_value(new.get(field))
        if old_value != new_value:
            entries.append(
                {
                    "task_id": task_id,
                    "user_id": user_id,
                    "action": action,
                    "old_value": old_value,
                    "new_value": new_value,
                }
            )
    return entries


def notification_triggers(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    locale: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Direct notifications caused by an update."""
    title = normalize_value(new.get("title"))
    old_assignee = normalize_value(old.get("assigned_to_id"))
    new_assignee = new.get("assigned_to_id")
    rows = []

    if new_assignee is not None:
        if not old_assignee:
            rows.append(
                {
                    "user_id": new_assignee,
                    "message": get_translation("notifications.task_assigned", locale, title=title),
                    "type": NotificationType.TASK_ASSIGNED,
                }
            )
        elif old_assignee != normalize_value(new_assignee):
            rows.append(
                {
                    "user_id": new_assignee,
                    "message": get_translation("notifications.task_reassigned", locale, title=title),
                    "type": NotificationType.TASK_ASSIGNED,
                }
            )

        if old.get("status") != TaskStatus.COMPLETED and new.get("status") == TaskStatus.COMPLETED:
            rows.append(
                {
                    "user_id": new_assignee,
                    "message": get_translation("notifications.task_completed", locale, title=title),
                    "type": NotificationType.TASK_COMPLETED,
                }
            )
    return rows


class TaskService:
    """Create, update and delete tasks inside one transaction each."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale

    async def _check_references(
        self,
        db: AsyncSession,
        *,
        project_id: int,
        assigned_to_id: Optional[UUID],
        locale: Optional[str] = None,
    ) -> None:
        if not await project_crud.get(db, id=project_id):
            raise NotFoundError(get_translation("errors.project_not_found", locale or self.locale))
        if assigned_to_id is not None and not await user_crud.exists(db, id=assigned_to_id):
            raise NotFoundError(get_translation("errors.assignee_not_found", locale or self.locale))

    async def _get_owned(
        self,
        db: AsyncSession,
        task_id: int,
        actor: User,
        forbidden_key: str,
        locale: Optional[str] = None,
    ) -> Task:
        task_obj = await task_crud.get_for_update(db, id=task_id)
        if not task_obj:
            raise NotFoundError(get_translation("errors.task_not_found", locale or self.locale))
        if task_obj.created_by_id != actor.id:
            raise ForbiddenError(get_translation(forbidden_key, locale or self.locale))
        return task_obj

    async def create_task(
        self, db: AsyncSession, data: TaskCreate, actor: User, locale: Optional[str] = None
    ) -> Task:
        """Insert a task with its CREATED history row and assignment notification."""
        try:
            await self._check_references(
                db, project_id=data.project_id, assigned_to_id=data.assigned_to_id, locale=locale
            )

            values = data.model_dump()
            values["due_date"] = to_utc(values.get("due_date"))
            values["created_by_id"] = actor.id
            new_task = await task_crud.create(db, obj_in=values, commit=False)

            await history_crud.create_many(
                db,
                entries=[
                    {
                        "task_id": new_task.id,
                        "user_id": actor.id,
                        "action": HistoryAction.CREATED,
                        "old_value": "",
                        "new_value": new_task.title,
                    }
                ],
            )
            if new_task.assigned_to_id is not None:
                await notification_crud.create(
                    db,
                    obj_in={
                        "user_id": new_task.assigned_to_id,
                        "message": get_translation("notifications.task_assigned", self.locale, title=new_task.title),
                        "type": NotificationType.TASK_ASSIGNED,
                    },
                    commit=False,
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(new_task)
        logger.info(f"Task {new_task.id} created by {actor.id}")

        record_audit_event(
            SystemEventType.TASK_CREATED,
            actor.id,
            actor.display_name,
            f"Created task: {new_task.title}",
            project_id=new_task.project_id,
            task_id=new_task.id,
            details={
                "taskTitle": new_task.title,
                "priority": new_task.priority.value,
                "assignedTo": str(new_task.assigned_to_id) if new_task.assigned_to_id else None,
            },
        )
        return new_task

    async def update_task(
        self, db: AsyncSession, task_id: int, data: TaskUpdate, actor: User, locale: Optional[str] = None
    ) -> Task:
        """Replace a task's fields; emits a history row per changed tracked field."""
        try:
            task_obj = await self._get_owned(db, task_id, actor, "errors.task_update_forbidden", locale)
            await self._check_references(
                db, project_id=data.project_id, assigned_to_id=data.assigned_to_id, locale=locale
            )

            old = snapshot(task_obj)
            values = data.model_dump()
            values["due_date"] = to_utc(values.get("due_date"))
            if values.get("actual_hours") is None:
                values.pop("actual_hours", None)
            await task_crud.update(db, db_obj=task_obj, obj_in=values, commit=False)
            new = snapshot(task_obj)

            entries = diff_history(task_obj.id, actor.id, old, new)
            if entries:
                await history_crud.create_many(db, entries=entries)

            for row in notification_triggers(old, new, self.locale):
                await notification_crud.create(db, obj_in=row, commit=False)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(task_obj)
        logger.info(f"Task {task_obj.id} updated by {actor.id}: {len(entries)} field(s) changed")

        record_audit_event(
            SystemEventType.TASK_UPDATED,
            actor.id,
            actor.display_name,
            f"Updated task: {task_obj.title}",
            project_id=task_obj.project_id,
            task_id=task_obj.id,
            details={
                "taskTitle": task_obj.title,
                "oldStatus": normalize_value(old["status"]),
                "newStatus": normalize_value(new["status"]),
                "oldPriority": normalize_value(old["priority"]),
                "newPriority": normalize_value(new["priority"]),
            },
        )
        return task_obj

    async def delete_task(
        self, db: AsyncSession, task_id: int, actor: User, locale: Optional[str] = None
    ) -> Dict[str, Any]:
        """Delete a task with its comments and history."""
        try:
            task_obj = await self._get_owned(db, task_id, actor, "errors.task_delete_forbidden", locale)
            title = task_obj.title
            project_id = task_obj.project_id

            await history_crud.create_many(
                db,
                entries=[
                    {
                        "task_id": task_obj.id,
                        "user_id": actor.id,
                        "action": HistoryAction.DELETED,
                        "old_value": title,
                        "new_value": "",
                    }
                ],
            )
            await task_crud.remove_cascade(db, db_obj=task_obj)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Task {task_id} deleted by {actor.id}")

        record_audit_event(
            SystemEventType.TASK_DELETED,
            actor.id,
            actor.display_name,
            f"Deleted task: {title}",
            project_id=project_id,
            task_id=task_id,
            details={"taskTitle": title},
        )
        return {"id": task_id, "message": "Task deleted successfully"}


task_service = TaskService()
