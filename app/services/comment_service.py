"""Comment mutations."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.crud.comment import comment as comment_crud
from app.crud.notification import notification as notification_crud
from app.crud.task import task as task_crud
from app.localization.helpers import get_translation
from app.models.comment import Comment
from app.models.notification import NotificationType
from app.models.system_event import SystemEventType
from app.models.user import User
from app.schemas.comment import CommentCreate
from app.services.event_service import record_audit_event

logger = logging.getLogger(__name__)


class CommentService:
    """Comment creation and removal."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale

    async def list_for_task(self, db: AsyncSession, task_id: int, locale: Optional[str] = None) -> List[Comment]:
        if not await task_crud.get(db, id=task_id):
            raise NotFoundError(get_translation("errors.task_not_found", locale or self.locale))
        return await comment_crud.get_by_task(db, task_id=task_id)

    async def create_comment(
        self, db: AsyncSession, data: CommentCreate, actor: User, locale: Optional[str] = None
    ) -> Comment:
        """Add a comment and tell the task's assignee, unless they wrote it."""
        try:
            task_obj = await task_crud.get(db, id=data.task_id)
            if not task_obj:
                raise NotFoundError(get_translation("errors.task_not_found", locale or self.locale))

            new_comment = await comment_crud.create(
                db,
                obj_in={"text": data.text, "task_id": task_obj.id, "user_id": actor.id},
                commit=False,
            )
            if task_obj.assigned_to_id is not None and task_obj.assigned_to_id != actor.id:
                await notification_crud.create(
                    db,
                    obj_in={
                        "user_id": task_obj.assigned_to_id,
                        "message": get_translation("notifications.comment_added", self.locale, title=task_obj.title),
                        "type": NotificationType.COMMENT_ADDED,
                    },
                    commit=False,
                )
            task_title = task_obj.title
            project_id = task_obj.project_id
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(new_comment)

        record_audit_event(
            SystemEventType.COMMENT_ADDED,
            actor.id,
            actor.display_name,
            f"Added comment to task: {task_title}",
            project_id=project_id,
            task_id=new_comment.task_id,
            details={"comment": data.text[:100], "taskTitle": task_title},
        )
        return new_comment

    async def delete_comment(
        self, db: AsyncSession, comment_id: int, actor: User, locale: Optional[str] = None
    ) -> Dict[str, Any]:
        """Authors and the task's creator may delete a comment."""
        try:
            comment_obj = await comment_crud.get(db, id=comment_id)
            if not comment_obj:
                raise NotFoundError(get_translation("errors.comment_not_found", locale or self.locale))
            task_obj = await task_crud.get(db, id=comment_obj.task_id)
            is_task_creator = task_obj is not None and task_obj.created_by_id == actor.id
            if comment_obj.user_id != actor.id and not is_task_creator:
                raise ForbiddenError(get_translation("errors.comment_delete_forbidden", locale or self.locale))

            await comment_crud.remove(db, id=comment_id, commit=False)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        return {"id": comment_id, "message": "Comment deleted successfully"}


comment_service = CommentService()
