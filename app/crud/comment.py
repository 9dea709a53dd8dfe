"""Comment CRUD operations."""
from typing import List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.crud.base import CRUDBase
from app.models.comment import Comment
from app.schemas.comment import CommentCreate


class CRUDComment(CRUDBase[Comment, CommentCreate, dict]):
    """CRUD operations for Comment."""

    async def get_by_task(self, db: AsyncSession, *, task_id: int) -> List[Comment]:
        """Comments on a task, oldest first."""
        result = await db.execute(
            select(Comment)
            .where(Comment.task_id == task_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_user(self, db: AsyncSession, *, user_id: UUID) -> List[Comment]:
        """Comments written by a user, newest first."""
        result = await db.execute(
            select(Comment)
            .where(Comment.user_id == user_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.scalars().all())


comment = CRUDComment(Comment)
