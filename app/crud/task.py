"""Task CRUD operations."""
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload
from app.crud.base import CRUDBase
from app.models.comment import Comment
from app.models.history import History
from app.models.task import Task


class CRUDTask(CRUDBase[Task, dict, dict]):
    """CRUD operations for Task."""

    async def get_for_update(self, db: AsyncSession, *, id: int) -> Optional[Task]:
        """Read a task inside a write transaction, locking the row where supported."""
        result = await db.execute(select(Task).where(Task.id == id).with_for_update())
        return result.scalar_one_or_none()

    async def get_with_details(self, db: AsyncSession, *, id: int) -> Optional[Task]:
        """Get task with comments and history loaded."""
        result = await db.execute(
            select(Task)
            .where(Task.id == id)
            .options(selectinload(Task.comments), selectinload(Task.history))
        )
        return result.scalar_one_or_none()

    async def get_multi_by_creator(self, db: AsyncSession, *, creator_id: UUID) -> List[Task]:
        """Tasks created by a user, newest first."""
        result = await db.execute(
            select(Task)
            .where(Task.created_by_id == creator_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
        )
        return list(result.scalars().all())

    async def remove_cascade(self, db: AsyncSession, *, db_obj: Task) -> None:
        """Delete a task with its comments and history. Does not commit."""
        await db.execute(delete(Comment).where(Comment.task_id == db_obj.id))
        await db.execute(delete(History).where(History.task_id == db_obj.id))
        await db.delete(db_obj)
        await db.flush()


task = CRUDTask(Task)
