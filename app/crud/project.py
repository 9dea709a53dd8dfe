"""Project CRUD operations."""
from typing import List, Tuple
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select
from app.crud.base import CRUDBase
from app.models.comment import Comment
from app.models.history import History
from app.models.project import Project
from app.models.task import Task


class CRUDProject(CRUDBase[Project, dict, dict]):
    """CRUD operations for Project."""

    async def get_multi_by_owner_with_counts(
        self,
        db: AsyncSession,
        *,
        owner_id: UUID,
    ) -> List[Tuple[Project, int]]:
        """Projects created by a user, newest first, with their task count."""
        task_count = (
            select(func.count(Task.id))
            .where(Task.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
        )
        result = await db.execute(
            select(Project, task_count)
            .where(Project.created_by_id == owner_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
        )
        return [(row[0], row[1]) for row in result.all()]

    async def count_tasks(self, db: AsyncSession, *, project_id: int) -> int:
        result = await db.execute(select(func.count(Task.id)).where(Task.project_id == project_id))
        return result.scalar_one()

    async def get_tasks(self, db: AsyncSession, *, project_id: int) -> List[Task]:
        result = await db.execute(
            select(Task).where(Task.project_id == project_id).order_by(Task.id)
        )
        return list(result.scalars().all())

    async def remove_cascade(self, db: AsyncSession, *, db_obj: Project) -> None:
        """Delete a project with its tasks, comments and history. Does not commit."""
        task_ids = select(Task.id).where(Task.project_id == db_obj.id)
        await db.execute(delete(Comment).where(Comment.task_id.in_(task_ids)))
        await db.execute(delete(History).where(History.task_id.in_(task_ids)))
        await db.execute(delete(Task).where(Task.project_id == db_obj.id))
        await db.delete(db_obj)
        await db.flush()


project = CRUDProject(Project)
