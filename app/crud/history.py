"""History CRUD operations (append-only)."""
from typing import Any, Dict, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.crud.base import CRUDBase
from app.models.history import History


class CRUDHistory(CRUDBase[History, dict, dict]):
    """CRUD operations for History."""

    async def create_many(
        self,
        db: AsyncSession,
        *,
        entries: Sequence[Dict[str, Any]],
    ) -> List[History]:
        """Insert entries in order. Does not commit."""
        rows = [History(**entry) for entry in entries]
        db.add_all(rows)
        await db.flush()
        return rows

    async def get_by_task(self, db: AsyncSession, *, task_id: int) -> List[History]:
        result = await db.execute(
            select(History)
            .where(History.task_id == task_id)
            .order_by(History.timestamp.asc(), History.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_user(self, db: AsyncSession, *, user_id: UUID, limit: int = 100) -> List[History]:
        result = await db.execute(
            select(History)
            .where(History.user_id == user_id)
            .order_by(History.timestamp.desc(), History.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_by_user_and_task(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        task_id: int,
    ) -> List[History]:
        result = await db.execute(
            select(History)
            .where(History.task_id == task_id, History.user_id == user_id)
            .order_by(History.timestamp.asc(), History.id.asc())
        )
        return list(result.scalars().all())


history = CRUDHistory(History)
