"""Notification CRUD operations."""
from typing import Any, Dict, List, Sequence
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from app.crud.base import CRUDBase
from app.models.notification import Notification


class CRUDNotification(CRUDBase[Notification, dict, dict]):
    """CRUD operations for Notification."""

    async def create_many_skip_duplicates(
        self,
        db: AsyncSession,
        *,
        rows: Sequence[Dict[str, Any]],
    ) -> int:
        """Bulk insert, silently skipping rows that violate a unique constraint.

        Returns the number of rows submitted. Does not commit.
        """
        if not rows:
            return 0

        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(Notification.__table__).on_conflict_do_nothing()
        elif dialect == "sqlite":
            stmt = sqlite_insert(Notification.__table__).on_conflict_do_nothing()
        else:
            # No portable ON CONFLICT clause; plain insert.
            stmt = Notification.__table__.insert()

        await db.execute(stmt, [dict(row) for row in rows])
        return len(rows)

    async def get_by_user(self, db: AsyncSession, *, user_id: UUID, limit: int = 50) -> List[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_unread(self, db: AsyncSession, *, user_id: UUID) -> List[Notification]:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return list(result.scalars().all())

    async def count_unread(self, db: AsyncSession, *, user_id: UUID) -> int:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.read.is_(False)
            )
        )
        return result.scalar_one()

    async def mark_all_read(self, db: AsyncSession, *, user_id: UUID) -> int:
        """Mark every unread notification of a user as read; returns the count."""
        result = await db.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount or 0


notification = CRUDNotification(Notification)
