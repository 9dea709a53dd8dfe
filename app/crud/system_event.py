"""System event CRUD operations."""
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from app.crud.base import CRUDBase
from app.models.system_event import SystemEvent, SystemEventType


class CRUDSystemEvent(CRUDBase[SystemEvent, dict, dict]):
    """CRUD operations for SystemEvent."""

    async def get_unprocessed(self, db: AsyncSession, *, limit: int = 100) -> List[SystemEvent]:
        """Oldest unprocessed events first."""
        result = await db.execute(
            select(SystemEvent)
            .where(SystemEvent.processed.is_(False))
            .order_by(SystemEvent.created_at.asc(), SystemEvent.id.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def mark_processed(self, db: AsyncSession, *, ids: Sequence[int]) -> int:
        """Set processed=true on the given ids. Idempotent. Commits."""
        if not ids:
            return 0
        result = await db.execute(
            update(SystemEvent)
            .where(SystemEvent.id.in_(list(ids)))
            .values(processed=True, processed_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return result.rowcount or 0

    async def claim(self, db: AsyncSession, *, ids: Sequence[int]) -> List[int]:
        """Atomically flip processed=false->true and return the ids this call won. Commits."""
        if not ids:
            return []
        result = await db.execute(
            update(SystemEvent)
            .where(SystemEvent.id.in_(list(ids)), SystemEvent.processed.is_(False))
            .values(processed=True, processed_at=datetime.now(timezone.utc))
            .returning(SystemEvent.id)
            .execution_options(synchronize_session=False)
        )
        claimed = [row[0] for row in result.all()]
        await db.commit()
        return claimed

    async def get_multi_filtered(
        self,
        db: AsyncSession,
        *,
        processed: Optional[bool] = None,
        event_type: Optional[SystemEventType] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[SystemEvent]:
        """Newest events first, optionally filtered."""
        query = select(SystemEvent)
        if processed is not None:
            query = query.where(SystemEvent.processed.is_(processed))
        if event_type is not None:
            query = query.where(SystemEvent.type == event_type)
        query = query.order_by(SystemEvent.created_at.desc(), SystemEvent.id.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())


system_event = CRUDSystemEvent(SystemEvent)
