"""Batch processing of unprocessed system events."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.config import settings
from app.crud.system_event import system_event as system_event_crud
from app.database import AsyncSessionLocal
from app.localization.helpers import get_translation
from app.middleware.metrics import event_pipeline_errors_total, system_events_processed_total
from app.models.system_event import SystemEvent, SystemEventType
from app.services.event_service import (
    AdminNotifier,
    DeliveryGuarantee,
    admin_notifier,
    parse_details,
)

logger = logging.getLogger(__name__)

_SWEEP_TAGS = {
    SystemEventType.PROJECT_CREATED: "sweep.project_created",
    SystemEventType.PROJECT_DELETED: "sweep.project_deleted",
    SystemEventType.TASK_CREATED: "sweep.task_created",
    SystemEventType.TASK_UPDATED: "sweep.task_updated",
    SystemEventType.TASK_DELETED: "sweep.task_deleted",
    SystemEventType.COMMENT_ADDED: "sweep.comment_added",
}


def build_event_message(event: SystemEvent, locale: Optional[str] = None) -> str:
    """``[TAG] user action`` line used by the sweep."""
    user = event.user_name or get_translation("admin.unknown_user", locale)
    tag_key = _SWEEP_TAGS.get(event.type)
    if tag_key is None:
        return f"{user} {event.action}"
    return f"{get_translation(tag_key, locale)} {user} {event.action}"


@dataclass
class SweepResult:
    """Counts for one sweep pass."""

    fetched: int = 0
    notified: int = 0
    failed: int = 0
    marked: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class EventProcessor:
    """Notifies admins for events the immediate path did not finish."""

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        notifier: Optional[AdminNotifier] = None,
        batch_size: Optional[int] = None,
        guarantee: Optional[DeliveryGuarantee] = None,
        locale: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.notifier = notifier if notifier is not None else admin_notifier
        self.batch_size = batch_size or settings.EVENT_SWEEP_BATCH_SIZE
        self.guarantee = DeliveryGuarantee(guarantee or settings.EVENT_DELIVERY_GUARANTEE)
        self.locale = locale

    async def _fetch(self) -> List[SystemEvent]:
        async with self.session_factory() as db:
            return await system_event_crud.get_unprocessed(db, limit=self.batch_size)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(SQLAlchemyError),
        reraise=True,
    )
    async def _mark_processed(self, ids: Sequence[int]) -> int:
        async with self.session_factory() as db:
            return await system_event_crud.mark_processed(db, ids=ids)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(SQLAlchemyError),
        reraise=True,
    )
    async def _claim(self, ids: Sequence[int]) -> List[int]:
        async with self.session_factory() as db:
            return await system_event_crud.claim(db, ids=ids)

    async def _notify(self, event: SystemEvent) -> bool:
        message = build_event_message(event, self.locale)
        metadata = parse_details(event.details)
        metadata.update(
            {
                "userId": str(event.user_id),
                "userName": event.user_name,
                "projectId": event.project_id,
                "taskId": event.task_id,
                "action": event.action,
                "timestamp": event.created_at.isoformat() if event.created_at else None,
            }
        )
        return await self.notifier.notify(event.type, event.action, metadata, message=message)

    async def process_system_events(self) -> SweepResult:
        """Run one sweep pass. Never raises."""
        result = SweepResult()
        try:
            events = await self._fetch()
        except Exception:
            logger.exception("Error fetching unprocessed events")
            event_pipeline_errors_total.labels(stage="sweep").inc()
            return result

        if not events:
            logger.info("No unprocessed events")
            return result

        result.fetched = len(events)
        logger.info(f"Processing {len(events)} events")

        if self.guarantee is DeliveryGuarantee.AT_MOST_ONCE:
            try:
                claimed = set(await self._claim([event.id for event in events]))
            except Exception:
                logger.exception("Error claiming events")
                event_pipeline_errors_total.labels(stage="mark").inc()
                return result
            events = [event for event in events if event.id in claimed]
            result.marked = len(events)
            system_events_processed_total.labels(source="sweep").inc(len(events))

        for event in events:
            try:
                ok = await self._notify(event)
            except Exception:
                logger.exception(f"Error processing event {event.id}")
                ok = False
            if ok:
                result.notified += 1
            else:
                result.failed += 1
                event_pipeline_errors_total.labels(stage="sweep").inc()

        if self.guarantee is DeliveryGuarantee.AT_LEAST_ONCE:
            # Every fetched id is marked, including failed ones.
            try:
                result.marked = await self._mark_processed([event.id for event in events])
                system_events_processed_total.labels(source="sweep").inc(result.marked)
            except Exception:
                logger.exception("Error marking events as processed")
                event_pipeline_errors_total.labels(stage="mark").inc()

        logger.info(
            f"Processed {result.fetched} events: {result.notified} notified, "
            f"{result.failed} failed, {result.marked} marked"
        )
        return result


event_processor = EventProcessor()
