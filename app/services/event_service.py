"""System event recording and admin fan-out.

A mutation calls ``record_audit_event`` after its transaction commits. The
call returns immediately; a detached task appends the SystemEvent row and
then tries to notify every admin right away. Rows the immediate path could
not finish stay ``processed = false`` and are picked up by the sweep in
``app.services.event_processor``.
"""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.crud.notification import notification as notification_crud
from app.crud.system_event import system_event as system_event_crud
from app.crud.user import user as user_crud
from app.database import AsyncSessionLocal
from app.localization.helpers import get_translation
from app.middleware.metrics import (
    admin_notifications_created_total,
    event_pipeline_errors_total,
    system_events_processed_total,
    system_events_recorded_total,
)
from app.models.notification import NotificationType
from app.models.system_event import SystemEvent, SystemEventType

logger = logging.getLogger(__name__)


class DeliveryGuarantee(str, Enum):
    """How the immediate path and the sweep share an event."""

    # Notify first, mark afterwards. Both paths may notify the same event.
    AT_LEAST_ONCE = "at_least_once"
    # Claim (processed false -> true) first; only the winner notifies.
    AT_MOST_ONCE = "at_most_once"


def stringify_detail(value: Any, fallback: str) -> str:
    """Render a details value as display text. Never raises.

    Strings pass through, numbers use ``str``, booleans become ``true``/``false``,
    ``None`` yields ``fallback``. Mappings and sequences are JSON-encoded; anything
    else uses its ``str``. Any failure yields ``fallback``.
    """
    if value is None:
        return fallback
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    try:
        if isinstance(value, (Mapping, Sequence)) and not isinstance(value, (bytes, bytearray)):
            return json.dumps(value, default=str, ensure_ascii=False)
        return str(value)
    except Exception:
        return fallback


def serialize_details(details: Optional[Mapping[str, Any]]) -> Optional[str]:
    """JSON text stored in ``SystemEvent.details``."""
    if not details:
        return None
    return json.dumps(dict(details), default=str, ensure_ascii=False)


def parse_details(raw: Optional[str]) -> Dict[str, Any]:
    """Inverse of ``serialize_details``; malformed payloads become ``{}``."""
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Discarding malformed event details: {raw[:100]!r}")
        return {}
    return parsed if isinstance(parsed, dict) else {"value": parsed}


# event type -> (message key, subject detail, subject placeholder, notification type)
_ADMIN_MESSAGES: Dict[SystemEventType, Tuple[str, str, str, NotificationType]] = {
    SystemEventType.PROJECT_CREATED: ("admin.project_created", "projectName", "project", NotificationType.PROJECT_CREATED),
    SystemEventType.PROJECT_DELETED: ("admin.project_deleted", "projectName", "project", NotificationType.PROJECT_DELETED),
    SystemEventType.TASK_CREATED: ("admin.task_created", "taskTitle", "task", NotificationType.TASK_CREATED),
    SystemEventType.TASK_UPDATED: ("admin.task_updated", "taskTitle", "task", NotificationType.TASK_STATUS_CHANGED),
    SystemEventType.TASK_DELETED: ("admin.task_deleted", "taskTitle", "task", NotificationType.TASK_DELETED),
    SystemEventType.COMMENT_ADDED: ("admin.comment_added", "taskTitle", "task", NotificationType.COMMENT_ADDED),
}


def _coerce_event_type(event_type: Any) -> Optional[SystemEventType]:
    if isinstance(event_type, SystemEventType):
        return event_type
    try:
        return SystemEventType(str(event_type))
    except ValueError:
        return None


def build_admin_message(
    event_type: Any,
    action: str,
    details: Optional[Mapping[str, Any]] = None,
    locale: Optional[str] = None,
) -> Tuple[str, NotificationType]:
    """Localized admin message and notification type for one event.

    Unknown event types fall back to the raw action text in the
    ``COMMENT_ADDED`` bucket.
    """
    details = details or {}
    known = _coerce_event_type(event_type)
    if known is None:
        return action, NotificationType.COMMENT_ADDED

    key, subject_field, placeholder, notification_type = _ADMIN_MESSAGES[known]
    unknown_value = get_translation("admin.unknown_value", locale)
    actor = stringify_detail(details.get("userName"), get_translation("admin.unknown_user", locale))
    subject = stringify_detail(details.get(subject_field), unknown_value)
    message = get_translation(key, locale, actor=actor, **{placeholder: subject})
    return message, notification_type


class AdminNotifier:
    """Fans one event out to one Notification per admin."""

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        locale: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.locale = locale

    async def notify(
        self,
        event_type: Any,
        action: str,
        details: Optional[Mapping[str, Any]] = None,
        message: Optional[str] = None,
    ) -> bool:
        """Insert the admin notifications. Returns False on failure, never raises.

        A ready-made ``message`` is stored as is; otherwise the text is built
        from the event type and details.
        """
        try:
            async with self.session_factory() as db:
                admins = await user_crud.get_admins(db)
                if not admins:
                    logger.debug(f"No admins to notify for {event_type}")
                    return True

                text, notification_type = build_admin_message(event_type, action, details, self.locale)
                if message is not None:
                    text = message
                rows = [
                    {"user_id": admin.id, "message": text, "type": notification_type, "read": False}
                    for admin in admins
                ]
                await notification_crud.create_many_skip_duplicates(db, rows=rows)
                await db.commit()
        except Exception:
            logger.exception(f"Error notifying admins of {event_type}")
            event_pipeline_errors_total.labels(stage="notify").inc()
            return False

        admin_notifications_created_total.inc(len(rows))
        logger.info(f"Notified {len(rows)} admin(s) of {event_type}")
        return True


class EventRecorder:
    """Appends SystemEvent rows and runs the immediate admin notification."""

    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        notifier: Optional[AdminNotifier] = None,
        guarantee: Optional[DeliveryGuarantee] = None,
    ):
        self.session_factory = session_factory
        self.notifier = notifier if notifier is not None else AdminNotifier(session_factory)
        self.guarantee = DeliveryGuarantee(guarantee or settings.EVENT_DELIVERY_GUARANTEE)
        self._pending: Set[asyncio.Task] = set()

    async def _insert(self, db: AsyncSession, payload: Dict[str, Any]) -> SystemEvent:
        event = await system_event_crud.create(db, obj_in=payload)
        system_events_recorded_total.labels(type=event.type.value).inc()
        logger.info(f"Recorded system event {event.id} ({event.type.value})")
        return event

    async def record(
        self,
        event_type: SystemEventType,
        user_id: UUID,
        user_name: Optional[str],
        action: str,
        *,
        project_id: Optional[int] = None,
        task_id: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> Optional[int]:
        """Insert the event, notify admins, mark it processed.

        Returns the event id, or None when the insert failed. Never raises.
        """
        payload = {
            "type": event_type,
            "user_id": user_id,
            "user_name": user_name,
            "project_id": project_id,
            "task_id": task_id,
            "action": action,
            "details": serialize_details(details),
            "processed": False,
        }
        try:
            async with self.session_factory() as db:
                event = await self._insert(db, payload)
                event_id = event.id
        except Exception:
            logger.exception(f"Error creating system event {event_type}")
            event_pipeline_errors_total.labels(stage="record").inc()
            return None

        notify_details = dict(details or {})
        notify_details.setdefault("userName", user_name)

        try:
            if self.guarantee is DeliveryGuarantee.AT_MOST_ONCE:
                async with self.session_factory() as db:
                    claimed = await system_event_crud.claim(db, ids=[event_id])
                if not claimed:
                    logger.info(f"System event {event_id} already claimed by the sweep")
                    return event_id
                system_events_processed_total.labels(source="immediate").inc()
                if not await self.notifier.notify(event_type, action, notify_details):
                    logger.warning(f"System event {event_id} claimed but admin notification failed")
                return event_id

            if not await self.notifier.notify(event_type, action, notify_details):
                logger.warning(f"System event {event_id} left for the sweep")
                return event_id
            async with self.session_factory() as db:
                await system_event_crud.mark_processed(db, ids=[event_id])
            system_events_processed_total.labels(source="immediate").inc()
        except Exception:
            logger.exception(f"Error finishing system event {event_id}")
            event_pipeline_errors_total.labels(stage="mark").inc()
        return event_id

    def schedule(self, *args: Any, **kwargs: Any) -> Optional[asyncio.Task]:
        """Run ``record`` as a detached task. Returns None outside an event loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("record_audit_event called without a running event loop; event dropped")
            event_pipeline_errors_total.labels(stage="record").inc()
            return None

        task = loop.create_task(self.record(*args, **kwargs))
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("System event recording cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled error in system event recording", exc_info=exc)
            event_pipeline_errors_total.labels(stage="record").inc()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled recording to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


admin_notifier = AdminNotifier()
event_recorder = EventRecorder(notifier=admin_notifier)


def record_audit_event(
    event_type: SystemEventType,
    user_id: UUID,
    user_name: Optional[str],
    action: str,
    *,
    project_id: Optional[int] = None,
    task_id: Optional[int] = None,
    details: Optional[Mapping[str, Any]] = None,
) -> None:
    """Fire-and-forget audit hook for mutation services. Never raises."""
    event_recorder.schedule(
        event_type,
        user_id,
        user_name,
        action,
        project_id=project_id,
        task_id=task_id,
        details=details,
    )
