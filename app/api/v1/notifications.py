"""Notifications API endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user, get_locale
from app.models.notification import Notification
from app.models.user import User
from app.crud.notification import notification as notification_crud
from app.schemas.notification import NotificationResponse, MarkAllReadResponse, UnreadCountResponse
from app.schemas.common import DeletedResponse
from app.core.exceptions import ForbiddenError, NotFoundError
from app.localization.helpers import get_translation

router = APIRouter()


async def _get_own_notification(
    db: AsyncSession, notification_id: int, user: User, locale: Optional[str] = None
) -> Notification:
    notification_obj = await notification_crud.get(db, id=notification_id)
    if not notification_obj:
        raise NotFoundError(get_translation("errors.notification_not_found", locale))
    if notification_obj.user_id != user.id:
        raise ForbiddenError(get_translation("errors.notification_forbidden", locale))
    return notification_obj


@router.get("/", response_model=List[NotificationResponse])
async def list_notifications(
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Latest notifications of the current user."""
    return await notification_crud.get_by_user(db, user_id=current_user.id, limit=limit)


@router.get("/unread", response_model=List[NotificationResponse])
async def list_unread(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Unread notifications of the current user."""
    return await notification_crud.get_unread(db, user_id=current_user.id)


@router.get("/unread/count", response_model=UnreadCountResponse)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = await notification_crud.count_unread(db, user_id=current_user.id)
    return UnreadCountResponse(count=count)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark every unread notification as read."""
    updated = await notification_crud.mark_all_read(db, user_id=current_user.id)
    return MarkAllReadResponse(updated=updated, message=f"{updated} notifications marked as read")


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Mark one notification as read (recipient only)."""
    notification_obj = await _get_own_notification(db, notification_id, current_user, locale)
    return await notification_crud.update(db, db_obj=notification_obj, obj_in={"read": True})


@router.delete("/{notification_id}", response_model=DeletedResponse)
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Delete a notification (recipient only)."""
    await _get_own_notification(db, notification_id, current_user, locale)
    await notification_crud.remove(db, id=notification_id)
    return DeletedResponse(id=notification_id, message="Notification deleted successfully")
