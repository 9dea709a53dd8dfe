"""History API endpoints."""
from collections import Counter
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user, get_locale
from app.models.user import User
from app.crud.history import history as history_crud
from app.crud.task import task as task_crud
from app.schemas.history import HistoryResponse, ActivitySummary
from app.core.exceptions import NotFoundError
from app.localization.helpers import get_translation

router = APIRouter()


@router.get("/task/{task_id}", response_model=List[HistoryResponse])
async def task_history(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Change log of a task, oldest first."""
    if not await task_crud.get(db, id=task_id):
        raise NotFoundError(get_translation("errors.task_not_found", locale))
    return await history_crud.get_by_task(db, task_id=task_id)


@router.get("/mine", response_model=List[HistoryResponse])
async def my_history(
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Changes made by the current user, newest first."""
    return await history_crud.get_by_user(db, user_id=current_user.id, limit=limit)


@router.get("/mine/task/{task_id}", response_model=List[HistoryResponse])
async def my_task_history(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Changes the current user made to one task."""
    return await history_crud.get_by_user_and_task(db, user_id=current_user.id, task_id=task_id)


@router.get("/summary", response_model=ActivitySummary)
async def activity_summary(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Counts of the current user's changes by action."""
    entries = await history_crud.get_by_user(db, user_id=current_user.id, limit=10000)
    by_action = Counter(entry.action.value for entry in entries)
    return ActivitySummary(
        total=len(entries),
        by_action=dict(by_action),
        last_activity=entries[0].timestamp if entries else None,
    )
