"""Tasks API endpoints."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user, get_locale
from app.models.user import User
from app.crud.task import task as task_crud
from app.schemas.task import TaskCreate, TaskUpdate, TaskResponse, TaskDetailResponse
from app.schemas.common import DeletedResponse
from app.core.exceptions import NotFoundError
from app.localization.helpers import get_translation
from app.services.task_service import task_service

router = APIRouter()


@router.get("/", response_model=List[TaskResponse])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Tasks created by the current user."""
    return await task_crud.get_multi_by_creator(db, creator_id=current_user.id)


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Create a task."""
    return await task_service.create_task(db, data, current_user, locale)


@router.get("/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Get a task with its comments and history."""
    task_obj = await task_crud.get_with_details(db, id=task_id)
    if not task_obj:
        raise NotFoundError(get_translation("errors.task_not_found", locale))
    return task_obj


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Update a task (creator only)."""
    return await task_service.update_task(db, task_id, data, current_user, locale)


@router.delete("/{task_id}", response_model=DeletedResponse)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Delete a task (creator only)."""
    return await task_service.delete_task(db, task_id, current_user, locale)
