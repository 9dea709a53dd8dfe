"""Comments API endpoints."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user, get_locale
from app.models.user import User
from app.crud.comment import comment as comment_crud
from app.schemas.comment import CommentCreate, CommentResponse
from app.schemas.common import DeletedResponse
from app.services.comment_service import comment_service

router = APIRouter()


@router.get("/mine", response_model=List[CommentResponse])
async def list_my_comments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Comments written by the current user, newest first."""
    return await comment_crud.get_by_user(db, user_id=current_user.id)


@router.get("/task/{task_id}", response_model=List[CommentResponse])
async def list_task_comments(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Comments on a task, oldest first."""
    return await comment_service.list_for_task(db, task_id, locale)


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Comment on a task."""
    return await comment_service.create_comment(db, data, current_user, locale)


@router.delete("/{comment_id}", response_model=DeletedResponse)
async def delete_comment(
    comment_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Delete a comment (author or task creator)."""
    return await comment_service.delete_comment(db, comment_id, current_user, locale)
