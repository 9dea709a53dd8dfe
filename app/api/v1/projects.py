"""Projects API endpoints."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user, get_locale
from app.models.user import User
from app.crud.project import project as project_crud
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetailResponse, ProjectTaskSummary
from app.schemas.common import DeletedResponse
from app.services.project_service import project_service

router = APIRouter()


@router.get("/", response_model=List[ProjectResponse])
async def list_projects(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Projects created by the current user, with task counts."""
    rows = await project_crud.get_multi_by_owner_with_counts(db, owner_id=current_user.id)
    return [
        ProjectResponse.model_validate(project_obj).model_copy(update={"task_count": count})
        for project_obj, count in rows
    ]


@router.post("/", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a project."""
    return await project_service.create_project(db, data, current_user)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Get one of the current user's projects with its tasks."""
    project_obj = await project_service.get_owned(db, project_id, current_user, locale=locale)
    tasks = await project_crud.get_tasks(db, project_id=project_id)
    return ProjectDetailResponse.model_validate(
        {
            "id": project_obj.id,
            "name": project_obj.name,
            "description": project_obj.description,
            "created_by_id": project_obj.created_by_id,
            "created_at": project_obj.created_at,
            "task_count": len(tasks),
            "tasks": [ProjectTaskSummary.model_validate(task_obj) for task_obj in tasks],
        }
    )


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Update a project (owner only)."""
    project_obj = await project_service.update_project(db, project_id, data, current_user, locale)
    count = await project_crud.count_tasks(db, project_id=project_id)
    return ProjectResponse.model_validate(project_obj).model_copy(update={"task_count": count})


@router.delete("/{project_id}", response_model=DeletedResponse)
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    locale: str = Depends(get_locale),
):
    """Delete a project with its tasks (owner only)."""
    return await project_service.delete_project(db, project_id, current_user, locale)
