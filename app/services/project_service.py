"""Project mutations."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.crud.project import project as project_crud
from app.localization.helpers import get_translation
from app.models.project import Project
from app.models.system_event import SystemEventType
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.event_service import record_audit_event

logger = logging.getLogger(__name__)


class ProjectService:
    """Owner-scoped project operations."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale

    async def get_owned(
        self,
        db: AsyncSession,
        project_id: int,
        actor: User,
        forbidden_key: str = "errors.project_view_forbidden",
        locale: Optional[str] = None,
    ) -> Project:
        project_obj = await project_crud.get(db, id=project_id)
        if not project_obj:
            raise NotFoundError(get_translation("errors.project_not_found", locale or self.locale))
        if project_obj.created_by_id != actor.id:
            raise ForbiddenError(get_translation(forbidden_key, locale or self.locale))
        return project_obj

    async def create_project(self, db: AsyncSession, data: ProjectCreate, actor: User) -> Project:
        try:
            project_obj = await project_crud.create(
                db,
                obj_in={**data.model_dump(), "created_by_id": actor.id},
                commit=False,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(project_obj)
        logger.info(f"Project {project_obj.id} created by {actor.id}")

        record_audit_event(
            SystemEventType.PROJECT_CREATED,
            actor.id,
            actor.display_name,
            f"Created project: {project_obj.name}",
            project_id=project_obj.id,
            details={"projectName": project_obj.name},
        )
        return project_obj

    async def update_project(
        self, db: AsyncSession, project_id: int, data: ProjectUpdate, actor: User, locale: Optional[str] = None
    ) -> Project:
        """Rename or redescribe a project. Not audited."""
        try:
            project_obj = await self.get_owned(db, project_id, actor, "errors.project_update_forbidden", locale)
            await project_crud.update(db, db_obj=project_obj, obj_in=data.model_dump(), commit=False)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(project_obj)
        return project_obj

    async def delete_project(
        self, db: AsyncSession, project_id: int, actor: User, locale: Optional[str] = None
    ) -> Dict[str, Any]:
        """Delete a project and everything under it."""
        try:
            project_obj = await self.get_owned(db, project_id, actor, "errors.project_delete_forbidden", locale)
            name = project_obj.name
            await project_crud.remove_cascade(db, db_obj=project_obj)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Project {project_id} deleted by {actor.id}")

        record_audit_event(
            SystemEventType.PROJECT_DELETED,
            actor.id,
            actor.display_name,
            f"Deleted project: {name}",
            project_id=project_id,
            details={"projectName": name},
        )
        return {"id": project_id, "message": "Project deleted successfully"}


project_service = ProjectService()
