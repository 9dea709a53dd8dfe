"""Bootstrap utilities for ensuring the default admin exists."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.security import UserRole
from app.crud.user import user as user_crud
from app.models.user import User
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)


async def ensure_default_admin(
    db: AsyncSession,
    *,
    email: str = settings.DEFAULT_ADMIN_EMAIL,
    username: str = settings.DEFAULT_ADMIN_USERNAME,
    password: str = settings.DEFAULT_ADMIN_PASSWORD,
    name: str = settings.DEFAULT_ADMIN_NAME,
) -> User:
    """Ensure that the default administrator account exists and return it."""
    admin_user = await user_crud.get_by_email(db, email=email)
    if admin_user:
        # Ensure admin role assignment is present.
        if admin_user.role != UserRole.ADMIN:
            admin_user.role = UserRole.ADMIN
            await db.commit()
        return admin_user

    admin_user = User(
        name=name,
        username=username,
        email=email,
        password_hash=AuthService.hash_password(password),
        role=UserRole.ADMIN,
    )
    db.add(admin_user)
    await db.commit()
    await db.refresh(admin_user)
    logger.info(f"Created default admin {email}")
    return admin_user
