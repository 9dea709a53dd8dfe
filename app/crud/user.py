"""User CRUD operations."""
from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_, select
from app.crud.base import CRUDBase
from app.core.security import UserRole
from app.models.user import User
from app.schemas.user import UserCreate


class CRUDUser(CRUDBase[User, UserCreate, dict]):
    """CRUD operations for User."""

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[User]:
        """Get user by email."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[User]:
        """Get user by username."""
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_login(self, db: AsyncSession, *, login: str) -> Optional[User]:
        """Get user by email or username."""
        result = await db.execute(
            select(User).where(or_(User.email == login, User.username == login))
        )
        return result.scalars().first()

    async def get_admins(self, db: AsyncSession) -> List[User]:
        """All users with the ADMIN role. Admin count is assumed small."""
        result = await db.execute(select(User).where(User.role == UserRole.ADMIN))
        return list(result.scalars().all())

    async def exists(self, db: AsyncSession, *, id: UUID) -> bool:
        result = await db.execute(select(User.id).where(User.id == id))
        return result.scalar_one_or_none() is not None


user = CRUDUser(User)
