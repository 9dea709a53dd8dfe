"""Authentication service."""
import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from app.crud.user import user as user_crud
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.schemas.user import UserCreate
from app.utils.security import verify_password, get_password_hash, create_access_token, create_refresh_token, decode_token
from app.config import settings
from app.core.exceptions import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service."""

    @staticmethod
    async def register(db: AsyncSession, data: RegisterRequest) -> User:
        """Create a regular user account."""
        if await user_crud.get_by_email(db, email=data.email):
            raise ConflictError("Email already registered")
        if await user_crud.get_by_username(db, username=data.username):
            raise ConflictError("Username already taken")

        new_user = await user_crud.create(
            db,
            obj_in=UserCreate(
                name=data.name,
                username=data.username,
                email=data.email,
                password_hash=AuthService.hash_password(data.password),
            ),
        )
        logger.info(f"Registered user {new_user.username}")
        return new_user

    @staticmethod
    async def authenticate_user(db: AsyncSession, login: str, password: str) -> Optional[User]:
        """Authenticate a user by email or username and password."""
        user = await user_crud.get_by_login(db, login=login)

        if not user:
            return None

        if not verify_password(password, user.password_hash):
            return None

        return user

    @staticmethod
    async def create_tokens(user: User) -> dict:
        """Create access and refresh tokens for a user."""
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=access_token_expires,
        )
        refresh_token = create_refresh_token(data={"sub": str(user.id)})

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    @staticmethod
    async def refresh_access_token(db: AsyncSession, refresh_token: str) -> dict:
        """Refresh access token using refresh token."""
        try:
            payload = decode_token(refresh_token)
        except ValueError:
            raise UnauthorizedError("Invalid refresh token")

        if payload.get("type") != "refresh":
            raise UnauthorizedError("Invalid token type")

        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedError("Invalid token")

        try:
            user = await user_crud.get(db, id=UUID(user_id))
        except ValueError:
            raise UnauthorizedError("Invalid token")

        if not user:
            raise UnauthorizedError("User not found")

        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={"sub": str(user.id), "email": user.email},
            expires_delta=access_token_expires,
        )

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password."""
        return get_password_hash(password)
