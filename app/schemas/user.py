"""User schemas."""
from uuid import UUID
from pydantic import BaseModel, EmailStr
from datetime import datetime
from app.core.security import UserRole


class UserCreate(BaseModel):
    """User creation schema (password already hashed)."""

    name: str
    username: str
    email: EmailStr
    password_hash: str
    role: UserRole = UserRole.USER


class UserSummary(BaseModel):
    """Compact user reference embedded in other responses."""

    id: UUID
    username: str
    name: str

    class Config:
        from_attributes = True


class UserResponse(UserSummary):
    """User response schema."""

    email: EmailStr
    role: UserRole
    created_at: datetime
