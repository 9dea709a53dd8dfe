"""FastAPI dependencies for authentication and authorization."""
from typing import Optional
from uuid import UUID
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.crud.user import user as user_crud
from app.models.user import User
from app.utils.security import decode_token
from app.core.exceptions import UnauthorizedError, ForbiddenError
from app.localization.helpers import get_locale_from_request

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login")


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = UnauthorizedError(locale=get_locale_from_request(request))

    try:
        payload = decode_token(token)
        user_id: Optional[str] = payload.get("sub")
        token_type: Optional[str] = payload.get("type")

        if user_id is None or token_type != "access":
            raise credentials_exception
        user_uuid = UUID(user_id)
    except ValueError:
        raise credentials_exception

    user = await user_crud.get(db, id=user_uuid)

    if user is None:
        raise credentials_exception

    return user


async def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """Allow only ADMIN accounts."""
    if not current_user.is_admin:
        raise ForbiddenError(locale=get_locale_from_request(request))
    return current_user


def get_locale(request: Request) -> str:
    """Locale for error messages, from the Accept-Language header."""
    return get_locale_from_request(request)
