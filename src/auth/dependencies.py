from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database import get_db
from src.config import settings
from src.auth import security, models
from src.exceptions import Unauthenticated

optional_oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False
)


async def resolve_user(token: Optional[str], db: AsyncSession) -> models.User:
    """Turn a bearer token into an active user or raise Unauthenticated."""
    if not token:
        raise Unauthenticated("Not authenticated")
    try:
        payload = security.decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise Unauthenticated()
        user_id = UUID(subject)
    except (JWTError, ValueError):
        raise Unauthenticated()

    user = await db.get(models.User, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated()
    return user


async def get_current_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> models.User:
    return await resolve_user(token, db)


async def get_current_active_user(
    current_user: models.User = Depends(get_current_user),
) -> models.User:
    if not current_user.is_active:
        raise Unauthenticated("Inactive user")
    return current_user
