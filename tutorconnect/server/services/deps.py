"""
Request Dependencies.

Authentication and authorization dependencies shared by the API routers.

The bearer token is an HS256 JWT issued at login. ``get_current_user`` resolves
it to an active ``User`` row; ``require_role`` narrows that to one or more roles.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tutorconnect.core.database import get_session
from tutorconnect.core.database.entities.users import User, UserRole
from tutorconnect.core.database.repositories import UserRepository
from tutorconnect.core.logging_config import get_logger
from tutorconnect.core.security import InvalidTokenError, decode_access_token

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def _resolve_user(credentials: HTTPAuthorizationCredentials, session: AsyncSession) -> User:
    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired token")

    user = await UserRepository(session).get_active_by_id(str(claims.get("userId", "")))
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token or user not found")
    return user


async def get_current_user(
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        HTTPException: 401 when the header is missing or the user is unknown or
            inactive, 403 when the token is malformed, expired or forged.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    return await _resolve_user(credentials, session)


async def get_optional_user(
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous callers and bad tokens yield ``None``."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await _resolve_user(credentials, session)
    except HTTPException:
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


def require_role(*roles: UserRole):
    """Build a dependency that only lets users with one of ``roles`` through."""
    allowed = {role.value for role in roles}

    async def _check_role(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _check_role


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
TutorUser = Annotated[User, Depends(require_role(UserRole.TUTOR))]


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value


def ensure_owner_or_admin(user: User, owner_id: str) -> None:
    """Raise 403 unless ``user`` is ``owner_id`` or an administrator."""
    if user.id != owner_id and not is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
