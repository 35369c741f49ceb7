"""FastAPI dependencies."""

from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import UnauthorizedException
from app.core.redis_client import CacheManager, RateLimiter, get_redis_client
from app.core.security import has_permission
from app.core.storage import CloudinaryStorage, get_file_storage
from app.database import get_db
from app.services.auth_service import AuthService

# The dashboard sends the session cookie; API clients may use a bearer header.
security = HTTPBearer(auto_error=False)


def get_cache_manager() -> CacheManager:
    return CacheManager(get_redis_client())


def get_rate_limiter() -> RateLimiter:
    return RateLimiter(get_redis_client())


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CacheManagerDep = Annotated[CacheManager, Depends(get_cache_manager)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]
FileStorage = Annotated[CloudinaryStorage, Depends(get_file_storage)]


def get_session_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """
    Extract the admin session token from the cookie or Authorization header.

    Args:
        request: Incoming request
        credentials: Bearer credentials, if any

    Returns:
        The raw token or None when neither is present
    """
    token = request.cookies.get(settings.admin_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


SessionToken = Annotated[str | None, Depends(get_session_token)]


async def get_current_admin(
    token: SessionToken,
    db: DatabaseSession,
    cache: CacheManagerDep,
) -> dict[str, Any]:
    """
    Get the authenticated admin or office manager.

    Raises:
        UnauthorizedException: If there is no valid session
    """
    return await AuthService(cache).authenticate(db, token)


CurrentAdmin = Annotated[dict[str, Any], Depends(get_current_admin)]


def require_permission(permission: str) -> Callable[..., Awaitable[dict[str, Any]]]:
    """
    Build a dependency that admits only admins holding ``permission``.

    Usage:
        admin: Annotated[dict, Depends(require_permission("update_chambers"))]
    """

    async def checker(admin: CurrentAdmin) -> dict[str, Any]:
        if not has_permission(admin["role"], permission):
            raise UnauthorizedException("Unauthorized")
        return admin

    return checker


async def require_admin_role(admin: CurrentAdmin) -> dict[str, Any]:
    """Admit only the ADMIN role, for account management and verification."""
    if admin["role"] != "ADMIN":
        raise UnauthorizedException("Unauthorized")
    return admin


AdminOnly = Annotated[dict[str, Any], Depends(require_admin_role)]
