"""Admin authentication endpoints."""

from fastapi import APIRouter, Response, status

from app.config import settings
from app.dependencies import (
    CacheManagerDep,
    CurrentAdmin,
    DatabaseSession,
    RateLimiterDep,
    SessionToken,
)
from app.schemas.auth import AdminUserResponse, LoginRequest, LoginResponse, MeResponse
from app.schemas.common import MessageResponse
from app.services.auth_service import AuthService

router = APIRouter()


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.admin_cookie_name,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin login",
)
async def login(
    request: LoginRequest,
    response: Response,
    db: DatabaseSession,
    cache: CacheManagerDep,
    rate_limiter: RateLimiterDep,
) -> LoginResponse:
    """
    Authenticate an admin or office manager and start a cookie session.

    Args:
        request: Email and password
        response: Outgoing response, receives the session cookie
        db: Database session
        cache: Cache manager
        rate_limiter: Per-email login throttle

    Returns:
        Confirmation message and the signed-in admin
    """
    auth_service = AuthService(cache, rate_limiter)
    user, token = await auth_service.login(db, request.email, request.password)

    _set_session_cookie(response, token, settings.admin_token_expire_hours * 3600)
    return LoginResponse(message="Login successful", user=AdminUserResponse(**user))


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin logout",
)
async def logout(
    response: Response,
    token: SessionToken,
    cache: CacheManagerDep,
) -> MessageResponse:
    """Clear the session cookie and revoke the presented token."""
    AuthService(cache).logout(token)
    _set_session_cookie(response, "", 0)
    return MessageResponse(message="Logout successful")


@router.get(
    "/me",
    response_model=MeResponse,
    status_code=status.HTTP_200_OK,
    summary="Current admin",
)
async def me(current_admin: CurrentAdmin) -> MeResponse:
    return MeResponse(user=AdminUserResponse(**current_admin))
