"""Authentication service for admin sessions."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import RateLimitException, UnauthorizedException
from app.core.redis_client import CacheManager, RateLimiter
from app.core.security import (
    ADMIN_ROLES,
    create_access_token,
    decode_access_token,
    token_ttl_seconds,
    verify_password,
)
from app.models.admins import admins
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


def revocation_key(token: str) -> str:
    return f"blacklist:{token}"


class AuthService:
    """Authentication service for admin login, logout and token checks."""

    def __init__(self, cache_manager: CacheManager, rate_limiter: RateLimiter | None = None):
        """Initialize auth service with cache manager and optional rate limiter."""
        self.cache = cache_manager
        self.rate_limiter = rate_limiter

    @staticmethod
    async def _admin_profile(db: AsyncSession, user_id: UUID) -> dict | None:
        result = await db.execute(select(admins).where(admins.c.user_id == user_id))
        profile = result.mappings().first()
        return dict(profile) if profile else None

    @staticmethod
    def _session_user(user: dict, admin: dict | None) -> dict[str, Any]:
        return {
            "id": user["id"],
            "email": user["email"],
            "role": user["role"],
            "name": admin["name"] if admin else None,
            "admin": admin,
        }

    async def login(self, db: AsyncSession, email: str, password: str) -> tuple[dict, str]:
        """
        Authenticate an admin or office manager.

        Args:
            db: Database session
            email: Login email
            password: Plain password

        Returns:
            Tuple of (session user, signed token)

        Raises:
            RateLimitException: If too many attempts were made for this email
            UnauthorizedException: If credentials are wrong or the role is not an admin role
        """
        if self.rate_limiter and not self.rate_limiter.check_rate_limit(
            f"login:{email.lower()}", settings.login_attempts_per_minute
        ):
            logger.warning("admin_login_throttled", email=email)
            raise RateLimitException("Too many login attempts. Please try again later.")

        user = await UserService.get_user_by_email(db, email)
        if not user or user["role"] not in ADMIN_ROLES or not user["is_active"]:
            logger.info("admin_login_rejected", email=email)
            raise UnauthorizedException("Invalid credentials or insufficient permissions")

        if not verify_password(password, user["hashed_password"]):
            logger.info("admin_login_rejected", email=email)
            raise UnauthorizedException("Invalid credentials")

        admin = await self._admin_profile(db, user["id"])
        if admin:
            last_login_at = datetime.now(UTC)
            await db.execute(
                update(admins)
                .where(admins.c.user_id == user["id"])
                .values(last_login_at=last_login_at)
            )
            await db.commit()
            admin["last_login_at"] = last_login_at

        token = create_access_token(
            data={"sub": str(user["id"]), "email": user["email"], "role": user["role"]}
        )
        logger.info("admin_login", user_id=str(user["id"]), role=user["role"])
        return self._session_user(user, admin), token

    def logout(self, token: str | None) -> None:
        """Revoke a session token until it would have expired anyway."""
        if not token:
            return
        payload = decode_access_token(token)
        if payload is None:
            return
        self.cache.set(revocation_key(token), "1", ttl=token_ttl_seconds(payload))
        logger.info("admin_logout", user_id=payload.get("sub"))

    def is_revoked(self, token: str) -> bool:
        return self.cache.exists(revocation_key(token))

    async def authenticate(self, db: AsyncSession, token: str | None) -> dict[str, Any]:
        """
        Resolve a session token to the admin it belongs to.

        Args:
            db: Database session
            token: Token from the cookie or the Authorization header

        Returns:
            Session user with ``id``, ``email``, ``role``, ``name`` and ``admin``

        Raises:
            UnauthorizedException: If the token is missing, invalid, revoked or
                does not belong to an active admin
        """
        if not token:
            raise UnauthorizedException("Unauthorized")

        payload = decode_access_token(token)
        if payload is None or self.is_revoked(token):
            raise UnauthorizedException("Unauthorized")

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError as e:
            raise UnauthorizedException("Unauthorized") from e

        user = await UserService.get_user_by_id(db, user_id)
        if not user or not user["is_active"] or user["role"] not in ADMIN_ROLES:
            raise UnauthorizedException("Unauthorized")

        admin = await self._admin_profile(db, user_id)
        return self._session_user(user, admin)
