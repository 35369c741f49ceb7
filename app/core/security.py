"""Security utilities for admin tokens, passwords and permissions."""

import secrets
import string
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

ADMIN_ROLES = frozenset({"ADMIN", "OFFICE_MANAGER"})

# ADMIN implicitly holds every permission.
OFFICE_MANAGER_PERMISSIONS = frozenset(
    {
        "view_users",
        "view_doctors",
        "view_pharmacies",
        "view_chambers",
        "view_appointments",
        "view_medical_records",
        "create_appointments",
        "update_appointments",
        "update_doctors",
        "update_chambers",
    }
)

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def generate_password(length: int | None = None) -> str:
    """Generate a random initial password for onboarded accounts."""
    length = length or settings.generated_password_length
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def has_permission(role: str, permission: str) -> bool:
    """
    Check whether an admin role grants a permission.

    Args:
        role: Admin role (ADMIN or OFFICE_MANAGER)
        permission: Permission name, e.g. ``update_chambers``

    Returns:
        True if the role holds the permission
    """
    if role == "ADMIN":
        return True
    if role == "OFFICE_MANAGER":
        return permission in OFFICE_MANAGER_PERMISSIONS
    return False


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed admin session token.

    Args:
        data: Payload data to encode (``sub``, ``email``, ``role``)
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(hours=settings.admin_token_expire_hours)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(UTC),
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate an admin session token.

    Args:
        token: JWT token to decode

    Returns:
        Decoded payload or None if invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    return payload


def token_ttl_seconds(payload: dict[str, Any]) -> int:
    """Seconds until the token expires, used to size revocation entries."""
    exp = payload.get("exp")
    if not isinstance(exp, int | float):
        return settings.admin_token_expire_hours * 3600
    return max(int(exp - datetime.now(UTC).timestamp()), 1)
