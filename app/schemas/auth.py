"""Authentication schemas."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import AdminSummary


class LoginRequest(BaseModel):
    """Admin login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminUserResponse(BaseModel):
    """The authenticated admin as returned to the dashboard."""

    id: UUID
    email: str
    role: str
    name: str | None = None
    admin: AdminSummary | None = None


class LoginResponse(BaseModel):
    message: str
    user: AdminUserResponse


class MeResponse(BaseModel):
    user: AdminUserResponse
