"""User management endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import AdminOnly, DatabaseSession, require_permission
from app.schemas.common import MessageResponse, Pagination
from app.schemas.users import (
    UserCreate,
    UserDetailResponse,
    UserListResponse,
    UserRole,
    UserUpdate,
)
from app.services.user_service import UserService

router = APIRouter()

CanViewUsers = Annotated[dict[str, Any], Depends(require_permission("view_users"))]


@router.get(
    "",
    response_model=UserListResponse,
    status_code=status.HTTP_200_OK,
    summary="List users",
)
async def list_users(
    _: CanViewUsers,
    db: DatabaseSession,
    role: UserRole | None = Query(None, description="Filter by role"),
    search: str | None = Query(None, description="Email or profile name"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> UserListResponse:
    """
    List users with their role profiles.

    Args:
        db: Database session
        role: Filter by role
        search: Search term over email and patient, doctor or pharmacy name
        page: Page number
        limit: Items per page

    Returns:
        Users and pagination metadata
    """
    users, total = await UserService.list_users(db, page, limit, role, search)
    return UserListResponse(users=users, pagination=Pagination.build(page, limit, total))


@router.post(
    "",
    response_model=UserDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    data: UserCreate,
    _: AdminOnly,
    db: DatabaseSession,
) -> UserDetailResponse:
    """Create a user with the profile required by its role."""
    user = await UserService.create_user(db, data)
    return UserDetailResponse(user=user)


@router.get(
    "/{user_id}",
    response_model=UserDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user",
)
async def get_user(
    user_id: UUID,
    _: CanViewUsers,
    db: DatabaseSession,
) -> UserDetailResponse:
    return UserDetailResponse(user=await UserService.get_user(db, user_id))


@router.put(
    "/{user_id}",
    response_model=UserDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update user",
)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    _: AdminOnly,
    db: DatabaseSession,
) -> UserDetailResponse:
    user = await UserService.update_user(db, user_id, data)
    return UserDetailResponse(user=user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete user",
)
async def delete_user(
    user_id: UUID,
    _: AdminOnly,
    db: DatabaseSession,
) -> MessageResponse:
    """
    Delete a user and its profiles.

    Fails with 400 while a doctor, pharmacy or patient profile still has
    pending or confirmed appointments.
    """
    await UserService.delete_user(db, user_id)
    return MessageResponse(message="User deleted successfully")
