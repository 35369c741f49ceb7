"""Pharmacy endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import AdminOnly, DatabaseSession, require_permission
from app.schemas.common import MessageResponse, Pagination
from app.schemas.pharmacies import (
    PharmacyCreate,
    PharmacyCreateResponse,
    PharmacyDetailResponse,
    PharmacyListResponse,
    PharmacyMessageResponse,
    PharmacySearchResponse,
    PharmacyUpdate,
    PharmacyVerify,
    VerificationFilter,
)
from app.services.pharmacy_service import PharmacyService

router = APIRouter()

CanViewPharmacies = Annotated[dict[str, Any], Depends(require_permission("view_pharmacies"))]


@router.get(
    "",
    response_model=PharmacyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List pharmacies",
)
async def list_pharmacies(
    _: CanViewPharmacies,
    db: DatabaseSession,
    search: str | None = Query(None, description="Name, business name, address, GSTIN or email"),
    verified: VerificationFilter = Query(VerificationFilter.ALL),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PharmacyListResponse:
    """
    List pharmacies with their login, chambers and activity counts.

    Args:
        db: Database session
        search: Search term
        verified: ``verified``, ``pending`` or ``all``
        page: Page number
        limit: Items per page

    Returns:
        Pharmacies and pagination metadata
    """
    pharmacies, total = await PharmacyService(db).list_pharmacies(
        page=page,
        limit=limit,
        search=search,
        verified=verified.as_flag(),
    )
    return PharmacyListResponse(
        pharmacies=pharmacies,
        pagination=Pagination.build(page, limit, total),
    )


@router.post(
    "",
    response_model=PharmacyCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard pharmacy",
)
async def create_pharmacy(
    data: PharmacyCreate,
    _: AdminOnly,
    db: DatabaseSession,
) -> PharmacyCreateResponse:
    """Create a pharmacy and a login derived from its name."""
    pharmacy, credentials = await PharmacyService(db).create_pharmacy(data)
    return PharmacyCreateResponse(
        message="Pharmacy created successfully",
        pharmacy=pharmacy,
        credentials=credentials,
    )


@router.get(
    "/search",
    response_model=PharmacySearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Search pharmacies",
)
async def search_pharmacies(
    _: CanViewPharmacies,
    db: DatabaseSession,
    q: str | None = Query(None),
) -> PharmacySearchResponse:
    return PharmacySearchResponse(pharmacies=await PharmacyService(db).search_pharmacies(q))


@router.get(
    "/verified",
    response_model=PharmacySearchResponse,
    status_code=status.HTTP_200_OK,
    summary="List verified pharmacies",
)
async def list_verified_pharmacies(
    _: CanViewPharmacies,
    db: DatabaseSession,
) -> PharmacySearchResponse:
    return PharmacySearchResponse(pharmacies=await PharmacyService(db).list_verified())


@router.get(
    "/{pharmacy_id}",
    response_model=PharmacyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get pharmacy",
)
async def get_pharmacy(
    pharmacy_id: UUID,
    _: CanViewPharmacies,
    db: DatabaseSession,
) -> PharmacyDetailResponse:
    return PharmacyDetailResponse(pharmacy=await PharmacyService(db).get_pharmacy(pharmacy_id))


@router.put(
    "/{pharmacy_id}",
    response_model=PharmacyMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update pharmacy",
)
async def update_pharmacy(
    pharmacy_id: UUID,
    data: PharmacyUpdate,
    _: AdminOnly,
    db: DatabaseSession,
) -> PharmacyMessageResponse:
    pharmacy = await PharmacyService(db).update_pharmacy(pharmacy_id, data)
    return PharmacyMessageResponse(message="Pharmacy updated successfully", pharmacy=pharmacy)


@router.delete(
    "/{pharmacy_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete pharmacy",
)
async def delete_pharmacy(
    pharmacy_id: UUID,
    _: AdminOnly,
    db: DatabaseSession,
) -> MessageResponse:
    """Delete a pharmacy; fails with 400 while it has active chambers or appointments."""
    await PharmacyService(db).delete_pharmacy(pharmacy_id)
    return MessageResponse(message="Pharmacy deleted successfully")


@router.post(
    "/{pharmacy_id}/verify",
    response_model=PharmacyMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify pharmacy",
)
async def verify_pharmacy(
    pharmacy_id: UUID,
    data: PharmacyVerify,
    _: AdminOnly,
    db: DatabaseSession,
) -> PharmacyMessageResponse:
    pharmacy = await PharmacyService(db).verify_pharmacy(pharmacy_id, data.verified, data.notes)
    message = "Pharmacy verified successfully" if data.verified else "Pharmacy verification revoked"
    return PharmacyMessageResponse(message=message, pharmacy=pharmacy)
