"""Doctor endpoints."""

from typing import Annotated, Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import AdminOnly, DatabaseSession, require_permission
from app.schemas.common import MessageResponse, Pagination
from app.schemas.doctors import (
    DoctorCreate,
    DoctorCreateResponse,
    DoctorDetailResponse,
    DoctorListResponse,
    DoctorMessageResponse,
    DoctorSearchResponse,
    DoctorUpdate,
    DoctorVerify,
)
from app.services.doctor_service import DoctorService

router = APIRouter()

CanViewDoctors = Annotated[dict[str, Any], Depends(require_permission("view_doctors"))]
CanUpdateDoctors = Annotated[dict[str, Any], Depends(require_permission("update_doctors"))]

VERIFIED_FILTER = {"true": True, "false": False, "all": None}


@router.get(
    "",
    response_model=DoctorListResponse,
    status_code=status.HTTP_200_OK,
    summary="List doctors",
)
async def list_doctors(
    _: CanViewDoctors,
    db: DatabaseSession,
    search: str | None = Query(None, description="Name, specialization, license or email"),
    specialization: str | None = Query(None),
    verified: Literal["true", "false", "all"] = Query("all"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> DoctorListResponse:
    """
    List doctors with their login and chambers.

    Args:
        db: Database session
        search: Search term
        specialization: Specialization filter
        verified: ``true``, ``false`` or ``all``
        page: Page number
        limit: Items per page

    Returns:
        Doctors and pagination metadata
    """
    doctors, total = await DoctorService(db).list_doctors(
        page=page,
        limit=limit,
        search=search,
        specialization=specialization,
        verified=VERIFIED_FILTER[verified],
    )
    return DoctorListResponse(doctors=doctors, pagination=Pagination.build(page, limit, total))


@router.post(
    "",
    response_model=DoctorCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard doctor",
)
async def create_doctor(
    data: DoctorCreate,
    _: AdminOnly,
    db: DatabaseSession,
) -> DoctorCreateResponse:
    """Create a doctor and a login; the generated password is returned only here."""
    doctor, credentials = await DoctorService(db).create_doctor(data)
    return DoctorCreateResponse(
        message="Doctor created successfully",
        doctor=doctor,
        credentials=credentials,
    )


@router.get(
    "/search",
    response_model=DoctorSearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Search doctors",
)
async def search_doctors(
    _: CanViewDoctors,
    db: DatabaseSession,
    q: str | None = Query(None),
) -> DoctorSearchResponse:
    return DoctorSearchResponse(doctors=await DoctorService(db).search_doctors(q))


@router.get(
    "/verified",
    response_model=DoctorSearchResponse,
    status_code=status.HTTP_200_OK,
    summary="List verified doctors",
)
async def list_verified_doctors(
    _: CanViewDoctors,
    db: DatabaseSession,
) -> DoctorSearchResponse:
    return DoctorSearchResponse(doctors=await DoctorService(db).list_verified())


@router.get(
    "/{doctor_id}",
    response_model=DoctorDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get doctor",
)
async def get_doctor(
    doctor_id: UUID,
    _: CanViewDoctors,
    db: DatabaseSession,
) -> DoctorDetailResponse:
    return DoctorDetailResponse(doctor=await DoctorService(db).get_doctor(doctor_id))


@router.put(
    "/{doctor_id}",
    response_model=DoctorMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update doctor",
)
async def update_doctor(
    doctor_id: UUID,
    data: DoctorUpdate,
    _: CanUpdateDoctors,
    db: DatabaseSession,
) -> DoctorMessageResponse:
    doctor = await DoctorService(db).update_doctor(doctor_id, data)
    return DoctorMessageResponse(message="Doctor updated successfully", doctor=doctor)


@router.delete(
    "/{doctor_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete doctor",
)
async def delete_doctor(
    doctor_id: UUID,
    _: AdminOnly,
    db: DatabaseSession,
) -> MessageResponse:
    await DoctorService(db).delete_doctor(doctor_id)
    return MessageResponse(message="Doctor deleted successfully")


@router.post(
    "/{doctor_id}/verify",
    response_model=DoctorMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify doctor",
)
async def verify_doctor(
    doctor_id: UUID,
    data: DoctorVerify,
    _: AdminOnly,
    db: DatabaseSession,
) -> DoctorMessageResponse:
    """Approve or reject a doctor's documents."""
    doctor = await DoctorService(db).verify_doctor(doctor_id, data.verified, data.notes)
    message = "Doctor verified successfully" if data.verified else "Doctor verification revoked"
    return DoctorMessageResponse(message=message, doctor=doctor)
