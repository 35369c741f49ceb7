"""Chamber endpoints."""

from datetime import date
from typing import Annotated, Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.exceptions import BadRequestException
from app.dependencies import AdminOnly, DatabaseSession, require_permission
from app.schemas.chambers import (
    ChamberCreate,
    ChamberDetailResponse,
    ChamberListResponse,
    ChamberMessageResponse,
    ChamberUpdate,
    ChamberVerify,
    SlotAvailabilityResponse,
    UpcomingDatesResponse,
)
from app.schemas.common import MessageResponse, Pagination
from app.services.chamber_service import ChamberService

router = APIRouter()

CanViewChambers = Annotated[dict[str, Any], Depends(require_permission("view_chambers"))]
CanUpdateChambers = Annotated[dict[str, Any], Depends(require_permission("update_chambers"))]

STATUS_FILTER = {"active": True, "inactive": False, "all": None}
VERIFIED_FILTER = {"true": True, "false": False, "all": None}


@router.get(
    "",
    response_model=ChamberListResponse,
    status_code=status.HTTP_200_OK,
    summary="List chambers",
)
async def list_chambers(
    _: CanViewChambers,
    db: DatabaseSession,
    search: str | None = Query(None, description="Doctor name, pharmacy name or specialization"),
    doctor_id: UUID | None = Query(None),
    pharmacy_id: UUID | None = Query(None),
    verified: Literal["true", "false", "all"] = Query("all"),
    status_filter: Literal["active", "inactive", "all"] = Query("all", alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> ChamberListResponse:
    """
    List chambers with their doctor, pharmacy, latest appointments and stats.

    Args:
        db: Database session
        search: Search term
        doctor_id: Filter by doctor
        pharmacy_id: Filter by pharmacy
        verified: ``true``, ``false`` or ``all``
        status_filter: ``active``, ``inactive`` or ``all``
        page: Page number
        limit: Items per page

    Returns:
        Chambers and pagination metadata
    """
    chambers, total = await ChamberService(db).list_chambers(
        page=page,
        limit=limit,
        search=search,
        doctor_id=doctor_id,
        pharmacy_id=pharmacy_id,
        verified=VERIFIED_FILTER[verified],
        active=STATUS_FILTER[status_filter],
    )
    return ChamberListResponse(chambers=chambers, pagination=Pagination.build(page, limit, total))


@router.post(
    "",
    response_model=ChamberMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create chamber",
)
async def create_chamber(
    data: ChamberCreate,
    _: AdminOnly,
    db: DatabaseSession,
) -> ChamberMessageResponse:
    """
    Pair a doctor with a pharmacy on a recurring schedule.

    The slot count is derived from the session length; overlapping schedules
    of the same doctor are rejected.
    """
    chamber = await ChamberService(db).create_chamber(data)
    return ChamberMessageResponse(message="Chamber created successfully", chamber=chamber)


@router.get(
    "/active",
    response_model=ChamberListResponse,
    status_code=status.HTTP_200_OK,
    summary="List bookable chambers",
)
async def list_active_chambers(
    _: CanViewChambers,
    db: DatabaseSession,
) -> ChamberListResponse:
    chambers = await ChamberService(db).list_active_chambers()
    total = len(chambers)
    return ChamberListResponse(
        chambers=chambers,
        pagination=Pagination.build(1, max(total, 1), total),
    )


@router.get(
    "/{chamber_id}",
    response_model=ChamberDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get chamber",
)
async def get_chamber(
    chamber_id: UUID,
    _: CanViewChambers,
    db: DatabaseSession,
) -> ChamberDetailResponse:
    return ChamberDetailResponse(chamber=await ChamberService(db).get_chamber(chamber_id))


@router.put(
    "/{chamber_id}",
    response_model=ChamberMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update chamber",
)
async def update_chamber(
    chamber_id: UUID,
    data: ChamberUpdate,
    _: CanUpdateChambers,
    db: DatabaseSession,
) -> ChamberMessageResponse:
    chamber = await ChamberService(db).update_chamber(chamber_id, data)
    return ChamberMessageResponse(message="Chamber updated successfully", chamber=chamber)


@router.delete(
    "/{chamber_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete chamber",
)
async def delete_chamber(
    chamber_id: UUID,
    _: AdminOnly,
    db: DatabaseSession,
) -> MessageResponse:
    await ChamberService(db).delete_chamber(chamber_id)
    return MessageResponse(message="Chamber deleted successfully")


@router.get(
    "/{chamber_id}/slots",
    response_model=SlotAvailabilityResponse,
    status_code=status.HTTP_200_OK,
    summary="Slot availability",
)
async def get_chamber_slots(
    chamber_id: UUID,
    _: CanViewChambers,
    db: DatabaseSession,
    slot_date: date | None = Query(None, alias="date"),
    exclude_appointment: UUID | None = Query(None),
) -> SlotAvailabilityResponse:
    """
    Free and booked slots of a chamber on one date.

    Args:
        chamber_id: Chamber ID
        db: Database session
        slot_date: Calendar date (``date`` query parameter, required)
        exclude_appointment: Appointment whose slot is reported as free

    Returns:
        Slot availability with the chamber timing

    Raises:
        BadRequestException: If the date is missing
    """
    if slot_date is None:
        raise BadRequestException("Date parameter is required")

    slots = await ChamberService(db).get_slots(chamber_id, slot_date, exclude_appointment)
    return SlotAvailabilityResponse(**slots)


@router.post(
    "/{chamber_id}/verify",
    response_model=ChamberMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify chamber",
)
async def verify_chamber(
    chamber_id: UUID,
    data: ChamberVerify,
    _: AdminOnly,
    db: DatabaseSession,
) -> ChamberMessageResponse:
    """Approve or reject a chamber; approval also activates it."""
    chamber = await ChamberService(db).verify_chamber(chamber_id, data.verified, data.notes)
    message = "Chamber verified successfully" if data.verified else "Chamber verification revoked"
    return ChamberMessageResponse(message=message, chamber=chamber)


@router.get(
    "/{chamber_id}/upcoming-dates",
    response_model=UpcomingDatesResponse,
    status_code=status.HTTP_200_OK,
    summary="Next session dates",
)
async def get_upcoming_dates(
    chamber_id: UUID,
    _: CanViewChambers,
    db: DatabaseSession,
    count: int = Query(5, ge=1, le=31),
) -> UpcomingDatesResponse:
    dates = await ChamberService(db).upcoming_dates(chamber_id, count)
    return UpcomingDatesResponse(chamber_id=chamber_id, dates=dates)
