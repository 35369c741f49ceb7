"""Appointment endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import DatabaseSession, require_permission
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentDetailResponse,
    AppointmentListResponse,
    AppointmentMessageResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    DateFilter,
    PaymentStatus,
    PaymentStatusUpdate,
)
from app.schemas.common import Pagination
from app.services.appointment_service import AppointmentService

router = APIRouter()

CanViewAppointments = Annotated[dict[str, Any], Depends(require_permission("view_appointments"))]
CanCreateAppointments = Annotated[
    dict[str, Any], Depends(require_permission("create_appointments"))
]
CanUpdateAppointments = Annotated[
    dict[str, Any], Depends(require_permission("update_appointments"))
]


@router.get(
    "",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List appointments",
)
async def list_appointments(
    _: CanViewAppointments,
    db: DatabaseSession,
    search: str | None = Query(None, description="Patient, doctor or pharmacy name"),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    payment_status: PaymentStatus | None = Query(None),
    date_filter: DateFilter = Query(DateFilter.ALL),
    doctor_id: UUID | None = Query(None),
    pharmacy_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> AppointmentListResponse:
    """
    List appointments with filtering.

    Stats are computed over all appointments regardless of the filters.

    Args:
        db: Database session
        search: Search term
        status_filter: Filter by status
        payment_status: Filter by payment status
        date_filter: ``today``, ``week``, ``month`` or ``all``
        doctor_id: Filter by doctor
        pharmacy_id: Filter by pharmacy
        page: Page number
        limit: Items per page

    Returns:
        Appointments, stats and pagination metadata
    """
    service = AppointmentService(db)
    appointments, total = await service.list_appointments(
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        payment_status=payment_status,
        date_filter=date_filter,
        doctor_id=doctor_id,
        pharmacy_id=pharmacy_id,
    )
    return AppointmentListResponse(
        appointments=appointments,
        stats=await service.get_stats(),
        pagination=Pagination.build(page, limit, total),
    )


@router.post(
    "",
    response_model=AppointmentMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    _: CanCreateAppointments,
    db: DatabaseSession,
) -> AppointmentMessageResponse:
    """
    Book a slot at a chamber.

    The chamber must be active and verified, the slot within range and free.
    Doctor, pharmacy and amount are copied from the chamber.
    """
    appointment = await AppointmentService(db).create_appointment(data)
    return AppointmentMessageResponse(
        message="Appointment created successfully",
        appointment=appointment,
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get appointment",
)
async def get_appointment(
    appointment_id: UUID,
    _: CanViewAppointments,
    db: DatabaseSession,
) -> AppointmentDetailResponse:
    appointment = await AppointmentService(db).get_appointment(appointment_id)
    return AppointmentDetailResponse(appointment=appointment)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    _: CanUpdateAppointments,
    db: DatabaseSession,
) -> AppointmentMessageResponse:
    appointment = await AppointmentService(db).update_appointment(appointment_id, data)
    return AppointmentMessageResponse(
        message="Appointment updated successfully",
        appointment=appointment,
    )


@router.delete(
    "/{appointment_id}",
    response_model=AppointmentMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    _: CanUpdateAppointments,
    db: DatabaseSession,
) -> AppointmentMessageResponse:
    """Cancel rather than delete; completed appointments cannot be cancelled."""
    appointment = await AppointmentService(db).cancel_appointment(appointment_id)
    return AppointmentMessageResponse(
        message="Appointment cancelled successfully",
        appointment=appointment,
    )


@router.put(
    "/{appointment_id}/status",
    response_model=AppointmentMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Change appointment status",
)
async def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    _: CanUpdateAppointments,
    db: DatabaseSession,
) -> AppointmentMessageResponse:
    appointment = await AppointmentService(db).update_status(appointment_id, data.status)
    return AppointmentMessageResponse(
        message="Appointment status updated successfully",
        appointment=appointment,
    )


@router.put(
    "/{appointment_id}/payment",
    response_model=AppointmentMessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Change payment status",
)
async def update_payment_status(
    appointment_id: UUID,
    data: PaymentStatusUpdate,
    _: CanUpdateAppointments,
    db: DatabaseSession,
) -> AppointmentMessageResponse:
    appointment = await AppointmentService(db).update_payment(appointment_id, data)
    return AppointmentMessageResponse(
        message="Payment status updated successfully",
        appointment=appointment,
    )
