"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import (
    AppointmentSummary,
    ChamberSummary,
    DoctorSummary,
    MedicalRecordSummary,
    Pagination,
    PatientSummary,
    PharmacySummary,
)


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """Payment method enumeration."""

    ONLINE = "ONLINE"
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"


class DateFilter(str, Enum):
    """Relative appointment date windows for listings."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class AppointmentCreate(BaseModel):
    """Schema for booking a slot in a chamber."""

    patient_id: UUID
    chamber_id: UUID
    appointment_date: date
    slot_number: int
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    notes: str | None = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment; omitted fields keep their value."""

    appointment_date: date | None = None
    slot_number: int | None = None
    status: AppointmentStatus | None = None
    payment_status: PaymentStatus | None = None
    notes: str | None = Field(None, max_length=1000)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus
    payment_method: PaymentMethod | None = None


class AppointmentResponse(AppointmentSummary):
    """Appointment with the rows it references."""

    payment_method: str
    notes: str | None = None
    updated_at: datetime | None = None
    patient: PatientSummary | None = None
    doctor: DoctorSummary | None = None
    pharmacy: PharmacySummary | None = None
    chamber: ChamberSummary | None = None
    medical_record: MedicalRecordSummary | None = None


class AppointmentStats(BaseModel):
    total: int = 0
    today: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0
    total_revenue: float = 0.0
    pending_payments: float = 0.0
    completion_rate: float = 0.0


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentResponse]
    stats: AppointmentStats
    pagination: Pagination


class AppointmentDetailResponse(BaseModel):
    appointment: AppointmentResponse


class AppointmentMessageResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
