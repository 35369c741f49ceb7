"""Shared response fragments embedded in several resources."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_serializer


class Pagination(BaseModel):
    """Page metadata returned with every list."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class MessageResponse(BaseModel):
    message: str


class Credentials(BaseModel):
    """Initial login for an onboarded doctor or pharmacy, shown once."""

    email: str
    password: str


class UserSummary(BaseModel):
    id: UUID
    email: str
    role: str
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AdminSummary(BaseModel):
    id: UUID
    name: str
    phone: str | None = None
    department: str | None = None
    permissions: list[str] | None = None
    last_login_at: datetime | None = None


class PatientSummary(BaseModel):
    id: UUID
    user_id: UUID | None = None
    name: str
    phone: str | None = None
    gender: str | None = None
    date_of_birth: date | None = None


class DoctorSummary(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    phone: str
    specialization: str
    qualification: str
    experience_years: int
    license_number: str
    consultation_fee: Decimal
    is_verified: bool

    @field_serializer("consultation_fee", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class PharmacySummary(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    business_name: str
    phone: str
    address: str
    is_verified: bool


class ChamberSummary(BaseModel):
    id: UUID
    doctor_id: UUID
    pharmacy_id: UUID
    schedule_type: str
    week_days: list[str]
    week_numbers: list[str] = []
    start_time: time
    end_time: time
    slot_duration: int
    max_slots: int
    fees: Decimal
    is_active: bool
    is_verified: bool

    @field_serializer("start_time", "end_time", when_used="json")
    def serialize_time(self, value: time) -> str:
        """Render session bounds as HH:MM."""
        return value.strftime("%H:%M")

    @field_serializer("fees", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class ChamberWithPharmacy(ChamberSummary):
    pharmacy: PharmacySummary | None = None


class ChamberWithDoctor(ChamberSummary):
    doctor: DoctorSummary | None = None


class ChamberWithParties(ChamberSummary):
    doctor: DoctorSummary | None = None
    pharmacy: PharmacySummary | None = None


class AppointmentSummary(BaseModel):
    id: UUID
    patient_id: UUID
    chamber_id: UUID
    doctor_id: UUID
    pharmacy_id: UUID
    appointment_date: date
    slot_number: int
    status: str
    payment_status: str
    amount: Decimal
    created_at: datetime | None = None

    @field_serializer("amount", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class AppointmentWithPatient(AppointmentSummary):
    patient: PatientSummary | None = None


class MedicalRecordSummary(BaseModel):
    id: UUID
    diagnosis: str | None = None
    prescription: str | None = None
    notes: str | None = None
    attachments: list[Any] | dict[str, Any] | None = None
    created_at: datetime | None = None
