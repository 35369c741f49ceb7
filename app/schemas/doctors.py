"""Doctor schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import (
    AppointmentWithPatient,
    ChamberWithPharmacy,
    Credentials,
    DoctorSummary,
    Pagination,
    UserSummary,
)


class DoctorCreate(BaseModel):
    """Schema for onboarding a doctor; a login is generated alongside."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    specialization: str = Field(..., min_length=1, max_length=200)
    qualification: str = Field(..., min_length=1)
    license_number: str = Field(..., min_length=1, max_length=100)
    aadhaar_number: str = Field(..., min_length=1, max_length=20)
    experience_years: int = Field(0, ge=0)
    consultation_fee: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    about: str | None = None
    address: str | None = None
    documents: dict[str, Any] | None = None


class DoctorUpdate(BaseModel):
    """Schema for updating a doctor's professional details."""

    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    specialization: str = Field(..., min_length=1, max_length=200)
    qualification: str = Field(..., min_length=1)
    experience_years: int = Field(..., ge=0)
    consultation_fee: Decimal = Field(..., ge=0, decimal_places=2)
    about: str | None = None
    address: str | None = None
    documents: dict[str, Any] | None = None


class DoctorVerify(BaseModel):
    verified: bool
    notes: str | None = Field(None, max_length=1000)


class DoctorResponse(DoctorSummary):
    """Doctor with account, chambers and latest appointments."""

    aadhaar_number: str
    about: str | None = None
    address: str | None = None
    documents: dict[str, Any] | None = None
    verified_at: datetime | None = None
    verification_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None
    chambers: list[ChamberWithPharmacy] = []
    recent_appointments: list[AppointmentWithPatient] = []
    chamber_summary: str | None = None


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]
    pagination: Pagination


class DoctorDetailResponse(BaseModel):
    doctor: DoctorResponse


class DoctorCreateResponse(BaseModel):
    message: str
    doctor: DoctorResponse
    credentials: Credentials


class DoctorMessageResponse(BaseModel):
    message: str
    doctor: DoctorResponse


class DoctorSearchResponse(BaseModel):
    doctors: list[DoctorSummary]
