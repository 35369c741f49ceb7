"""Pharmacy schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.common import (
    AppointmentWithPatient,
    ChamberWithDoctor,
    Credentials,
    Pagination,
    PharmacySummary,
    UserSummary,
)


class VerificationFilter(str, Enum):
    ALL = "all"
    VERIFIED = "verified"
    PENDING = "pending"

    def as_flag(self) -> bool | None:
        """The ``is_verified`` value to filter on, or None for no filter."""
        if self is VerificationFilter.ALL:
            return None
        return self is VerificationFilter.VERIFIED


class PharmacyCreate(BaseModel):
    """Schema for onboarding a pharmacy; a login is generated alongside."""

    name: str = Field(..., min_length=1, max_length=200)
    business_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    gstin: str | None = Field(None, max_length=15)
    trade_license: str | None = Field(None, max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    documents: dict[str, Any] | None = None


class PharmacyUpdate(BaseModel):
    """Schema for updating a pharmacy; omitted fields keep their value."""

    name: str | None = Field(None, min_length=1, max_length=200)
    business_name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, min_length=1, max_length=20)
    address: str | None = Field(None, min_length=1)
    gstin: str | None = Field(None, max_length=15)
    trade_license: str | None = Field(None, max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    documents: dict[str, Any] | None = None


class PharmacyVerify(BaseModel):
    verified: bool
    notes: str | None = Field(None, max_length=1000)


class PharmacyResponse(PharmacySummary):
    """Pharmacy with account, chambers and latest appointments."""

    gstin: str | None = None
    trade_license: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    documents: dict[str, Any] | None = None
    verified_at: datetime | None = None
    verification_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    user: UserSummary | None = None
    chambers: list[ChamberWithDoctor] = []
    recent_appointments: list[AppointmentWithPatient] = []
    chamber_count: int = 0
    appointment_count: int = 0


class PharmacyListResponse(BaseModel):
    pharmacies: list[PharmacyResponse]
    pagination: Pagination


class PharmacyDetailResponse(BaseModel):
    pharmacy: PharmacyResponse


class PharmacyCreateResponse(BaseModel):
    message: str
    pharmacy: PharmacyResponse
    credentials: Credentials


class PharmacyMessageResponse(BaseModel):
    message: str
    pharmacy: PharmacyResponse


class PharmacySearchResponse(BaseModel):
    pharmacies: list[PharmacySummary]
