"""User schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Self

from pydantic import BaseModel, EmailStr, Field, model_validator

from app.schemas.common import (
    AdminSummary,
    DoctorSummary,
    Pagination,
    PatientSummary,
    PharmacySummary,
    UserSummary,
)


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "ADMIN"
    OFFICE_MANAGER = "OFFICE_MANAGER"
    DOCTOR = "DOCTOR"
    PHARMACY = "PHARMACY"
    PATIENT = "PATIENT"


class AdminProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)
    department: str | None = None


class PatientProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)
    address: str | None = None
    emergency_contact: str | None = Field(None, max_length=20)


class DoctorProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    specialization: str = Field(..., min_length=1, max_length=200)
    qualification: str = Field(..., min_length=1)
    experience_years: int = Field(0, ge=0)
    license_number: str = Field(..., min_length=1, max_length=100)
    aadhaar_number: str = Field(..., min_length=1, max_length=20)
    consultation_fee: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    about: str | None = None
    address: str | None = None


class PharmacyProfile(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    business_name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    gstin: str | None = Field(None, max_length=15)
    trade_license: str | None = Field(None, max_length=100)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


PROFILE_FIELD_BY_ROLE = {
    UserRole.ADMIN: "admin",
    UserRole.OFFICE_MANAGER: "admin",
    UserRole.PATIENT: "patient",
    UserRole.DOCTOR: "doctor",
    UserRole.PHARMACY: "pharmacy",
}


class UserCreate(BaseModel):
    """Schema for creating a user together with the profile for its role."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole
    admin: AdminProfile | None = None
    patient: PatientProfile | None = None
    doctor: DoctorProfile | None = None
    pharmacy: PharmacyProfile | None = None

    @model_validator(mode="after")
    def require_role_profile(self) -> Self:
        """Each role carries exactly the profile that matches it."""
        field = PROFILE_FIELD_BY_ROLE[self.role]
        if getattr(self, field) is None:
            raise ValueError(f"'{field}' profile is required for role {self.role.value}")
        return self


class UserUpdate(BaseModel):
    """Schema for updating a user; a supplied profile is created or replaced."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=72)
    role: UserRole | None = None
    is_active: bool | None = None
    admin: AdminProfile | None = None
    patient: PatientProfile | None = None
    doctor: DoctorProfile | None = None
    pharmacy: PharmacyProfile | None = None


class UserResponse(UserSummary):
    """User with whichever profiles it owns."""

    updated_at: datetime | None = None
    admin: AdminSummary | None = None
    patient: PatientSummary | None = None
    doctor: DoctorSummary | None = None
    pharmacy: PharmacySummary | None = None


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


class UserDetailResponse(BaseModel):
    user: UserResponse
