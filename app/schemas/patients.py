"""Patient and medical record schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from app.schemas.common import (
    AppointmentSummary,
    ChamberWithParties,
    Pagination,
    PatientSummary,
    UserSummary,
)


class PatientResponse(PatientSummary):
    address: str | None = None
    emergency_contact: str | None = None
    created_at: datetime
    user: UserSummary | None = None


class PatientListResponse(BaseModel):
    patients: list[PatientResponse]
    pagination: Pagination


class RecordAppointment(AppointmentSummary):
    patient: PatientSummary | None = None
    chamber: ChamberWithParties | None = None


class MedicalRecordResponse(BaseModel):
    id: UUID
    appointment_id: UUID
    diagnosis: str | None = None
    prescription: str | None = None
    notes: str | None = None
    attachments: list[Any] | dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime
    appointment: RecordAppointment | None = None


class MedicalRecordListResponse(BaseModel):
    records: list[MedicalRecordResponse]
    pagination: Pagination
