"""Patient and medical record endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.dependencies import DatabaseSession, require_permission
from app.schemas.common import Pagination
from app.schemas.patients import MedicalRecordListResponse, PatientListResponse
from app.services.patient_service import PatientService

router = APIRouter()


@router.get(
    "/patients",
    response_model=PatientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List patients",
)
async def list_patients(
    _: Annotated[dict[str, Any], Depends(require_permission("view_users"))],
    db: DatabaseSession,
    search: str | None = Query(None, description="Name, phone or email"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> PatientListResponse:
    """List patients ordered by name."""
    patients, total = await PatientService(db).list_patients(page, limit, search)
    return PatientListResponse(patients=patients, pagination=Pagination.build(page, limit, total))


@router.get(
    "/medical-records",
    response_model=MedicalRecordListResponse,
    status_code=status.HTTP_200_OK,
    summary="List medical records",
)
async def list_medical_records(
    _: Annotated[dict[str, Any], Depends(require_permission("view_medical_records"))],
    db: DatabaseSession,
    patient_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> MedicalRecordListResponse:
    """
    List medical records with the appointment they belong to.

    Args:
        db: Database session
        patient_id: Only records of this patient's appointments
        page: Page number
        limit: Items per page

    Returns:
        Records and pagination metadata
    """
    records, total = await PatientService(db).list_medical_records(page, limit, patient_id)
    return MedicalRecordListResponse(records=records, pagination=Pagination.build(page, limit, total))
