"""Deletion of doctors, pharmacies and patients together with their dependents.

These helpers do not commit; the calling service owns the transaction.
"""

from typing import Any

import structlog
from sqlalchemy import ColumnElement, and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.models.admins import admins
from app.models.appointments import appointments
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.medical_records import medical_records
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import users
from app.services.slot_policy import ACTIVE_STATUSES

logger = structlog.get_logger(__name__)


async def count_active_appointments(db: AsyncSession, condition: ColumnElement[bool]) -> int:
    query = (
        select(func.count())
        .select_from(appointments)
        .where(and_(condition, appointments.c.status.in_(sorted(ACTIVE_STATUSES))))
    )
    return (await db.execute(query)).scalar_one()


async def remove_appointments(db: AsyncSession, condition: ColumnElement[bool]) -> None:
    """Delete appointments matching ``condition`` and their medical records."""
    matching = select(appointments.c.id).where(condition)
    await db.execute(delete(medical_records).where(medical_records.c.appointment_id.in_(matching)))
    await db.execute(delete(appointments).where(condition))


async def remove_doctor(db: AsyncSession, doctor: dict[str, Any]) -> None:
    """
    Delete a doctor, their chambers, appointment history and login.

    Raises:
        BadRequestException: If the doctor has pending or confirmed appointments
    """
    if await count_active_appointments(db, appointments.c.doctor_id == doctor["id"]):
        raise BadRequestException("Cannot delete doctor with active appointments")

    await remove_appointments(db, appointments.c.doctor_id == doctor["id"])
    await db.execute(delete(chambers).where(chambers.c.doctor_id == doctor["id"]))
    await db.execute(delete(doctors).where(doctors.c.id == doctor["id"]))
    await db.execute(delete(users).where(users.c.id == doctor["user_id"]))
    logger.info("doctor_removed", doctor_id=str(doctor["id"]))


async def remove_pharmacy(db: AsyncSession, pharmacy: dict[str, Any]) -> None:
    """
    Delete a pharmacy, its inactive chambers, appointment history and login.

    Raises:
        BadRequestException: If the pharmacy still has active chambers or
            pending or confirmed appointments
    """
    active_chambers = (
        await db.execute(
            select(func.count())
            .select_from(chambers)
            .where(
                and_(chambers.c.pharmacy_id == pharmacy["id"], chambers.c.is_active.is_(True))
            )
        )
    ).scalar_one()
    if active_chambers:
        raise BadRequestException("Cannot delete pharmacy with active chambers")

    if await count_active_appointments(db, appointments.c.pharmacy_id == pharmacy["id"]):
        raise BadRequestException("Cannot delete pharmacy with active appointments")

    await remove_appointments(db, appointments.c.pharmacy_id == pharmacy["id"])
    await db.execute(delete(chambers).where(chambers.c.pharmacy_id == pharmacy["id"]))
    await db.execute(delete(pharmacies).where(pharmacies.c.id == pharmacy["id"]))
    await db.execute(delete(users).where(users.c.id == pharmacy["user_id"]))
    logger.info("pharmacy_removed", pharmacy_id=str(pharmacy["id"]))


async def remove_patient(db: AsyncSession, patient: dict[str, Any]) -> None:
    """
    Delete a patient profile with its appointment history.

    Raises:
        BadRequestException: If the patient has pending or confirmed appointments
    """
    if await count_active_appointments(db, appointments.c.patient_id == patient["id"]):
        raise BadRequestException("Cannot delete patient with active appointments")

    await remove_appointments(db, appointments.c.patient_id == patient["id"])
    await db.execute(delete(patients).where(patients.c.id == patient["id"]))
    logger.info("patient_removed", patient_id=str(patient["id"]))


async def remove_admin_profile(db: AsyncSession, user_id: Any) -> None:
    await db.execute(delete(admins).where(admins.c.user_id == user_id))
