"""Patient and medical record lookups."""

from typing import Any
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.medical_records import medical_records
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import USER_PUBLIC_COLUMNS, users
from app.services.loaders import fetch_by_ids


class PatientService:
    """Read-only access to patients and their medical records."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def list_patients(
        self,
        page: int = 1,
        limit: int = 50,
        search: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List patients ordered by name.

        Args:
            page: Page number
            limit: Items per page
            search: Matches name, phone or login email

        Returns:
            Page of patients and the filtered total
        """
        source = patients.outerjoin(users, patients.c.user_id == users.c.id)
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    patients.c.name.ilike(pattern),
                    patients.c.phone.ilike(pattern),
                    users.c.email.ilike(pattern),
                )
            )

        total = (
            await self.db.execute(
                select(func.count()).select_from(source).where(and_(*conditions))
            )
        ).scalar_one()

        result = await self.db.execute(
            select(patients)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(patients.c.name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]

        user_map = await fetch_by_ids(
            self.db,
            users,
            (row["user_id"] for row in rows if row["user_id"]),
            columns=USER_PUBLIC_COLUMNS,
        )
        for row in rows:
            row["user"] = user_map.get(row["user_id"])
        return rows, total

    async def list_medical_records(
        self,
        page: int = 1,
        limit: int = 10,
        patient_id: UUID | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List medical records, newest first, with their appointment context.

        Each record carries its appointment, which in turn carries the patient
        and the chamber with its doctor and pharmacy.
        """
        source = medical_records.join(
            appointments, medical_records.c.appointment_id == appointments.c.id
        )
        conditions = []
        if patient_id:
            conditions.append(appointments.c.patient_id == patient_id)

        total = (
            await self.db.execute(
                select(func.count()).select_from(source).where(and_(*conditions))
            )
        ).scalar_one()

        result = await self.db.execute(
            select(medical_records)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(medical_records.c.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        records = [dict(row) for row in result.mappings().all()]

        appointment_map = await fetch_by_ids(
            self.db, appointments, (record["appointment_id"] for record in records)
        )
        linked = list(appointment_map.values())
        patient_map = await fetch_by_ids(self.db, patients, (a["patient_id"] for a in linked))
        chamber_map = await fetch_by_ids(self.db, chambers, (a["chamber_id"] for a in linked))
        doctor_map = await fetch_by_ids(
            self.db, doctors, (c["doctor_id"] for c in chamber_map.values())
        )
        pharmacy_map = await fetch_by_ids(
            self.db, pharmacies, (c["pharmacy_id"] for c in chamber_map.values())
        )

        for record in records:
            appointment = appointment_map.get(record["appointment_id"])
            if appointment is not None:
                chamber = chamber_map.get(appointment["chamber_id"])
                if chamber is not None:
                    chamber = {
                        **chamber,
                        "doctor": doctor_map.get(chamber["doctor_id"]),
                        "pharmacy": pharmacy_map.get(chamber["pharmacy_id"]),
                    }
                appointment = {
                    **appointment,
                    "patient": patient_map.get(appointment["patient_id"]),
                    "chamber": chamber,
                }
            record["appointment"] = appointment
        return records, total
