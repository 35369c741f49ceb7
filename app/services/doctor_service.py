"""Doctor service for onboarding, verification and lookup."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException
from app.core.security import generate_password
from app.models.appointments import appointments
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import USER_PUBLIC_COLUMNS, users
from app.schemas.doctors import DoctorCreate, DoctorUpdate
from app.schemas.users import UserRole
from app.services import removal, schedule
from app.services.loaders import fetch_by_ids, fetch_grouped
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


class DoctorService:
    """Service for doctor operations."""

    RECENT_APPOINTMENTS = 10
    SEARCH_MIN_LENGTH = 2

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_row(self, doctor_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(doctors).where(doctors.c.id == doctor_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Doctor not found")
        return dict(row)

    async def _ensure_unique(self, license_number: str, aadhaar_number: str) -> None:
        result = await self.db.execute(
            select(doctors.c.license_number, doctors.c.aadhaar_number).where(
                or_(
                    doctors.c.license_number == license_number,
                    doctors.c.aadhaar_number == aadhaar_number,
                )
            )
        )
        for existing in result.mappings().all():
            if existing["license_number"] == license_number:
                raise BadRequestException("License number already exists")
            raise BadRequestException("Aadhaar number already exists")

    async def enrich(self, rows: list[dict[str, Any]], detail: bool = False) -> list[dict]:
        """Attach user, chambers (with pharmacy) and, for detail views, recent appointments."""
        ids = [row["id"] for row in rows]
        user_map = await fetch_by_ids(
            self.db, users, (row["user_id"] for row in rows), columns=USER_PUBLIC_COLUMNS
        )
        chamber_map = await fetch_grouped(
            self.db, chambers, "doctor_id", ids, order_by=chambers.c.created_at
        )
        pharmacy_map = await fetch_by_ids(
            self.db,
            pharmacies,
            (chamber["pharmacy_id"] for group in chamber_map.values() for chamber in group),
        )

        for row in rows:
            row["user"] = user_map.get(row["user_id"])
            row["chambers"] = [
                {**chamber, "pharmacy": pharmacy_map.get(chamber["pharmacy_id"])}
                for chamber in chamber_map[row["id"]]
            ]
            row["chamber_summary"] = schedule.doctor_chamber_summary(
                chamber for chamber in row["chambers"] if chamber["is_active"]
            )

        if detail:
            for row in rows:
                result = await self.db.execute(
                    select(appointments)
                    .where(appointments.c.doctor_id == row["id"])
                    .order_by(appointments.c.created_at.desc())
                    .limit(self.RECENT_APPOINTMENTS)
                )
                recent = [dict(item) for item in result.mappings().all()]
                patient_map = await fetch_by_ids(
                    self.db, patients, (item["patient_id"] for item in recent)
                )
                for item in recent:
                    item["patient"] = patient_map.get(item["patient_id"])
                row["recent_appointments"] = recent
        return rows

    async def list_doctors(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        specialization: str | None = None,
        verified: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List doctors with filtering and pagination.

        Args:
            page: Page number
            limit: Items per page
            search: Matches name, specialization, license number or email
            specialization: Filter by specialization (case-insensitive substring)
            verified: Filter by verification flag

        Returns:
            Page of doctors and the filtered total
        """
        source = doctors.join(users, doctors.c.user_id == users.c.id)
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    doctors.c.name.ilike(pattern),
                    doctors.c.specialization.ilike(pattern),
                    doctors.c.license_number.ilike(pattern),
                    users.c.email.ilike(pattern),
                )
            )
        if specialization:
            conditions.append(doctors.c.specialization.ilike(f"%{specialization}%"))
        if verified is not None:
            conditions.append(doctors.c.is_verified.is_(verified))

        total = (
            await self.db.execute(
                select(func.count()).select_from(source).where(and_(*conditions))
            )
        ).scalar_one()

        offset = (page - 1) * limit
        result = await self.db.execute(
            select(doctors)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(doctors.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await self.enrich(rows), total

    async def create_doctor(self, data: DoctorCreate) -> tuple[dict[str, Any], dict[str, str]]:
        """
        Onboard a doctor with a freshly generated login.

        Args:
            data: Doctor details

        Returns:
            The created doctor and the one-time credentials

        Raises:
            BadRequestException: If the email, license or aadhaar number is taken
        """
        await UserService.ensure_email_available(self.db, data.email)
        await self._ensure_unique(data.license_number, data.aadhaar_number)

        password = generate_password()
        try:
            user = await UserService.create_account(
                self.db, data.email, password, UserRole.DOCTOR
            )
            result = await self.db.execute(
                insert(doctors)
                .values(
                    user_id=user["id"],
                    name=f"{data.first_name} {data.last_name}",
                    phone=data.phone,
                    specialization=data.specialization,
                    qualification=data.qualification,
                    experience_years=data.experience_years,
                    license_number=data.license_number,
                    aadhaar_number=data.aadhaar_number,
                    consultation_fee=data.consultation_fee,
                    about=data.about,
                    address=data.address,
                    documents=data.documents,
                )
                .returning(doctors)
            )
            doctor = dict(result.mappings().one())
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise BadRequestException(
                "Doctor with this email, license or aadhaar number already exists"
            ) from e

        logger.info("doctor_created", doctor_id=str(doctor["id"]), user_id=str(user["id"]))
        credentials = {"email": user["email"], "password": password}
        return (await self.enrich([doctor], detail=True))[0], credentials

    async def get_doctor(self, doctor_id: UUID) -> dict[str, Any]:
        row = await self.get_row(doctor_id)
        return (await self.enrich([row], detail=True))[0]

    async def update_doctor(self, doctor_id: UUID, data: DoctorUpdate) -> dict[str, Any]:
        """Replace a doctor's professional details."""
        await self.get_row(doctor_id)

        await self.db.execute(
            update(doctors)
            .where(doctors.c.id == doctor_id)
            .values(**data.model_dump(exclude_unset=True))
        )
        await self.db.commit()

        logger.info("doctor_updated", doctor_id=str(doctor_id))
        return await self.get_doctor(doctor_id)

    async def delete_doctor(self, doctor_id: UUID) -> None:
        """
        Delete a doctor and their login.

        Raises:
            NotFoundException: If the doctor does not exist
            BadRequestException: If pending or confirmed appointments remain
        """
        doctor = await self.get_row(doctor_id)
        await removal.remove_doctor(self.db, doctor)
        await self.db.commit()

    async def verify_doctor(
        self,
        doctor_id: UUID,
        verified: bool,
        notes: str | None = None,
    ) -> dict[str, Any]:
        await self.get_row(doctor_id)

        await self.db.execute(
            update(doctors)
            .where(doctors.c.id == doctor_id)
            .values(
                is_verified=verified,
                verified_at=datetime.now(UTC) if verified else None,
                verification_notes=notes,
            )
        )
        await self.db.commit()

        logger.info("doctor_verified", doctor_id=str(doctor_id), verified=verified)
        return await self.get_doctor(doctor_id)

    async def search_doctors(self, query: str | None, limit: int = 20) -> list[dict[str, Any]]:
        """Doctors matching a short query, verified ones first."""
        if not query or len(query) < self.SEARCH_MIN_LENGTH:
            return []

        pattern = f"%{query}%"
        result = await self.db.execute(
            select(doctors)
            .select_from(doctors.join(users, doctors.c.user_id == users.c.id))
            .where(
                or_(
                    doctors.c.name.ilike(pattern),
                    doctors.c.specialization.ilike(pattern),
                    doctors.c.qualification.ilike(pattern),
                    users.c.email.ilike(pattern),
                )
            )
            .order_by(doctors.c.is_verified.desc(), doctors.c.name)
            .limit(limit)
        )
        return [dict(row) for row in result.mappings().all()]

    async def list_verified(self) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(doctors).where(doctors.c.is_verified.is_(True)).order_by(doctors.c.name)
        )
        return [dict(row) for row in result.mappings().all()]
