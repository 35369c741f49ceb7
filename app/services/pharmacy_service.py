"""Pharmacy service for onboarding, verification and lookup."""

import re
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import BadRequestException, NotFoundException
from app.core.security import generate_password
from app.models.appointments import appointments
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import USER_PUBLIC_COLUMNS, users
from app.schemas.pharmacies import PharmacyCreate, PharmacyUpdate
from app.schemas.users import UserRole
from app.services import removal
from app.services.loaders import fetch_by_ids, fetch_grouped
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


def pharmacy_login_email(name: str, domain: str | None = None) -> str:
    """
    Derive a login email from a pharmacy name.

    ``"City Care Pharmacy"`` becomes ``city.care@<domain>``.
    """
    prefix = re.sub(r"[^a-z\s]", "", name.lower())
    prefix = re.sub(r"\s+", ".", prefix.strip())
    prefix = re.sub(r"\.?pharmacy$", "", prefix).strip(".")
    if not prefix:
        raise BadRequestException("Pharmacy name must contain letters")
    return f"{prefix}@{domain or settings.pharmacy_email_domain}"


class PharmacyService:
    """Service for pharmacy operations."""

    RECENT_APPOINTMENTS = 10

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_row(self, pharmacy_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(pharmacies).where(pharmacies.c.id == pharmacy_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Pharmacy not found")
        return dict(row)

    async def _appointment_counts(self, ids: list[UUID]) -> dict[UUID, int]:
        if not ids:
            return {}
        result = await self.db.execute(
            select(appointments.c.pharmacy_id, func.count())
            .where(appointments.c.pharmacy_id.in_(ids))
            .group_by(appointments.c.pharmacy_id)
        )
        return {pharmacy_id: count for pharmacy_id, count in result.all()}

    async def enrich(self, rows: list[dict[str, Any]], detail: bool = False) -> list[dict]:
        """Attach user, chambers (with doctor), counts and, for detail views, recent appointments."""
        ids = [row["id"] for row in rows]
        user_map = await fetch_by_ids(
            self.db, users, (row["user_id"] for row in rows), columns=USER_PUBLIC_COLUMNS
        )
        chamber_map = await fetch_grouped(
            self.db, chambers, "pharmacy_id", ids, order_by=chambers.c.created_at
        )
        doctor_map = await fetch_by_ids(
            self.db,
            doctors,
            (chamber["doctor_id"] for group in chamber_map.values() for chamber in group),
        )
        appointment_counts = await self._appointment_counts(ids)

        for row in rows:
            row["user"] = user_map.get(row["user_id"])
            row["chambers"] = [
                {**chamber, "doctor": doctor_map.get(chamber["doctor_id"])}
                for chamber in chamber_map[row["id"]]
            ]
            row["chamber_count"] = len(row["chambers"])
            row["appointment_count"] = appointment_counts.get(row["id"], 0)

        if detail:
            for row in rows:
                result = await self.db.execute(
                    select(appointments)
                    .where(appointments.c.pharmacy_id == row["id"])
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

    async def list_pharmacies(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        verified: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List pharmacies with filtering and pagination.

        Args:
            page: Page number
            limit: Items per page
            search: Matches name, business name, address, GSTIN or email
            verified: Filter by verification flag

        Returns:
            Page of pharmacies and the filtered total
        """
        source = pharmacies.join(users, pharmacies.c.user_id == users.c.id)
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    pharmacies.c.name.ilike(pattern),
                    pharmacies.c.business_name.ilike(pattern),
                    pharmacies.c.address.ilike(pattern),
                    pharmacies.c.gstin.ilike(pattern),
                    users.c.email.ilike(pattern),
                )
            )
        if verified is not None:
            conditions.append(pharmacies.c.is_verified.is_(verified))

        total = (
            await self.db.execute(
                select(func.count()).select_from(source).where(and_(*conditions))
            )
        ).scalar_one()

        offset = (page - 1) * limit
        result = await self.db.execute(
            select(pharmacies)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(pharmacies.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await self.enrich(rows), total

    async def create_pharmacy(
        self,
        data: PharmacyCreate,
    ) -> tuple[dict[str, Any], dict[str, str]]:
        """
        Onboard a pharmacy with a login derived from its name.

        Args:
            data: Pharmacy details

        Returns:
            The created pharmacy and the one-time credentials

        Raises:
            BadRequestException: If the derived email is already in use
        """
        email = pharmacy_login_email(data.name)
        password = generate_password()

        try:
            user = await UserService.create_account(self.db, email, password, UserRole.PHARMACY)
            result = await self.db.execute(
                insert(pharmacies)
                .values(user_id=user["id"], **data.model_dump())
                .returning(pharmacies)
            )
            pharmacy = dict(result.mappings().one())
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise BadRequestException("Email already exists") from e

        logger.info("pharmacy_created", pharmacy_id=str(pharmacy["id"]), email=email)
        credentials = {"email": email, "password": password}
        return (await self.enrich([pharmacy], detail=True))[0], credentials

    async def get_pharmacy(self, pharmacy_id: UUID) -> dict[str, Any]:
        row = await self.get_row(pharmacy_id)
        return (await self.enrich([row], detail=True))[0]

    async def update_pharmacy(self, pharmacy_id: UUID, data: PharmacyUpdate) -> dict[str, Any]:
        await self.get_row(pharmacy_id)

        values = data.model_dump(exclude_unset=True)
        if values:
            await self.db.execute(
                update(pharmacies).where(pharmacies.c.id == pharmacy_id).values(**values)
            )
            await self.db.commit()
            logger.info("pharmacy_updated", pharmacy_id=str(pharmacy_id), fields=sorted(values))

        return await self.get_pharmacy(pharmacy_id)

    async def delete_pharmacy(self, pharmacy_id: UUID) -> None:
        """
        Delete a pharmacy and its login.

        Raises:
            NotFoundException: If the pharmacy does not exist
            BadRequestException: If active chambers or appointments remain
        """
        pharmacy = await self.get_row(pharmacy_id)
        await removal.remove_pharmacy(self.db, pharmacy)
        await self.db.commit()

    async def verify_pharmacy(
        self,
        pharmacy_id: UUID,
        verified: bool,
        notes: str | None = None,
    ) -> dict[str, Any]:
        await self.get_row(pharmacy_id)

        await self.db.execute(
            update(pharmacies)
            .where(pharmacies.c.id == pharmacy_id)
            .values(
                is_verified=verified,
                verified_at=datetime.now(UTC) if verified else None,
                verification_notes=notes,
            )
        )
        await self.db.commit()

        logger.info("pharmacy_verified", pharmacy_id=str(pharmacy_id), verified=verified)
        return await self.get_pharmacy(pharmacy_id)

    async def search_pharmacies(self, query: str | None, limit: int = 20) -> list[dict[str, Any]]:
        """Pharmacies matching a short query, verified ones first."""
        if not query or len(query) < 2:
            return []

        pattern = f"%{query}%"
        result = await self.db.execute(
            select(pharmacies)
            .where(
                or_(
                    pharmacies.c.name.ilike(pattern),
                    pharmacies.c.business_name.ilike(pattern),
                    pharmacies.c.address.ilike(pattern),
                )
            )
            .order_by(pharmacies.c.is_verified.desc(), pharmacies.c.name)
            .limit(limit)
        )
        return [dict(row) for row in result.mappings().all()]

    async def list_verified(self) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(pharmacies)
            .where(pharmacies.c.is_verified.is_(True))
            .order_by(pharmacies.c.name)
        )
        return [dict(row) for row in result.mappings().all()]
