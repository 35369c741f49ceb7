"""User service for accounts and their role profiles."""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import Table, and_, delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, NotFoundException
from app.core.security import get_password_hash
from app.models.admins import admins
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import USER_PUBLIC_COLUMNS, users
from app.schemas.users import UserCreate, UserRole, UserUpdate
from app.services import removal
from app.services.loaders import fetch_by_ids

logger = structlog.get_logger(__name__)

PROFILE_TABLES: dict[str, Table] = {
    "admin": admins,
    "patient": patients,
    "doctor": doctors,
    "pharmacy": pharmacies,
}


class UserService:
    """Service for user operations."""

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> dict | None:
        """Get a user without the password hash."""
        result = await db.execute(select(*USER_PUBLIC_COLUMNS).where(users.c.id == user_id))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> dict | None:
        """Get a user including the password hash, for credential checks."""
        result = await db.execute(select(users).where(func.lower(users.c.email) == email.lower()))
        user = result.mappings().first()
        return dict(user) if user else None

    @staticmethod
    async def ensure_email_available(db: AsyncSession, email: str) -> None:
        if await UserService.get_user_by_email(db, email):
            raise BadRequestException("Email already exists")

    @staticmethod
    async def create_account(
        db: AsyncSession,
        email: str,
        password: str,
        role: UserRole,
    ) -> dict:
        """
        Insert a login row; the caller commits.

        Args:
            db: Database session
            email: Login email, must be unused
            password: Plain password, stored as a bcrypt hash
            role: Account role

        Returns:
            The new user without the password hash

        Raises:
            BadRequestException: If the email is taken
        """
        await UserService.ensure_email_available(db, email)
        result = await db.execute(
            insert(users)
            .values(
                email=email.lower(),
                hashed_password=get_password_hash(password),
                role=role.value,
                is_active=True,
            )
            .returning(*USER_PUBLIC_COLUMNS)
        )
        return dict(result.mappings().one())

    @staticmethod
    async def attach_profiles(db: AsyncSession, rows: list[dict]) -> list[dict]:
        """Add admin, patient, doctor and pharmacy profiles to user rows."""
        user_ids = [row["id"] for row in rows]
        for field, table in PROFILE_TABLES.items():
            profiles = await fetch_by_ids(db, table, user_ids, key="user_id")
            for row in rows:
                row[field] = profiles.get(row["id"])
        return rows

    @staticmethod
    async def list_users(
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        role: UserRole | None = None,
        search: str | None = None,
    ) -> tuple[list[dict], int]:
        """
        List users with their profiles.

        Args:
            db: Database session
            page: Page number
            limit: Items per page
            role: Filter by role
            search: Matches email or the patient, doctor or pharmacy name

        Returns:
            Page of users and the filtered total
        """
        source = (
            users.outerjoin(patients, patients.c.user_id == users.c.id)
            .outerjoin(doctors, doctors.c.user_id == users.c.id)
            .outerjoin(pharmacies, pharmacies.c.user_id == users.c.id)
        )
        conditions = []
        if role:
            conditions.append(users.c.role == role.value)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    users.c.email.ilike(pattern),
                    patients.c.name.ilike(pattern),
                    doctors.c.name.ilike(pattern),
                    pharmacies.c.name.ilike(pattern),
                )
            )

        total = (
            await db.execute(select(func.count()).select_from(source).where(and_(*conditions)))
        ).scalar_one()

        offset = (page - 1) * limit
        result = await db.execute(
            select(*USER_PUBLIC_COLUMNS)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(users.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await UserService.attach_profiles(db, rows), total

    @staticmethod
    async def get_user(db: AsyncSession, user_id: UUID) -> dict:
        user = await UserService.get_user_by_id(db, user_id)
        if not user:
            raise NotFoundException("User not found")
        return (await UserService.attach_profiles(db, [user]))[0]

    @staticmethod
    async def _upsert_profile(
        db: AsyncSession,
        table: Table,
        user_id: UUID,
        values: dict[str, Any],
    ) -> None:
        existing = await db.execute(select(table.c.id).where(table.c.user_id == user_id))
        if existing.scalar_one_or_none() is None:
            await db.execute(insert(table).values(user_id=user_id, **values))
        else:
            await db.execute(update(table).where(table.c.user_id == user_id).values(**values))

    @staticmethod
    async def create_user(db: AsyncSession, data: UserCreate) -> dict:
        """
        Create a user and the profile that matches its role.

        Raises:
            BadRequestException: If the email or a unique profile field is taken
        """
        try:
            user = await UserService.create_account(db, data.email, data.password, data.role)
            for field, table in PROFILE_TABLES.items():
                profile = getattr(data, field)
                if profile is not None:
                    await db.execute(
                        insert(table).values(user_id=user["id"], **profile.model_dump())
                    )
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("A user with these unique details already exists") from e

        logger.info("user_created", user_id=str(user["id"]), role=data.role.value)
        return await UserService.get_user(db, user["id"])

    @staticmethod
    async def update_user(db: AsyncSession, user_id: UUID, data: UserUpdate) -> dict:
        """
        Update account fields and create or replace the supplied profiles.

        Raises:
            NotFoundException: If the user does not exist
            BadRequestException: If the new email or a unique profile field is taken
        """
        current = await UserService.get_user_by_id(db, user_id)
        if not current:
            raise NotFoundException("User not found")

        values: dict[str, Any] = {}
        if data.email is not None and data.email.lower() != current["email"]:
            await UserService.ensure_email_available(db, data.email)
            values["email"] = data.email.lower()
        if data.password is not None:
            values["hashed_password"] = get_password_hash(data.password)
        if data.role is not None:
            values["role"] = data.role.value
        if data.is_active is not None:
            values["is_active"] = data.is_active

        try:
            if values:
                await db.execute(update(users).where(users.c.id == user_id).values(**values))
            for field, table in PROFILE_TABLES.items():
                profile = getattr(data, field)
                if profile is not None:
                    await UserService._upsert_profile(db, table, user_id, profile.model_dump())
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            raise BadRequestException("A user with these unique details already exists") from e

        logger.info("user_updated", user_id=str(user_id), fields=sorted(values))
        return await UserService.get_user(db, user_id)

    @staticmethod
    async def delete_user(db: AsyncSession, user_id: UUID) -> None:
        """
        Delete a user with its profiles.

        Doctor, pharmacy and patient profiles follow their own deletion rules.

        Raises:
            NotFoundException: If the user does not exist
            BadRequestException: If a profile still has active dependents
        """
        user = await UserService.get_user(db, user_id)

        if user["doctor"]:
            await removal.remove_doctor(db, user["doctor"])
        if user["pharmacy"]:
            await removal.remove_pharmacy(db, user["pharmacy"])
        if user["patient"]:
            await removal.remove_patient(db, user["patient"])
        await removal.remove_admin_profile(db, user_id)
        await db.execute(delete(users).where(users.c.id == user_id))
        await db.commit()

        logger.info("user_deleted", user_id=str(user_id), role=user["role"])
