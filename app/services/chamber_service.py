"""Chamber service for scheduling doctor sessions at pharmacies."""

from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import and_, case, delete, func, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    BadRequestException,
    NotFoundException,
    ScheduleConflictException,
)
from app.models.appointments import appointments
from app.models.base import utctoday
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.medical_records import medical_records
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.schemas.appointments import AppointmentStatus, PaymentStatus
from app.schemas.chambers import ChamberCreate, ChamberUpdate, ScheduleType
from app.services import schedule, slot_policy
from app.services.appointment_service import AppointmentService
from app.services.loaders import fetch_by_ids

logger = structlog.get_logger(__name__)

SCHEDULE_FIELDS = frozenset(
    {"schedule_type", "week_days", "week_numbers", "start_time", "end_time", "slot_duration"}
)


def _enum_values(items: list[Any] | None) -> list[str]:
    return [item.value if hasattr(item, "value") else item for item in items or []]


class ChamberService:
    """Service for chamber operations."""

    RECENT_APPOINTMENTS = 5

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def get_row(self, chamber_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(chambers).where(chambers.c.id == chamber_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Chamber not found")
        return dict(row)

    async def _get_doctor(self, doctor_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(doctors).where(doctors.c.id == doctor_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Doctor not found")
        return dict(row)

    async def _get_pharmacy(self, pharmacy_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(pharmacies).where(pharmacies.c.id == pharmacy_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Pharmacy not found")
        return dict(row)

    @staticmethod
    def _validate(candidate: dict[str, Any]) -> int:
        """Validate a schedule and return the slot count it yields."""
        errors = schedule.validate_schedule(
            candidate["schedule_type"],
            candidate["week_days"],
            candidate["week_numbers"],
            candidate["start_time"],
            candidate["end_time"],
        )
        if errors:
            raise BadRequestException(errors[0])

        max_slots = schedule.calculate_max_slots(
            candidate["start_time"], candidate["end_time"], candidate["slot_duration"]
        )
        if max_slots <= 0:
            raise BadRequestException("Invalid time range or slot duration")
        return max_slots

    async def _check_conflicts(
        self,
        doctor_id: UUID,
        candidate: dict[str, Any],
        exclude_id: UUID | None = None,
    ) -> None:
        """
        Reject a schedule that overlaps another active chamber of the doctor.

        Raises:
            ScheduleConflictException: If any active chamber conflicts
        """
        conditions = [chambers.c.doctor_id == doctor_id, chambers.c.is_active.is_(True)]
        if exclude_id is not None:
            conditions.append(chambers.c.id != exclude_id)

        result = await self.db.execute(select(chambers).where(and_(*conditions)))
        conflicts = schedule.find_conflicts(candidate, result.mappings().all())
        if conflicts:
            logger.info(
                "chamber_schedule_conflict",
                doctor_id=str(doctor_id),
                conflicting_chamber_id=str(conflicts[0]["id"]),
            )
            raise ScheduleConflictException()

    async def _check_held_slots(self, chamber_id: UUID, max_slots: int) -> None:
        """Reject shrinking a chamber below a slot an active appointment holds."""
        result = await self.db.execute(
            select(func.count())
            .select_from(appointments)
            .where(
                and_(
                    appointments.c.chamber_id == chamber_id,
                    appointments.c.status.in_(sorted(slot_policy.ACTIVE_STATUSES)),
                    appointments.c.slot_number > max_slots,
                )
            )
        )
        if result.scalar_one():
            raise BadRequestException("Active appointments hold slots beyond the new schedule")

    async def _stats(self, chamber_ids: list[UUID]) -> dict[UUID, dict[str, Any]]:
        """Appointment count, completed count and paid revenue per chamber."""
        stats = {
            chamber_id: {"total_appointments": 0, "completed_appointments": 0, "revenue": 0.0}
            for chamber_id in chamber_ids
        }
        if not chamber_ids:
            return stats

        query = (
            select(
                appointments.c.chamber_id,
                func.count(),
                func.sum(
                    case((appointments.c.status == AppointmentStatus.COMPLETED.value, 1), else_=0)
                ),
                func.coalesce(
                    func.sum(
                        case(
                            (
                                appointments.c.payment_status == PaymentStatus.PAID.value,
                                appointments.c.amount,
                            ),
                            else_=0,
                        )
                    ),
                    0,
                ),
            )
            .where(appointments.c.chamber_id.in_(chamber_ids))
            .group_by(appointments.c.chamber_id)
        )
        result = await self.db.execute(query)
        for chamber_id, total, completed, revenue in result.all():
            stats[chamber_id] = {
                "total_appointments": total,
                "completed_appointments": int(completed or 0),
                "revenue": float(revenue or 0),
            }
        return stats

    async def _appointments_with_patients(
        self,
        chamber_ids: list[UUID],
        per_chamber: int | None = None,
    ) -> dict[UUID, list[dict[str, Any]]]:
        grouped: dict[UUID, list[dict[str, Any]]] = {chamber_id: [] for chamber_id in chamber_ids}
        if not chamber_ids:
            return grouped

        result = await self.db.execute(
            select(appointments)
            .where(appointments.c.chamber_id.in_(chamber_ids))
            .order_by(appointments.c.created_at.desc())
        )
        rows = [dict(row) for row in result.mappings().all()]
        patient_map = await fetch_by_ids(self.db, patients, (row["patient_id"] for row in rows))

        for row in rows:
            bucket = grouped[row["chamber_id"]]
            if per_chamber is None or len(bucket) < per_chamber:
                row["patient"] = patient_map.get(row["patient_id"])
                bucket.append(row)
        return grouped

    async def enrich(
        self,
        rows: list[dict[str, Any]],
        recent_only: bool = True,
    ) -> list[dict[str, Any]]:
        """Attach doctor, pharmacy, appointments, stats and display helpers."""
        ids = [row["id"] for row in rows]
        doctor_map = await fetch_by_ids(self.db, doctors, (row["doctor_id"] for row in rows))
        pharmacy_map = await fetch_by_ids(
            self.db, pharmacies, (row["pharmacy_id"] for row in rows)
        )
        stats = await self._stats(ids)
        appointment_map = await self._appointments_with_patients(
            ids, per_chamber=self.RECENT_APPOINTMENTS if recent_only else None
        )

        for row in rows:
            row["doctor"] = doctor_map.get(row["doctor_id"])
            row["pharmacy"] = pharmacy_map.get(row["pharmacy_id"])
            row["stats"] = stats[row["id"]]
            row["appointments"] = appointment_map[row["id"]]
            row["schedule_display"] = schedule.schedule_display(row)
            row["schedule_type_display"] = schedule.schedule_type_display(row)
            row["monthly_revenue_estimate"] = schedule.monthly_revenue_estimate(row)
        return rows

    async def create_chamber(self, data: ChamberCreate) -> dict[str, Any]:
        """
        Create a chamber for a doctor at a pharmacy.

        The chamber starts verified only when both the doctor and the
        pharmacy are verified.

        Args:
            data: Chamber definition

        Returns:
            Created chamber with related rows

        Raises:
            BadRequestException: If the schedule is invalid
            NotFoundException: If the doctor or pharmacy does not exist
            ScheduleConflictException: If the doctor is already busy at that time
        """
        candidate = {
            "schedule_type": data.schedule_type.value,
            "week_days": _enum_values(data.week_days),
            "week_numbers": (
                _enum_values(data.week_numbers)
                if data.schedule_type == ScheduleType.MONTHLY_SPECIFIC
                else []
            ),
            "start_time": data.start_time,
            "end_time": data.end_time,
            "slot_duration": data.slot_duration,
        }
        max_slots = self._validate(candidate)

        doctor = await self._get_doctor(data.doctor_id)
        pharmacy = await self._get_pharmacy(data.pharmacy_id)

        await self._check_conflicts(doctor["id"], candidate)

        values = {
            **candidate,
            "doctor_id": doctor["id"],
            "pharmacy_id": pharmacy["id"],
            "is_recurring": data.is_recurring,
            "max_slots": max_slots,
            "fees": data.fees,
            "is_active": True,
            "is_verified": bool(doctor["is_verified"] and pharmacy["is_verified"]),
        }
        result = await self.db.execute(insert(chambers).values(**values).returning(chambers))
        row = dict(result.mappings().one())
        await self.db.commit()

        logger.info(
            "chamber_created",
            chamber_id=str(row["id"]),
            doctor_id=str(doctor["id"]),
            pharmacy_id=str(pharmacy["id"]),
            max_slots=max_slots,
            is_verified=row["is_verified"],
        )
        return (await self.enrich([row]))[0]

    async def get_chamber(self, chamber_id: UUID) -> dict[str, Any]:
        """Get a chamber with all of its appointments."""
        row = await self.get_row(chamber_id)
        return (await self.enrich([row], recent_only=False))[0]

    async def list_chambers(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        doctor_id: UUID | None = None,
        pharmacy_id: UUID | None = None,
        verified: bool | None = None,
        active: bool | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List chambers with filtering and pagination.

        Args:
            page: Page number
            limit: Items per page
            search: Matches doctor name, pharmacy name or specialization
            doctor_id: Filter by doctor
            pharmacy_id: Filter by pharmacy
            verified: Filter by verification flag
            active: Filter by active flag

        Returns:
            Page of chambers and the filtered total
        """
        source = chambers.join(doctors, chambers.c.doctor_id == doctors.c.id).join(
            pharmacies, chambers.c.pharmacy_id == pharmacies.c.id
        )
        conditions = []

        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    doctors.c.name.ilike(pattern),
                    pharmacies.c.name.ilike(pattern),
                    doctors.c.specialization.ilike(pattern),
                )
            )
        if doctor_id:
            conditions.append(chambers.c.doctor_id == doctor_id)
        if pharmacy_id:
            conditions.append(chambers.c.pharmacy_id == pharmacy_id)
        if verified is not None:
            conditions.append(chambers.c.is_verified.is_(verified))
        if active is not None:
            conditions.append(chambers.c.is_active.is_(active))

        total = (
            await self.db.execute(
                select(func.count()).select_from(source).where(and_(*conditions))
            )
        ).scalar_one()

        offset = (page - 1) * limit
        result = await self.db.execute(
            select(chambers)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(chambers.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await self.enrich(rows), total

    async def list_active_chambers(self) -> list[dict[str, Any]]:
        """Verified and active chambers, ordered by doctor then pharmacy name."""
        result = await self.db.execute(
            select(chambers)
            .select_from(
                chambers.join(doctors, chambers.c.doctor_id == doctors.c.id).join(
                    pharmacies, chambers.c.pharmacy_id == pharmacies.c.id
                )
            )
            .where(and_(chambers.c.is_active.is_(True), chambers.c.is_verified.is_(True)))
            .order_by(doctors.c.name, pharmacies.c.name)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await self.enrich(rows)

    async def update_chamber(self, chamber_id: UUID, data: ChamberUpdate) -> dict[str, Any]:
        """
        Update a chamber, re-validating and re-deriving its slots when the schedule changes.

        Raises:
            NotFoundException: If the chamber does not exist
            BadRequestException: If the resulting schedule is invalid
            ScheduleConflictException: If the new schedule overlaps another chamber
        """
        current = await self.get_row(chamber_id)
        changes = data.model_dump(exclude_unset=True)
        for field in ("schedule_type", "week_days", "week_numbers"):
            if field in changes and changes[field] is not None:
                value = changes[field]
                changes[field] = _enum_values(value) if isinstance(value, list) else value.value
        changes = {key: value for key, value in changes.items() if value is not None}

        merged = {**current, **changes}
        if merged["schedule_type"] != ScheduleType.MONTHLY_SPECIFIC.value:
            merged["week_numbers"] = []
            if current["week_numbers"] or "week_numbers" in changes:
                changes["week_numbers"] = []

        if SCHEDULE_FIELDS & changes.keys() or changes.get("is_active"):
            changes["max_slots"] = self._validate(merged)
            if changes["max_slots"] < current["max_slots"]:
                await self._check_held_slots(chamber_id, changes["max_slots"])
            if merged["is_active"]:
                await self._check_conflicts(current["doctor_id"], merged, exclude_id=chamber_id)

        if changes:
            await self.db.execute(
                update(chambers).where(chambers.c.id == chamber_id).values(**changes)
            )
            await self.db.commit()
            logger.info("chamber_updated", chamber_id=str(chamber_id), fields=sorted(changes))

        return await self.get_chamber(chamber_id)

    async def verify_chamber(
        self,
        chamber_id: UUID,
        verified: bool,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Set the verification flag; a chamber is active exactly when verified."""
        await self.get_row(chamber_id)

        await self.db.execute(
            update(chambers)
            .where(chambers.c.id == chamber_id)
            .values(
                is_verified=verified,
                is_active=verified,
                verified_at=datetime.now(UTC) if verified else None,
                verification_notes=notes,
            )
        )
        await self.db.commit()

        logger.info("chamber_verified", chamber_id=str(chamber_id), verified=verified)
        return await self.get_chamber(chamber_id)

    async def delete_chamber(self, chamber_id: UUID) -> None:
        """
        Delete a chamber and its appointment history.

        Raises:
            NotFoundException: If the chamber does not exist
            BadRequestException: If pending or confirmed appointments remain
        """
        await self.get_row(chamber_id)

        active = (
            await self.db.execute(
                select(func.count())
                .select_from(appointments)
                .where(
                    and_(
                        appointments.c.chamber_id == chamber_id,
                        appointments.c.status.in_(sorted(slot_policy.ACTIVE_STATUSES)),
                    )
                )
            )
        ).scalar_one()
        if active:
            raise BadRequestException("Cannot delete chamber with active appointments")

        history = select(appointments.c.id).where(appointments.c.chamber_id == chamber_id)
        await self.db.execute(
            delete(medical_records).where(medical_records.c.appointment_id.in_(history))
        )
        await self.db.execute(delete(appointments).where(appointments.c.chamber_id == chamber_id))
        await self.db.execute(delete(chambers).where(chambers.c.id == chamber_id))
        await self.db.commit()

        logger.info("chamber_deleted", chamber_id=str(chamber_id))

    async def get_slots(
        self,
        chamber_id: UUID,
        appointment_date: date,
        exclude_appointment: UUID | None = None,
    ) -> dict[str, Any]:
        """
        Free and taken slots of a chamber on a date.

        Args:
            chamber_id: Chamber ID
            appointment_date: Calendar date
            exclude_appointment: Appointment whose slot counts as free (when rescheduling it)

        Returns:
            Available and booked slot numbers with the chamber timing
        """
        chamber = await self.get_row(chamber_id)
        max_slots = chamber["max_slots"]

        booked = await AppointmentService(self.db).booked_slots(
            chamber_id, appointment_date, exclude_id=exclude_appointment
        )
        booked = [slot for slot in booked if 1 <= slot <= max_slots]

        return {
            "appointment_date": appointment_date,
            "available_slots": slot_policy.available_slots(max_slots, booked),
            "booked_slots": booked,
            "total_slots": max_slots,
            "chamber": chamber,
        }

    async def upcoming_dates(
        self,
        chamber_id: UUID,
        count: int = 5,
        from_date: date | None = None,
    ) -> list[date]:
        chamber = await self.get_row(chamber_id)
        return schedule.next_session_dates(chamber, from_date or utctoday(), count)
