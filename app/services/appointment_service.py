"""Appointment service for booking and lifecycle management."""

from datetime import date, timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import String, and_, case, cast, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException, SlotUnavailableException
from app.models.appointments import appointments
from app.models.base import utctoday
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.medical_records import medical_records
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    DateFilter,
    PaymentStatus,
    PaymentStatusUpdate,
)
from app.services import slot_policy
from app.services.loaders import fetch_by_ids

logger = structlog.get_logger(__name__)


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _get_row(self, appointment_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(
            select(appointments).where(appointments.c.id == appointment_id)
        )
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Appointment not found")
        return dict(row)

    async def _get_chamber(self, chamber_id: UUID) -> dict[str, Any]:
        result = await self.db.execute(select(chambers).where(chambers.c.id == chamber_id))
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Chamber not found")
        return dict(row)

    async def booked_slots(
        self,
        chamber_id: UUID,
        appointment_date: date,
        exclude_id: UUID | None = None,
    ) -> list[int]:
        """
        Slot numbers held by active appointments of a chamber on a date.

        Args:
            chamber_id: Chamber ID
            appointment_date: Calendar date
            exclude_id: Appointment to ignore, typically the one being edited

        Returns:
            Sorted slot numbers
        """
        conditions = [
            appointments.c.chamber_id == chamber_id,
            appointments.c.appointment_date == appointment_date,
            appointments.c.status.in_(sorted(slot_policy.ACTIVE_STATUSES)),
        ]
        if exclude_id is not None:
            conditions.append(appointments.c.id != exclude_id)

        result = await self.db.execute(
            select(appointments.c.slot_number)
            .where(and_(*conditions))
            .order_by(appointments.c.slot_number)
        )
        return list(result.scalars().all())

    async def _ensure_slot_free(
        self,
        chamber_id: UUID,
        appointment_date: date,
        slot_number: int,
        exclude_id: UUID | None = None,
    ) -> None:
        booked = await self.booked_slots(chamber_id, appointment_date, exclude_id)
        if slot_number in booked:
            raise SlotUnavailableException()

    async def attach_relations(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Add patient, doctor, pharmacy, chamber and medical record to each row."""
        patient_map = await fetch_by_ids(self.db, patients, (r["patient_id"] for r in rows))
        doctor_map = await fetch_by_ids(self.db, doctors, (r["doctor_id"] for r in rows))
        pharmacy_map = await fetch_by_ids(self.db, pharmacies, (r["pharmacy_id"] for r in rows))
        chamber_map = await fetch_by_ids(self.db, chambers, (r["chamber_id"] for r in rows))
        record_map = await fetch_by_ids(
            self.db, medical_records, (r["id"] for r in rows), key="appointment_id"
        )

        for row in rows:
            row["patient"] = patient_map.get(row["patient_id"])
            row["doctor"] = doctor_map.get(row["doctor_id"])
            row["pharmacy"] = pharmacy_map.get(row["pharmacy_id"])
            row["chamber"] = chamber_map.get(row["chamber_id"])
            row["medical_record"] = record_map.get(row["id"])
        return rows

    async def _save(self, appointment_id: UUID, values: dict[str, Any]) -> dict[str, Any]:
        """Write changes in one statement; a lost race for the slot becomes a 400."""
        try:
            result = await self.db.execute(
                update(appointments)
                .where(appointments.c.id == appointment_id)
                .values(**values)
                .returning(appointments)
            )
            row = dict(result.mappings().one())
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("appointment_slot_race_lost", appointment_id=str(appointment_id))
            raise SlotUnavailableException() from e
        return row

    async def create_appointment(self, data: AppointmentCreate) -> dict[str, Any]:
        """
        Book a slot in a chamber.

        Args:
            data: Booking request

        Returns:
            Created appointment with related rows

        Raises:
            NotFoundException: If the chamber or patient does not exist
            BadRequestException: If the chamber is not bookable, the slot is
                out of range or already taken
        """
        chamber = await self._get_chamber(data.chamber_id)

        patient = await self.db.execute(
            select(patients.c.id).where(patients.c.id == data.patient_id)
        )
        if patient.scalar_one_or_none() is None:
            raise NotFoundException("Patient not found")

        slot_policy.check_chamber_bookable(chamber)
        slot_policy.check_slot_number(data.slot_number, chamber["max_slots"])
        await self._ensure_slot_free(chamber["id"], data.appointment_date, data.slot_number)

        values = {
            "patient_id": data.patient_id,
            "chamber_id": chamber["id"],
            "doctor_id": chamber["doctor_id"],
            "pharmacy_id": chamber["pharmacy_id"],
            "appointment_date": data.appointment_date,
            "slot_number": data.slot_number,
            "status": AppointmentStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "payment_method": data.payment_method.value,
            "amount": chamber["fees"],
            "notes": data.notes,
        }

        try:
            result = await self.db.execute(
                insert(appointments).values(**values).returning(appointments)
            )
            row = dict(result.mappings().one())
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "appointment_slot_race_lost",
                chamber_id=str(chamber["id"]),
                slot_number=data.slot_number,
            )
            raise SlotUnavailableException() from e

        logger.info(
            "appointment_created",
            appointment_id=str(row["id"]),
            chamber_id=str(chamber["id"]),
            appointment_date=data.appointment_date.isoformat(),
            slot_number=data.slot_number,
        )
        return (await self.attach_relations([row]))[0]

    async def get_appointment(self, appointment_id: UUID) -> dict[str, Any]:
        """Get an appointment with its related rows."""
        row = await self._get_row(appointment_id)
        return (await self.attach_relations([row]))[0]

    async def update_appointment(
        self,
        appointment_id: UUID,
        data: AppointmentUpdate,
    ) -> dict[str, Any]:
        """
        Reschedule an appointment or change its status, payment status or notes.

        Every change goes through the same rules as the dedicated status and
        payment endpoints. When a request both cancels and sets a payment
        status, the payment change is applied first and the cancellation rule
        then runs on it, so a payment marked PAID in the same request ends up
        REFUNDED.

        Args:
            appointment_id: Appointment ID
            data: Fields to change

        Returns:
            Updated appointment with related rows
        """
        current = await self._get_row(appointment_id)
        values: dict[str, Any] = {}

        if data.payment_status is not None:
            slot_policy.check_payment_transition(
                current["payment_status"], data.payment_status.value
            )
            values["payment_status"] = data.payment_status.value

        if data.status is not None:
            values.update(
                slot_policy.resolve_status_change(
                    current["status"],
                    values.get("payment_status", current["payment_status"]),
                    data.status.value,
                )
            )

        new_date = data.appointment_date or current["appointment_date"]
        new_slot = data.slot_number if data.slot_number is not None else current["slot_number"]
        if (new_date, new_slot) != (current["appointment_date"], current["slot_number"]):
            chamber = await self._get_chamber(current["chamber_id"])
            slot_policy.check_slot_number(new_slot, chamber["max_slots"])
            if values.get("status", current["status"]) in slot_policy.ACTIVE_STATUSES:
                await self._ensure_slot_free(
                    current["chamber_id"], new_date, new_slot, exclude_id=appointment_id
                )
            values["appointment_date"] = new_date
            values["slot_number"] = new_slot

        if "notes" in data.model_fields_set:
            values["notes"] = data.notes

        if values:
            await self._save(appointment_id, values)
            logger.info(
                "appointment_updated",
                appointment_id=str(appointment_id),
                fields=sorted(values),
            )

        return await self.get_appointment(appointment_id)

    async def update_status(
        self,
        appointment_id: UUID,
        status: AppointmentStatus,
    ) -> dict[str, Any]:
        """
        Move an appointment to a new status.

        Raises:
            NotFoundException: If the appointment does not exist
            InvalidTransitionException: If the appointment is completed or cancelled
        """
        current = await self._get_row(appointment_id)
        changes = slot_policy.resolve_status_change(
            current["status"], current["payment_status"], status.value
        )
        await self._save(appointment_id, changes)

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            old_status=current["status"],
            new_status=status.value,
            payment_status=changes.get("payment_status", current["payment_status"]),
        )
        return await self.get_appointment(appointment_id)

    async def update_payment(
        self,
        appointment_id: UUID,
        data: PaymentStatusUpdate,
    ) -> dict[str, Any]:
        """
        Change the payment status and, optionally, the payment method.

        Raises:
            NotFoundException: If the appointment does not exist
            InvalidTransitionException: If the payment was already refunded
        """
        current = await self._get_row(appointment_id)
        slot_policy.check_payment_transition(current["payment_status"], data.payment_status.value)

        values: dict[str, Any] = {"payment_status": data.payment_status.value}
        if data.payment_method is not None:
            values["payment_method"] = data.payment_method.value
        await self._save(appointment_id, values)

        logger.info(
            "appointment_payment_changed",
            appointment_id=str(appointment_id),
            old_payment_status=current["payment_status"],
            new_payment_status=data.payment_status.value,
        )
        return await self.get_appointment(appointment_id)

    async def cancel_appointment(self, appointment_id: UUID) -> dict[str, Any]:
        """Cancel an appointment, refunding it if it was paid."""
        current = await self._get_row(appointment_id)
        slot_policy.check_cancellable(current["status"])

        changes = slot_policy.resolve_status_change(
            current["status"], current["payment_status"], AppointmentStatus.CANCELLED.value
        )
        await self._save(appointment_id, changes)

        logger.info("appointment_cancelled", appointment_id=str(appointment_id))
        return await self.get_appointment(appointment_id)

    async def list_appointments(
        self,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        status: AppointmentStatus | None = None,
        payment_status: PaymentStatus | None = None,
        date_filter: DateFilter = DateFilter.ALL,
        doctor_id: UUID | None = None,
        pharmacy_id: UUID | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List appointments with filtering and pagination.

        Args:
            page: Page number
            limit: Items per page
            search: Matches the appointment id or the patient, doctor or pharmacy name
            status: Filter by status
            payment_status: Filter by payment status
            date_filter: Relative window on the appointment date
            doctor_id: Filter by doctor
            pharmacy_id: Filter by pharmacy

        Returns:
            Page of appointments with related rows, and the filtered total
        """
        source = (
            appointments.join(patients, appointments.c.patient_id == patients.c.id)
            .join(doctors, appointments.c.doctor_id == doctors.c.id)
            .join(pharmacies, appointments.c.pharmacy_id == pharmacies.c.id)
        )
        conditions = []

        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    cast(appointments.c.id, String).ilike(pattern),
                    patients.c.name.ilike(pattern),
                    doctors.c.name.ilike(pattern),
                    pharmacies.c.name.ilike(pattern),
                )
            )

        if status:
            conditions.append(appointments.c.status == status.value)

        if payment_status:
            conditions.append(appointments.c.payment_status == payment_status.value)

        if doctor_id:
            conditions.append(appointments.c.doctor_id == doctor_id)

        if pharmacy_id:
            conditions.append(appointments.c.pharmacy_id == pharmacy_id)

        today = utctoday()
        if date_filter == DateFilter.TODAY:
            conditions.append(appointments.c.appointment_date == today)
        elif date_filter == DateFilter.WEEK:
            conditions.append(appointments.c.appointment_date >= today - timedelta(days=7))
        elif date_filter == DateFilter.MONTH:
            conditions.append(appointments.c.appointment_date >= today - timedelta(days=30))

        count_query = select(func.count()).select_from(source).where(and_(*conditions))
        total = (await self.db.execute(count_query)).scalar_one()

        offset = (page - 1) * limit
        query = (
            select(appointments)
            .select_from(source)
            .where(and_(*conditions))
            .order_by(appointments.c.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        rows = [dict(row) for row in result.mappings().all()]

        return await self.attach_relations(rows), total

    async def get_stats(self) -> dict[str, Any]:
        """Counts per status, today's bookings and payment totals over all appointments."""
        status_rows = await self.db.execute(
            select(appointments.c.status, func.count()).group_by(appointments.c.status)
        )
        by_status = {status: count for status, count in status_rows.all()}
        total = sum(by_status.values())

        today_count = (
            await self.db.execute(
                select(func.count())
                .select_from(appointments)
                .where(appointments.c.appointment_date == utctoday())
            )
        ).scalar_one()

        paid_sum, pending_sum = (
            await self.db.execute(
                select(
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
                    func.coalesce(
                        func.sum(
                            case(
                                (
                                    appointments.c.payment_status == PaymentStatus.PENDING.value,
                                    appointments.c.amount,
                                ),
                                else_=0,
                            )
                        ),
                        0,
                    ),
                )
            )
        ).one()

        completed = by_status.get(AppointmentStatus.COMPLETED.value, 0)
        return {
            "total": total,
            "today": today_count,
            "pending": by_status.get(AppointmentStatus.PENDING.value, 0),
            "confirmed": by_status.get(AppointmentStatus.CONFIRMED.value, 0),
            "completed": completed,
            "cancelled": by_status.get(AppointmentStatus.CANCELLED.value, 0),
            "total_revenue": float(paid_sum or 0),
            "pending_payments": float(pending_sum or 0),
            "completion_rate": round(completed / total * 100, 2) if total else 0.0,
        }

    async def recent_appointments(self, limit: int = 5) -> list[dict[str, Any]]:
        result = await self.db.execute(
            select(appointments).order_by(appointments.c.created_at.desc()).limit(limit)
        )
        rows = [dict(row) for row in result.mappings().all()]
        return await self.attach_relations(rows)
