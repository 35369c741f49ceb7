"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    text,
)

from app.models.base import metadata, timestamp_columns

# Statuses that hold a slot.
ACTIVE_SLOT_CONDITION = "status IN ('PENDING', 'CONFIRMED')"

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # References; doctor and pharmacy are copied from the chamber at booking time
    Column("patient_id", Uuid, ForeignKey("patients.id"), nullable=False, index=True),
    Column("chamber_id", Uuid, ForeignKey("chambers.id"), nullable=False, index=True),
    Column("doctor_id", Uuid, ForeignKey("doctors.id"), nullable=False, index=True),
    Column("pharmacy_id", Uuid, ForeignKey("pharmacies.id"), nullable=False, index=True),
    # Booking
    Column("appointment_date", Date, nullable=False, index=True),
    Column("slot_number", Integer, nullable=False),
    # Status management
    Column("status", String(20), nullable=False, default="PENDING"),
    Column("payment_status", String(20), nullable=False, default="PENDING"),
    Column("payment_method", String(20), nullable=False, default="ONLINE"),
    Column("amount", Numeric(10, 2), nullable=False),
    Column("notes", Text),
    *timestamp_columns(),
    CheckConstraint(
        "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED')",
        name="status",
    ),
    CheckConstraint(
        "payment_status IN ('PENDING', 'PAID', 'REFUNDED')",
        name="payment_status",
    ),
    CheckConstraint("slot_number > 0", name="slot_number_positive"),
)

# At most one active appointment per chamber, date and slot.
Index(
    "uq_appointments_active_slot",
    appointments.c.chamber_id,
    appointments.c.appointment_date,
    appointments.c.slot_number,
    unique=True,
    postgresql_where=text(ACTIVE_SLOT_CONDITION),
    sqlite_where=text(ACTIVE_SLOT_CONDITION),
)
