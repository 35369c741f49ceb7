"""Chamber model definition using SQLAlchemy Core.

A chamber is a recurring clinic session of one doctor at one pharmacy,
divided into ``max_slots`` fixed-length slots.
"""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Time,
    Uuid,
    false,
    true,
)

from app.models.base import metadata, timestamp_columns

chambers = Table(
    "chambers",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "doctor_id",
        Uuid,
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "pharmacy_id",
        Uuid,
        ForeignKey("pharmacies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Schedule
    Column("schedule_type", String(20), nullable=False),
    Column("week_days", JSON, nullable=False),
    Column("week_numbers", JSON, nullable=False, default=list),
    Column("is_recurring", Boolean, nullable=False, default=True, server_default=true()),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("slot_duration", Integer, nullable=False),
    Column("max_slots", Integer, nullable=False),
    Column("fees", Numeric(10, 2), nullable=False),
    # State
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    Column(
        "is_verified", Boolean, nullable=False, default=False, server_default=false(), index=True
    ),
    Column("verified_at", DateTime(timezone=True)),
    Column("verification_notes", Text),
    *timestamp_columns(),
    CheckConstraint(
        "schedule_type IN ('WEEKLY_RECURRING', 'MULTI_WEEKLY', 'MONTHLY_SPECIFIC')",
        name="schedule_type",
    ),
    CheckConstraint("slot_duration > 0", name="slot_duration_positive"),
    CheckConstraint("max_slots > 0", name="max_slots_positive"),
)
