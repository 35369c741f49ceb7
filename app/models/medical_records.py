"""Medical record model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import JSON, Column, ForeignKey, Table, Text, Uuid

from app.models.base import metadata, timestamp_columns

medical_records = Table(
    "medical_records",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "appointment_id",
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("diagnosis", Text),
    Column("prescription", Text),
    Column("notes", Text),
    Column("attachments", JSON),
    *timestamp_columns(),
)
