"""Patient model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Column, Date, ForeignKey, String, Table, Text, Uuid

from app.models.base import metadata, timestamp_columns

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Walk-in patients may have no login
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    ),
    Column("name", Text, nullable=False, index=True),
    Column("phone", String(20), index=True),
    Column("date_of_birth", Date),
    Column("gender", String(20)),
    Column("address", Text),
    Column("emergency_contact", String(20)),
    *timestamp_columns(),
)
