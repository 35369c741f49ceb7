"""Doctor model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    false,
)

from app.models.base import metadata, timestamp_columns

doctors = Table(
    "doctors",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("name", Text, nullable=False, index=True),
    Column("phone", String(20), nullable=False),
    # Professional credentials
    Column("specialization", String(200), nullable=False, index=True),
    Column("qualification", Text, nullable=False),
    Column("experience_years", Integer, nullable=False, default=0),
    Column("license_number", String(100), nullable=False, unique=True),
    Column("aadhaar_number", String(20), nullable=False, unique=True),
    Column("consultation_fee", Numeric(10, 2), nullable=False, default=0),
    Column("about", Text),
    Column("address", Text),
    Column("documents", JSON),
    # Verification
    Column(
        "is_verified", Boolean, nullable=False, default=False, server_default=false(), index=True
    ),
    Column("verified_at", DateTime(timezone=True)),
    Column("verification_notes", Text),
    *timestamp_columns(),
)
