"""Pharmacy model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Table,
    Text,
    Uuid,
    false,
)

from app.models.base import metadata, timestamp_columns

pharmacies = Table(
    "pharmacies",
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
    Column("business_name", Text, nullable=False),
    Column("phone", String(20), nullable=False),
    Column("address", Text, nullable=False),
    # Registration
    Column("gstin", String(15)),
    Column("trade_license", String(100)),
    # Location
    Column("latitude", Float),
    Column("longitude", Float),
    Column("documents", JSON),
    # Verification
    Column(
        "is_verified", Boolean, nullable=False, default=False, server_default=false(), index=True
    ),
    Column("verified_at", DateTime(timezone=True)),
    Column("verification_notes", Text),
    *timestamp_columns(),
)
