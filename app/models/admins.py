"""Admin profile model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Table, Text, Uuid

from app.models.base import metadata, timestamp_columns

admins = Table(
    "admins",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
    Column("name", Text, nullable=False),
    Column("phone", String(20)),
    Column("department", Text),
    Column("permissions", JSON),
    Column("last_login_at", DateTime(timezone=True)),
    *timestamp_columns(),
)
