"""User model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, String, Table, Text, Uuid, true

from app.models.base import metadata, timestamp_columns

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid4),
    # Credentials
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(20), nullable=False, index=True),
    # Account state
    Column("is_active", Boolean, nullable=False, default=True, server_default=true()),
    *timestamp_columns(),
    CheckConstraint(
        "role IN ('ADMIN', 'OFFICE_MANAGER', 'DOCTOR', 'PHARMACY', 'PATIENT')",
        name="role",
    ),
)

# Every column except the password hash; used wherever a user is serialized.
USER_PUBLIC_COLUMNS = [
    users.c.id,
    users.c.email,
    users.c.role,
    users.c.is_active,
    users.c.created_at,
    users.c.updated_at,
]
