"""Shared metadata and column helpers for SQLAlchemy Core tables."""

from datetime import UTC, date, datetime

from sqlalchemy import Column, DateTime, MetaData, func

# Naming convention keeps constraint names stable across migrations.
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def utcnow() -> datetime:
    return datetime.now(UTC)


def utctoday() -> date:
    """Calendar date in UTC; the one clock for date windows and stats."""
    return utcnow().date()


def timestamp_columns() -> list[Column]:
    """Audit columns shared by every table."""
    return [
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
        ),
        Column(
            "updated_at",
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            onupdate=utcnow,
            server_default=func.now(),
        ),
    ]
