"""Initial schema for accounts, providers, chambers and appointments

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _user_ref(nullable: bool = False) -> sa.Column:
    return sa.Column(
        "user_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=nullable,
        unique=True,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    ]


def _verification() -> list[sa.Column]:
    return [
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("verified_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("verification_notes", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ===================================================================
    # USERS - logins for every role
    # ===================================================================
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('ADMIN', 'OFFICE_MANAGER', 'DOCTOR', 'PHARMACY', 'PATIENT')",
            name="ck_users_role",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "admins",
        _id(),
        _user_ref(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("department", sa.Text(), nullable=True),
        sa.Column("permissions", postgresql.JSON(), nullable=True),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "patients",
        _id(),
        # Walk-in patients may have no login
        _user_ref(nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("emergency_contact", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_patients_name", "patients", ["name"])
    op.create_index("ix_patients_phone", "patients", ["phone"])

    # ===================================================================
    # PROVIDERS - doctors and pharmacies, verified by an admin
    # ===================================================================
    op.create_table(
        "doctors",
        _id(),
        _user_ref(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("specialization", sa.String(200), nullable=False),
        sa.Column("qualification", sa.Text(), nullable=False),
        sa.Column("experience_years", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("license_number", sa.String(100), nullable=False, unique=True),
        sa.Column("aadhaar_number", sa.String(20), nullable=False, unique=True),
        sa.Column("consultation_fee", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("documents", postgresql.JSON(), nullable=True),
        *_verification(),
        *_timestamps(),
    )
    op.create_index("ix_doctors_name", "doctors", ["name"])
    op.create_index("ix_doctors_specialization", "doctors", ["specialization"])
    op.create_index("ix_doctors_is_verified", "doctors", ["is_verified"])

    op.create_table(
        "pharmacies",
        _id(),
        _user_ref(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("business_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("gstin", sa.String(15), nullable=True),
        sa.Column("trade_license", sa.String(100), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("documents", postgresql.JSON(), nullable=True),
        *_verification(),
        *_timestamps(),
    )
    op.create_index("ix_pharmacies_name", "pharmacies", ["name"])
    op.create_index("ix_pharmacies_is_verified", "pharmacies", ["is_verified"])

    # ===================================================================
    # CHAMBERS - recurring doctor sessions at a pharmacy
    # ===================================================================
    op.create_table(
        "chambers",
        _id(),
        sa.Column(
            "doctor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("doctors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "pharmacy_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pharmacies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("schedule_type", sa.String(20), nullable=False),
        sa.Column("week_days", postgresql.JSON(), nullable=False),
        sa.Column("week_numbers", postgresql.JSON(), nullable=False, server_default="[]"),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_duration", sa.Integer(), nullable=False),
        sa.Column("max_slots", sa.Integer(), nullable=False),
        sa.Column("fees", sa.Numeric(10, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_verification(),
        *_timestamps(),
        sa.CheckConstraint(
            "schedule_type IN ('WEEKLY_RECURRING', 'MULTI_WEEKLY', 'MONTHLY_SPECIFIC')",
            name="ck_chambers_schedule_type",
        ),
        sa.CheckConstraint("slot_duration > 0", name="ck_chambers_slot_duration_positive"),
        sa.CheckConstraint("max_slots > 0", name="ck_chambers_max_slots_positive"),
    )
    op.create_index("ix_chambers_doctor_id", "chambers", ["doctor_id"])
    op.create_index("ix_chambers_pharmacy_id", "chambers", ["pharmacy_id"])
    op.create_index("ix_chambers_is_verified", "chambers", ["is_verified"])

    # ===================================================================
    # APPOINTMENTS - one slot of one chamber session
    # ===================================================================
    op.create_table(
        "appointments",
        _id(),
        sa.Column(
            "patient_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id"),
            nullable=False,
        ),
        sa.Column(
            "chamber_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("chambers.id"),
            nullable=False,
        ),
        sa.Column(
            "doctor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("doctors.id"),
            nullable=False,
        ),
        sa.Column(
            "pharmacy_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("pharmacies.id"),
            nullable=False,
        ),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("slot_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="ONLINE"),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELLED')",
            name="ck_appointments_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('PENDING', 'PAID', 'REFUNDED')",
            name="ck_appointments_payment_status",
        ),
        sa.CheckConstraint("slot_number > 0", name="ck_appointments_slot_number_positive"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_chamber_id", "appointments", ["chamber_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_pharmacy_id", "appointments", ["pharmacy_id"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])
    # Two concurrent bookings of the same slot cannot both commit.
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["chamber_id", "appointment_date", "slot_number"],
        unique=True,
        postgresql_where=sa.text("status IN ('PENDING', 'CONFIRMED')"),
    )

    op.create_table(
        "medical_records",
        _id(),
        sa.Column(
            "appointment_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("appointments.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("prescription", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("attachments", postgresql.JSON(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("medical_records")
    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("chambers")
    op.drop_table("pharmacies")
    op.drop_table("doctors")
    op.drop_table("patients")
    op.drop_table("admins")
    op.drop_table("users")
