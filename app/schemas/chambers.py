"""Chamber schemas for request/response validation."""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer

from app.schemas.common import (
    AppointmentWithPatient,
    ChamberSummary,
    DoctorSummary,
    Pagination,
    PharmacySummary,
)


class ScheduleType(str, Enum):
    """How a chamber recurs."""

    WEEKLY_RECURRING = "WEEKLY_RECURRING"
    MULTI_WEEKLY = "MULTI_WEEKLY"
    MONTHLY_SPECIFIC = "MONTHLY_SPECIFIC"


class WeekDay(str, Enum):
    """Day of week, in ``date.weekday()`` order."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class WeekNumber(str, Enum):
    """Occurrence of a weekday within a month."""

    FIRST = "FIRST"
    SECOND = "SECOND"
    THIRD = "THIRD"
    FOURTH = "FOURTH"
    LAST = "LAST"


class ChamberCreate(BaseModel):
    """Schema for creating a chamber."""

    doctor_id: UUID
    pharmacy_id: UUID
    schedule_type: ScheduleType
    week_days: list[WeekDay] = Field(..., min_length=1)
    week_numbers: list[WeekNumber] = Field(default_factory=list)
    is_recurring: bool = True
    start_time: time
    end_time: time
    slot_duration: int = Field(..., gt=0, le=480, description="Slot length in minutes")
    fees: Decimal = Field(..., ge=0, decimal_places=2)


class ChamberUpdate(BaseModel):
    """Schema for updating a chamber; omitted fields keep their value."""

    schedule_type: ScheduleType | None = None
    week_days: list[WeekDay] | None = Field(None, min_length=1)
    week_numbers: list[WeekNumber] | None = None
    is_recurring: bool | None = None
    start_time: time | None = None
    end_time: time | None = None
    slot_duration: int | None = Field(None, gt=0, le=480)
    fees: Decimal | None = Field(None, ge=0, decimal_places=2)
    is_active: bool | None = None


class ChamberVerify(BaseModel):
    verified: bool
    notes: str | None = Field(None, max_length=1000)


class ChamberStats(BaseModel):
    total_appointments: int = 0
    completed_appointments: int = 0
    revenue: float = 0.0


class ChamberResponse(ChamberSummary):
    """Chamber with its doctor, pharmacy, appointments and derived figures."""

    is_recurring: bool
    verified_at: datetime | None = None
    verification_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    doctor: DoctorSummary | None = None
    pharmacy: PharmacySummary | None = None
    appointments: list[AppointmentWithPatient] = []
    stats: ChamberStats = ChamberStats()
    schedule_display: str = ""
    schedule_type_display: str = ""
    monthly_revenue_estimate: float = 0.0


class ChamberListResponse(BaseModel):
    chambers: list[ChamberResponse]
    pagination: Pagination


class ChamberDetailResponse(BaseModel):
    chamber: ChamberResponse


class ChamberMessageResponse(BaseModel):
    message: str
    chamber: ChamberResponse


class SlotChamberInfo(BaseModel):
    start_time: time
    end_time: time
    slot_duration: int
    fees: Decimal

    @field_serializer("start_time", "end_time", when_used="json")
    def serialize_time(self, value: time) -> str:
        """Render session bounds as HH:MM."""
        return value.strftime("%H:%M")

    @field_serializer("fees", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class SlotAvailabilityResponse(BaseModel):
    """Free and taken slots of a chamber on one date."""

    appointment_date: date
    available_slots: list[int]
    booked_slots: list[int]
    total_slots: int
    chamber: SlotChamberInfo


class UpcomingDatesResponse(BaseModel):
    chamber_id: UUID
    dates: list[date]
