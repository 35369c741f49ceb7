"""Dashboard schemas."""

from datetime import date

from pydantic import BaseModel, Field

from app.schemas.appointments import AppointmentResponse


class DashboardStats(BaseModel):
    total_users: int
    total_doctors: int
    total_pharmacies: int
    total_chambers: int
    total_appointments: int
    monthly_revenue: float = Field(..., description="Paid amount of appointments booked this month")


class ChartPoint(BaseModel):
    day: date
    appointments: int
    pharmacies: int


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_appointments: list[AppointmentResponse]
    chart_data: list[ChartPoint]
