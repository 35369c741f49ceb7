"""Dashboard statistics."""

from collections import Counter
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import Table, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.models.base import utctoday
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.pharmacies import pharmacies
from app.models.users import users
from app.schemas.appointments import PaymentStatus
from app.services.appointment_service import AppointmentService

CHART_DAYS = 7
RECENT_APPOINTMENTS = 5


def month_start(today: date) -> datetime:
    return datetime(today.year, today.month, 1, tzinfo=UTC)


class DashboardService:
    """Aggregates the numbers shown on the admin landing page."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def _count(self, table: Table) -> int:
        return (await self.db.execute(select(func.count()).select_from(table))).scalar_one()

    async def _monthly_revenue(self, today: date) -> float:
        """Paid amount of appointments created since the start of the month."""
        total = (
            await self.db.execute(
                select(func.coalesce(func.sum(appointments.c.amount), 0)).where(
                    and_(
                        appointments.c.payment_status == PaymentStatus.PAID.value,
                        appointments.c.created_at >= month_start(today),
                    )
                )
            )
        ).scalar_one()
        return float(total or 0)

    async def _created_per_day(self, table: Table, since: datetime) -> Counter:
        result = await self.db.execute(
            select(table.c.created_at).where(table.c.created_at >= since)
        )
        return Counter(created_at.date() for created_at in result.scalars().all())

    async def chart_data(self, today: date | None = None) -> list[dict[str, Any]]:
        """
        Appointments booked and pharmacies registered per day for the last week.

        Args:
            today: Last day of the chart, defaults to the current date

        Returns:
            One point per day, oldest first, days without activity included
        """
        today = today or utctoday()
        first_day = today - timedelta(days=CHART_DAYS - 1)
        since = datetime(first_day.year, first_day.month, first_day.day, tzinfo=UTC)

        booked = await self._created_per_day(appointments, since)
        registered = await self._created_per_day(pharmacies, since)

        return [
            {
                "day": day,
                "appointments": booked.get(day, 0),
                "pharmacies": registered.get(day, 0),
            }
            for day in (first_day + timedelta(days=offset) for offset in range(CHART_DAYS))
        ]

    async def get_dashboard(self) -> dict[str, Any]:
        today = utctoday()
        stats = {
            "total_users": await self._count(users),
            "total_doctors": await self._count(doctors),
            "total_pharmacies": await self._count(pharmacies),
            "total_chambers": await self._count(chambers),
            "total_appointments": await self._count(appointments),
            "monthly_revenue": await self._monthly_revenue(today),
        }
        recent = await AppointmentService(self.db).recent_appointments(RECENT_APPOINTMENTS)
        return {
            "stats": stats,
            "recent_appointments": recent,
            "chart_data": await self.chart_data(today),
        }
