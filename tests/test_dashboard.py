"""Tests for the dashboard endpoint."""

from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.services.dashboard_service import DashboardService


async def add_appointment(db: AsyncSession, chamber: dict, patient: dict, slot: int, **values):
    await db.execute(
        insert(appointments).values(
            patient_id=patient["id"],
            chamber_id=chamber["id"],
            doctor_id=chamber["doctor_id"],
            pharmacy_id=chamber["pharmacy_id"],
            appointment_date=datetime(2030, 1, 7).date(),
            slot_number=slot,
            amount=chamber["fees"],
            **values,
        )
    )
    await db.commit()


@pytest.mark.asyncio
async def test_dashboard_stats(
    client: AsyncClient,
    manager_headers: dict,
    chamber: dict,
    patient: dict,
    db_session: AsyncSession,
) -> None:
    """Test totals, monthly revenue and recent bookings."""
    await add_appointment(db_session, chamber, patient, 1, payment_status="PAID")
    await add_appointment(db_session, chamber, patient, 2)

    response = await client.get("/api/v1/admin/dashboard/stats", headers=manager_headers)
    assert response.status_code == 200
    data = response.json()

    stats = data["stats"]
    assert stats["total_doctors"] == 1
    assert stats["total_pharmacies"] == 1
    assert stats["total_chambers"] == 1
    assert stats["total_appointments"] == 2
    assert stats["total_users"] >= 2
    assert stats["monthly_revenue"] == 500.0

    assert len(data["recent_appointments"]) == 2
    assert data["recent_appointments"][0]["patient"]["name"] == "Rahul Sen"

    chart = data["chart_data"]
    assert len(chart) == 7
    assert chart[-1]["day"] == datetime.now(UTC).date().isoformat()
    assert chart[-1]["appointments"] == 2
    assert chart[-1]["pharmacies"] == 1
    assert sum(point["appointments"] for point in chart) == 2


@pytest.mark.asyncio
async def test_dashboard_recent_appointments_limit(
    client: AsyncClient,
    manager_headers: dict,
    chamber: dict,
    patient: dict,
    db_session: AsyncSession,
) -> None:
    for slot in range(1, 8):
        await add_appointment(db_session, chamber, patient, slot)

    response = await client.get("/api/v1/admin/dashboard/stats", headers=manager_headers)
    assert len(response.json()["recent_appointments"]) == 5


@pytest.mark.asyncio
async def test_chart_data_fills_empty_days(db_session: AsyncSession) -> None:
    """Test that days without activity still appear in the chart."""
    today = datetime.now(UTC).date()

    chart = await DashboardService(db_session).chart_data(today)

    assert [point["day"] for point in chart] == [
        today - timedelta(days=offset) for offset in range(6, -1, -1)
    ]
    assert all(point["appointments"] == 0 for point in chart)
    assert all(point["pharmacies"] == 0 for point in chart)


@pytest.mark.asyncio
async def test_dashboard_requires_session(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/dashboard/stats")
    assert response.status_code == 401
