"""Tests for patient and medical record listings."""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointments import appointments
from app.models.medical_records import medical_records
from conftest import create_patient


async def add_record(db: AsyncSession, chamber: dict, patient: dict, slot: int, diagnosis: str):
    result = await db.execute(
        insert(appointments)
        .values(
            patient_id=patient["id"],
            chamber_id=chamber["id"],
            doctor_id=chamber["doctor_id"],
            pharmacy_id=chamber["pharmacy_id"],
            appointment_date=date(2030, 1, 7),
            slot_number=slot,
            status="COMPLETED",
            amount=chamber["fees"],
        )
        .returning(appointments.c.id)
    )
    appointment_id = result.scalar_one()
    await db.execute(
        insert(medical_records).values(
            appointment_id=appointment_id,
            diagnosis=diagnosis,
            prescription="Rest",
            attachments=["https://res.cloudinary.com/demo/report.pdf"],
        )
    )
    await db.commit()
    return appointment_id


@pytest.mark.asyncio
async def test_list_patients(
    client: AsyncClient,
    manager_headers: dict,
    db_session: AsyncSession,
) -> None:
    """Test patients are ordered by name and searchable."""
    await create_patient(db_session, name="Meera Pal")
    await create_patient(db_session, name="Arjun Das")

    response = await client.get("/api/v1/admin/patients", headers=manager_headers)
    assert response.status_code == 200
    data = response.json()
    assert [p["name"] for p in data["patients"]] == ["Arjun Das", "Meera Pal"]
    assert data["pagination"]["limit"] == 50
    assert data["patients"][0]["user"] is None

    response = await client.get(
        "/api/v1/admin/patients", headers=manager_headers, params={"search": "meera"}
    )
    assert [p["name"] for p in response.json()["patients"]] == ["Meera Pal"]


@pytest.mark.asyncio
async def test_list_medical_records(
    client: AsyncClient,
    manager_headers: dict,
    chamber: dict,
    patient: dict,
    db_session: AsyncSession,
) -> None:
    """Test records carry their appointment, patient and chamber parties."""
    other = await create_patient(db_session, name="Meera Pal")
    await add_record(db_session, chamber, patient, 1, "Hypertension")
    await add_record(db_session, chamber, other, 2, "Migraine")

    response = await client.get("/api/v1/admin/medical-records", headers=manager_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["pagination"]["total"] == 2

    response = await client.get(
        "/api/v1/admin/medical-records",
        headers=manager_headers,
        params={"patient_id": str(patient["id"])},
    )
    records = response.json()["records"]
    assert len(records) == 1
    record = records[0]
    assert record["diagnosis"] == "Hypertension"
    assert record["attachments"] == ["https://res.cloudinary.com/demo/report.pdf"]
    assert record["appointment"]["patient"]["name"] == "Rahul Sen"
    assert record["appointment"]["chamber"]["doctor"]["name"] == "Dr. Asha Roy"
    assert record["appointment"]["chamber"]["pharmacy"]["name"] == "City Care Pharmacy"


@pytest.mark.asyncio
async def test_patients_require_session(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/patients")
    assert response.status_code == 401
