"""Database models."""

from app.models.admins import admins
from app.models.appointments import appointments
from app.models.base import metadata
from app.models.chambers import chambers
from app.models.doctors import doctors
from app.models.medical_records import medical_records
from app.models.patients import patients
from app.models.pharmacies import pharmacies
from app.models.users import users

__all__ = [
    "admins",
    "appointments",
    "chambers",
    "doctors",
    "medical_records",
    "metadata",
    "patients",
    "pharmacies",
    "users",
]
