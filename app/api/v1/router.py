"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    appointments,
    auth,
    chambers,
    dashboard,
    doctors,
    health,
    patients,
    pharmacies,
    upload,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(upload.router, tags=["Upload"])

# Admin surface
api_router.include_router(auth.router, prefix="/admin/auth", tags=["Authentication"])
api_router.include_router(dashboard.router, prefix="/admin/dashboard", tags=["Dashboard"])
api_router.include_router(users.router, prefix="/admin/users", tags=["Users"])
api_router.include_router(patients.router, prefix="/admin", tags=["Patients"])
api_router.include_router(doctors.router, prefix="/admin/doctors", tags=["Doctors"])
api_router.include_router(pharmacies.router, prefix="/admin/pharmacies", tags=["Pharmacies"])
api_router.include_router(chambers.router, prefix="/admin/chambers", tags=["Chambers"])
api_router.include_router(
    appointments.router, prefix="/admin/appointments", tags=["Appointments"]
)
