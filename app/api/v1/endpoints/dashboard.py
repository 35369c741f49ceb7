"""Dashboard endpoints."""

from fastapi import APIRouter, status

from app.dependencies import CurrentAdmin, DatabaseSession
from app.schemas.dashboard import DashboardResponse
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get(
    "/stats",
    response_model=DashboardResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard statistics",
)
async def get_dashboard_stats(
    _: CurrentAdmin,
    db: DatabaseSession,
) -> DashboardResponse:
    """
    Totals, this month's paid revenue, latest bookings and a 7-day activity chart.

    Returns:
        Dashboard payload
    """
    return DashboardResponse(**await DashboardService(db).get_dashboard())
