"""Dashboard aggregate endpoint."""

from fastapi import APIRouter

from resqlink.dependencies import IncidentServiceDep
from resqlink.schemas import DashboardStats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(service: IncidentServiceDep) -> DashboardStats:
    """Totals, active count, breakdowns and average response/resolution minutes."""
    return DashboardStats(**await service.stats())
