"""API routes for the live incident map."""

from fastapi import APIRouter, Query

from resqlink.dependencies import IncidentServiceDep
from resqlink.schemas import Center, LiveIncidents, NearbyIncidentOut

router = APIRouter(prefix="/map", tags=["map"])


@router.get("/live", response_model=LiveIncidents)
async def live_incidents(
    service: IncidentServiceDep,
    lat: str | None = Query(None, description="Center latitude (required)"),
    lng: str | None = Query(None, description="Center longitude (required)"),
    radius: str | None = Query(None, description="Radius in meters (default 50000)"),
) -> LiveIncidents:
    """
    Active (pending / in-progress) incidents near a point, nearest first.

    Capped at 100 results. Each entry carries both the GeoJSON location and
    flattened `lat`/`lng`, plus its `distance` in meters.
    """
    matches = await service.nearby(lat, lng, radius)

    incidents = [
        NearbyIncidentOut.from_model(incident, distance=round(distance, 2))
        for incident, distance in matches
    ]
    return LiveIncidents(
        count=len(incidents),
        radius=service.parse_radius(radius),
        center=Center(lat=float(lat), lng=float(lng)),
        incidents=incidents,
    )
