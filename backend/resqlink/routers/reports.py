"""API routes for incident reports: ingestion, feed, lookup, status, deletion."""

import logging

from fastapi import APIRouter, Query

from resqlink.dependencies import IncidentServiceDep
from resqlink.schemas import (
    Deleted,
    IncidentCreate,
    IncidentCreated,
    IncidentEnvelope,
    IncidentFilters,
    IncidentOut,
    IncidentsPage,
    Pagination,
    StatusUpdate,
    StatusUpdated,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=IncidentCreated, status_code=201)
async def create_report(
    payload: IncidentCreate,
    service: IncidentServiceDep,
) -> IncidentCreated:
    """
    Submit a new incident report.

    `lat` and `lng` are required (numeric strings accepted). The stored
    GeoJSON point is `[lng, lat]`. Missing address text is filled by reverse
    geocoding, or the raw coordinates when the geocoder is unavailable.
    """
    incident = await service.create(payload)
    return IncidentCreated(incident_id=incident.id, data=IncidentOut.from_model(incident))


@router.get("", response_model=IncidentsPage)
async def list_reports(
    service: IncidentServiceDep,
    page: int = Query(1, description="Page number (values below 1 are treated as 1)"),
    limit: int | None = Query(None, description="Page size (clamped to 1..100)"),
    status: str | None = Query(None, description="Filter by status ('all' for any)"),
    severity: str | None = Query(None, description="Filter by severity"),
    category: str | None = Query(None, description="Filter by category"),
    search: str | None = Query(None, description="Case-insensitive match on title or address"),
) -> IncidentsPage:
    """Paginated incident feed, newest first."""
    filters = IncidentFilters(
        status=status,
        severity=severity,
        category=category,
        search=search,
    )
    result = await service.feed(filters, page=page, limit=limit)

    return IncidentsPage(
        incidents=[IncidentOut.from_model(incident) for incident in result.incidents],
        pagination=Pagination(
            page=result.page,
            limit=result.limit,
            total=result.total,
            pages=result.pages,
        ),
    )


@router.get("/{incident_id}", response_model=IncidentEnvelope)
async def get_report(incident_id: str, service: IncidentServiceDep) -> IncidentEnvelope:
    """Get a specific incident by ID."""
    incident = await service.get(incident_id)
    return IncidentEnvelope(data=IncidentOut.from_model(incident))


@router.patch("/{incident_id}/status", response_model=StatusUpdated)
async def update_report_status(
    incident_id: str,
    update: StatusUpdate,
    service: IncidentServiceDep,
) -> StatusUpdated:
    """Move an incident to another lifecycle state, optionally with operator notes."""
    incident = await service.update_status(incident_id, update.status, update.notes)
    return StatusUpdated(data=IncidentOut.from_model(incident))


@router.delete("/{incident_id}", response_model=Deleted)
async def delete_report(incident_id: str, service: IncidentServiceDep) -> Deleted:
    """Administrative removal of an incident."""
    await service.delete(incident_id)
    return Deleted()
