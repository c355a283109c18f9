"""Pydantic schemas for API request/response validation."""

from resqlink.schemas.incident import (
    Center,
    DashboardStats,
    Deleted,
    GeoPoint,
    IncidentCreate,
    IncidentCreated,
    IncidentEnvelope,
    IncidentFilters,
    IncidentOut,
    IncidentsPage,
    LiveIncidents,
    NearbyIncidentOut,
    Pagination,
    Reporter,
    StatusUpdate,
    StatusUpdated,
)

__all__ = [
    "Center",
    "DashboardStats",
    "Deleted",
    "GeoPoint",
    "IncidentCreate",
    "IncidentCreated",
    "IncidentEnvelope",
    "IncidentFilters",
    "IncidentOut",
    "IncidentsPage",
    "LiveIncidents",
    "NearbyIncidentOut",
    "Pagination",
    "Reporter",
    "StatusUpdate",
    "StatusUpdated",
]
