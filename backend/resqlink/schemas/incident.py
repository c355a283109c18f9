"""Pydantic schemas for incidents."""

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from resqlink.models import Incident, IncidentCategory, IncidentSeverity


class CamelModel(BaseModel):
    """Base schema emitting camelCase JSON while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IncidentCreate(CamelModel):
    """Citizen-submitted incident report."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=5, max_length=200)
    category: IncidentCategory = IncidentCategory.OTHER
    description: str | None = Field(None, max_length=1000)
    severity: IncidentSeverity = IncidentSeverity.MEDIUM

    # Human-readable location text; coordinates are authoritative
    location: str | None = Field(None, max_length=300)
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    reporter_name: str | None = Field(None, max_length=100)
    reporter_phone: str | None = Field(None, max_length=30)
    reporter_email: str | None = Field(None, max_length=255)

    @field_validator("description", "location", "reporter_name", "reporter_phone", "reporter_email")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None


class StatusUpdate(CamelModel):
    """Operator status transition. Status is checked by the service."""

    status: str
    notes: str | None = Field(None, max_length=1000)


class IncidentFilters(BaseModel):
    """Feed filters, AND-combined."""

    status: str | None = None
    severity: str | None = None
    category: str | None = None
    search: str | None = None


class GeoPoint(CamelModel):
    """GeoJSON point, coordinates ordered [longitude, latitude]."""

    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float]
    address: str | None = None


class Reporter(CamelModel):
    name: str = "Anonymous"
    phone: str | None = None
    email: str | None = None


class IncidentOut(CamelModel):
    """Incident response schema."""

    id: UUID
    title: str
    category: str
    description: str | None = None
    severity: str
    location: GeoPoint
    status: str
    reporter: Reporter
    verified: bool = False
    admin_notes: str | None = None

    response_time: int | None = None
    resolution_time: int | None = None
    resolved_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def lat(self) -> float:
        return self.location.coordinates[1]

    @computed_field
    @property
    def lng(self) -> float:
        return self.location.coordinates[0]

    @field_validator("created_at", "updated_at", "resolved_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @classmethod
    def from_model(cls, incident: Incident, **extra) -> "IncidentOut":
        return cls(
            id=incident.id,
            title=incident.title,
            category=incident.category,
            description=incident.description,
            severity=incident.severity,
            location=GeoPoint(
                coordinates=(incident.longitude, incident.latitude),
                address=incident.address,
            ),
            status=incident.status,
            reporter=Reporter(
                name=incident.reporter_name or "Anonymous",
                phone=incident.reporter_phone,
                email=incident.reporter_email,
            ),
            verified=incident.verified,
            admin_notes=incident.admin_notes,
            response_time=incident.response_time_minutes,
            resolution_time=incident.resolution_time_minutes,
            resolved_at=incident.resolved_at,
            created_at=incident.created_at,
            updated_at=incident.updated_at,
            **extra,
        )


class NearbyIncidentOut(IncidentOut):
    """Live map entry with its distance from the query center."""

    distance: float  # meters


class IncidentCreated(CamelModel):
    success: bool = True
    message: str = "Incident reported successfully"
    incident_id: UUID
    data: IncidentOut


class IncidentEnvelope(CamelModel):
    success: bool = True
    data: IncidentOut


class StatusUpdated(CamelModel):
    success: bool = True
    message: str = "Status updated successfully"
    data: IncidentOut


class Deleted(CamelModel):
    success: bool = True
    message: str = "Incident deleted successfully"


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class IncidentsPage(CamelModel):
    """Paginated feed response."""

    success: bool = True
    incidents: list[IncidentOut]
    pagination: Pagination


class Center(CamelModel):
    lat: float
    lng: float


class LiveIncidents(CamelModel):
    """Proximity query response for the live map."""

    success: bool = True
    count: int
    radius: int
    center: Center
    incidents: list[NearbyIncidentOut]


class DashboardStats(CamelModel):
    """Aggregate counts for the operator dashboard."""

    total: int
    active: int
    by_status: dict[str, int]
    by_severity: dict[str, int]
    by_category: dict[str, int]
    avg_response_time: float | None = None
    avg_resolution_time: float | None = None
