"""Database models."""

from resqlink.models.incident import (
    ACTIVE_STATUSES,
    Incident,
    IncidentCategory,
    IncidentSeverity,
    IncidentStatus,
    geography_point,
)

__all__ = [
    "ACTIVE_STATUSES",
    "Incident",
    "IncidentCategory",
    "IncidentSeverity",
    "IncidentStatus",
    "geography_point",
]
