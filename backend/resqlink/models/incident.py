"""Incident model: a single citizen-reported emergency event."""

import uuid
from datetime import UTC, datetime
from enum import Enum

from geoalchemy2 import Geography
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Uuid,
    cast,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from resqlink.database import Base


class IncidentCategory(str, Enum):
    MEDICAL = "Medical"
    FIRE = "Fire"
    FLOOD = "Flood"
    TRAFFIC = "Traffic"
    CRIME = "Crime"
    SECURITY = "Security"
    TECHNICAL = "Technical"
    ENVIRONMENTAL = "Environmental"
    HAZARD = "Hazard"
    OTHER = "Other"


class IncidentSeverity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Only these appear on the live map.
ACTIVE_STATUSES = (IncidentStatus.PENDING.value, IncidentStatus.IN_PROGRESS.value)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def geography_point(lng, lat):
    """PostGIS geography point for a (longitude, latitude) pair. Longitude first."""
    return cast(
        func.ST_SetSRID(func.ST_MakePoint(lng, lat), 4326),
        Geography(geometry_type="POINT", srid=4326, spatial_index=False),
    )


class Incident(Base):
    """
    Emergency incident submitted by a citizen.

    Location is stored once as (longitude, latitude); the GeoJSON point and the
    flattened lat/lng view are derived at serialization time. The geography
    used for proximity queries is an indexed expression over the same columns.
    """

    __tablename__ = "incidents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Classification
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IncidentCategory.OTHER.value
    )
    description: Mapped[str | None] = mapped_column(String(1000))
    severity: Mapped[str] = mapped_column(
        String(10), nullable=False, default=IncidentSeverity.MEDIUM.value
    )

    # Location
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(300))  # Human-readable label

    # Workflow
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IncidentStatus.PENDING.value
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    admin_notes: Mapped[str | None] = mapped_column(String(1000))

    # Reporter contact
    reporter_name: Mapped[str] = mapped_column(String(100), nullable=False, default="Anonymous")
    reporter_phone: Mapped[str | None] = mapped_column(String(30))
    reporter_email: Mapped[str | None] = mapped_column(String(255))

    # Lifecycle metrics (minutes since creation)
    response_time_minutes: Mapped[int | None] = mapped_column(Integer)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resolution_time_minutes: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_incidents_longitude"),
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_incidents_latitude"),
    )

    def __repr__(self) -> str:
        return f"<Incident {self.id}: {self.title} ({self.status})>"


# Spatial index over the derived geography (PostgreSQL only)
Index(
    "idx_incidents_location",
    geography_point(Incident.longitude, Incident.latitude),
    postgresql_using="gist",
).ddl_if(dialect="postgresql")
# Feed pagination index
Index("idx_incidents_status_created", Incident.status, Incident.created_at.desc())
Index("idx_incidents_severity_category", Incident.severity, Incident.category)
