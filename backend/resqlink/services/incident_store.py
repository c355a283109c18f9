"""Incident Store: persistence and geospatial lookup for incidents."""

import logging
import math
import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import Select, and_, func, or_, select
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from resqlink.errors import BadIdentifierError, NotFoundError, StoreUnavailableError
from resqlink.models import ACTIVE_STATUSES, Incident, geography_point
from resqlink.schemas.incident import IncidentFilters

logger = logging.getLogger(__name__)

# Mean earth radius (IUGG), meters
EARTH_RADIUS_METERS = 6_371_008.8

_UNAVAILABLE = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    TimeoutError,
    ConnectionError,
)


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat: float, lng: float, radius_m: float) -> tuple[float, float, float, float]:
    """
    (min_lat, max_lat, min_lng, max_lng) enclosing a circle on the sphere.

    The longitude span is widened to the full range near the poles and is
    not split at the antimeridian; callers treat the box as a prefilter only.
    """
    d_lat = math.degrees(radius_m / EARTH_RADIUS_METERS)
    min_lat = max(-90.0, lat - d_lat)
    max_lat = min(90.0, lat + d_lat)

    cos_lat = math.cos(math.radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or cos_lat < 1e-9:
        return min_lat, max_lat, -180.0, 180.0

    d_lng = math.degrees(radius_m / (EARTH_RADIUS_METERS * cos_lat))
    if d_lng >= 180.0 or lng - d_lng < -180.0 or lng + d_lng > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, lng - d_lng, lng + d_lng


def parse_incident_id(incident_id: str) -> uuid.UUID:
    """Parse an opaque incident identifier, rejecting malformed syntax."""
    try:
        return uuid.UUID(str(incident_id))
    except (ValueError, AttributeError, TypeError) as e:
        raise BadIdentifierError(str(incident_id)) from e


class IncidentStore:
    """
    Durable storage of incidents over an async SQLAlchemy session.

    PostgreSQL deployments answer proximity queries with PostGIS
    (geography ST_DWithin/ST_Distance over an indexed expression); other
    dialects fall back to a bounding-box prefilter and haversine distance.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        """Translate connectivity failures into StoreUnavailableError."""
        try:
            yield
        except _UNAVAILABLE as e:
            logger.error(f"Incident store unavailable during {operation}: {e}")
            raise StoreUnavailableError() from e

    @property
    def dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    async def save(self, incident: Incident) -> Incident:
        """Persist a new or modified incident and return it with generated fields."""
        async with self._guard("save"):
            self.db.add(incident)
            await self.db.commit()
            await self.db.refresh(incident)
        return incident

    async def get(self, incident_id: str) -> Incident:
        """Load one incident; BadIdentifierError for malformed ids, NotFoundError if absent."""
        key = parse_incident_id(incident_id)
        async with self._guard("get"):
            incident = await self.db.get(Incident, key)
        if incident is None:
            raise NotFoundError(str(incident_id))
        return incident

    def _filtered(self, query: Select, filters: IncidentFilters) -> Select:
        conditions = []
        if filters.status:
            conditions.append(Incident.status == filters.status)
        if filters.severity:
            conditions.append(Incident.severity == filters.severity)
        if filters.category:
            conditions.append(Incident.category == filters.category)
        search = filters.search.strip() if filters.search else None
        if search:
            conditions.append(
                or_(
                    Incident.title.icontains(search, autoescape=True),
                    Incident.address.icontains(search, autoescape=True),
                )
            )
        if conditions:
            query = query.where(and_(*conditions))
        return query

    async def find_many(
        self,
        filters: IncidentFilters,
        page: int,
        limit: int,
    ) -> tuple[list[Incident], int]:
        """Return one newest-first page of incidents and the total match count."""
        query = self._filtered(select(Incident), filters).order_by(
            Incident.created_at.desc(),
            Incident.id.desc(),
        )
        query = query.offset((page - 1) * limit).limit(limit)
        count_query = self._filtered(select(func.count(Incident.id)), filters)

        async with self._guard("find_many"):
            result = await self.db.execute(query)
            incidents = list(result.scalars().all())
            total = (await self.db.execute(count_query)).scalar() or 0

        return incidents, total

    async def find_near(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        statuses: Sequence[str] = ACTIVE_STATUSES,
        limit: int = 100,
    ) -> list[tuple[Incident, float]]:
        """Incidents within radius_m of (lat, lng), nearest first, with distances in meters."""
        async with self._guard("find_near"):
            if self.dialect_name == "postgresql":
                return await self._find_near_postgis(lat, lng, radius_m, statuses, limit)
            return await self._find_near_portable(lat, lng, radius_m, statuses, limit)

    def near_query(
        self,
        lat: float,
        lng: float,
        radius_m: float,
        statuses: Sequence[str],
        limit: int,
    ) -> Select:
        """PostGIS proximity statement (geography, meters)."""
        location = geography_point(Incident.longitude, Incident.latitude)
        center = geography_point(lng, lat)
        distance = func.ST_Distance(location, center).label("distance")
        return (
            select(Incident, distance)
            .where(Incident.status.in_(list(statuses)))
            .where(func.ST_DWithin(location, center, radius_m))
            .order_by(distance.asc(), Incident.created_at.desc())
            .limit(limit)
        )

    async def _find_near_postgis(self, lat, lng, radius_m, statuses, limit):
        result = await self.db.execute(self.near_query(lat, lng, radius_m, statuses, limit))
        return [(row[0], float(row[1])) for row in result.all()]

    async def _find_near_portable(self, lat, lng, radius_m, statuses, limit):
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_m)
        query = (
            select(Incident)
            .where(Incident.status.in_(list(statuses)))
            .where(Incident.latitude.between(min_lat, max_lat))
            .where(Incident.longitude.between(min_lng, max_lng))
        )
        result = await self.db.execute(query)

        matches = []
        for incident in result.scalars().all():
            distance = haversine_meters(lat, lng, incident.latitude, incident.longitude)
            if distance <= radius_m:
                matches.append((incident, distance))

        matches.sort(key=lambda item: item[1])
        return matches[:limit]

    async def delete(self, incident: Incident) -> None:
        async with self._guard("delete"):
            await self.db.delete(incident)
            await self.db.commit()

    async def _counts_by(self, column) -> dict[str, int]:
        result = await self.db.execute(
            select(column, func.count(Incident.id)).group_by(column)
        )
        return {key: count for key, count in result.all()}

    async def stats(self) -> dict[str, Any]:
        """Aggregate counts and average lifecycle times."""
        async with self._guard("stats"):
            by_status = await self._counts_by(Incident.status)
            by_severity = await self._counts_by(Incident.severity)
            by_category = await self._counts_by(Incident.category)
            averages = await self.db.execute(
                select(
                    func.avg(Incident.response_time_minutes),
                    func.avg(Incident.resolution_time_minutes),
                )
            )
            avg_response, avg_resolution = averages.one()

        return {
            "total": sum(by_status.values()),
            "active": sum(by_status.get(status, 0) for status in ACTIVE_STATUSES),
            "by_status": by_status,
            "by_severity": by_severity,
            "by_category": by_category,
            "avg_response_time": float(avg_response) if avg_response is not None else None,
            "avg_resolution_time": float(avg_resolution) if avg_resolution is not None else None,
        }
