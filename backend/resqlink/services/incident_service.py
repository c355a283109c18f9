"""Incident Service: ingestion, feed, proximity, and status transitions."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from resqlink.config import get_settings
from resqlink.errors import GeocodingError, ValidationError
from resqlink.models import ACTIVE_STATUSES, Incident, IncidentStatus
from resqlink.schemas.incident import IncidentCreate, IncidentFilters
from resqlink.services.geocoding import ReverseGeocoder, coordinate_label
from resqlink.services.incident_store import IncidentStore

logger = logging.getLogger(__name__)
settings = get_settings()

VALID_STATUSES = [status.value for status in IncidentStatus]

# Deepest offset the feed will skip to; keeps OFFSET within the database integer range
MAX_FEED_OFFSET = 10_000_000


@dataclass
class FeedPage:
    incidents: list[Incident]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


def _parse_coordinate(value: Any, field: str) -> float:
    if value is None or value == "":
        raise ValidationError(field, f"{field} is required")
    try:
        parsed = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(field, f"{field} must be a number") from e
    if not math.isfinite(parsed):
        raise ValidationError(field, f"{field} must be a finite number")
    return parsed


def validate_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    """
    Parse and range-check a latitude/longitude pair.

    Numeric strings are accepted. Raises ValidationError naming the
    offending field. Returns (lat, lng).
    """
    latitude = _parse_coordinate(lat, "lat")
    longitude = _parse_coordinate(lng, "lng")
    if not -90 <= latitude <= 90:
        raise ValidationError("lat", "Invalid latitude. Must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise ValidationError("lng", "Invalid longitude. Must be between -180 and 180")
    return latitude, longitude


def clamp_page(page: int | None, limit: int | None) -> tuple[int, int]:
    """
    Clamp feed pagination: page >= 1 and 1 <= limit <= feed_max_limit.

    A page whose offset exceeds MAX_FEED_OFFSET is rejected rather than clamped.
    """
    page = max(page or 1, 1)
    if limit is None:
        limit = settings.feed_default_limit
    limit = min(max(limit, 1), settings.feed_max_limit)
    if (page - 1) * limit > MAX_FEED_OFFSET:
        raise ValidationError(
            "page", f"page is too large (at most {MAX_FEED_OFFSET:,} records can be skipped)"
        )
    return page, limit


def _minutes_between(start: datetime, end: datetime) -> int:
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    return round((end - start).total_seconds() / 60)


class IncidentService:
    """
    Domain operations over the Incident Store.

    Every caller (HTTP routes, the CSV import script) goes through here so
    coordinate validation and lifecycle bookkeeping happen in one place.
    """

    def __init__(self, db: AsyncSession, geocoder: ReverseGeocoder | None = None):
        self.store = IncidentStore(db)
        self.geocoder = geocoder

    async def _resolve_address(self, lat: float, lng: float) -> str:
        """Best-effort reverse geocoding with a deterministic fallback."""
        if self.geocoder is not None:
            try:
                address = await self.geocoder.reverse(lat, lng)
                if address:
                    return address
            except GeocodingError as e:
                logger.warning(f"Reverse geocoding failed for ({lat}, {lng}): {e}")
        return coordinate_label(lat, lng)

    async def create(self, payload: IncidentCreate) -> Incident:
        """
        Validate and store a citizen report.

        The record always starts pending and unverified. Identical
        submissions produce distinct incidents.
        """
        lat, lng = validate_coordinates(payload.lat, payload.lng)
        address = payload.location or await self._resolve_address(lat, lng)

        incident = Incident(
            title=payload.title,
            category=payload.category.value,
            description=payload.description,
            severity=payload.severity.value,
            longitude=lng,
            latitude=lat,
            address=address,
            status=IncidentStatus.PENDING.value,
            verified=False,
            reporter_name=payload.reporter_name or "Anonymous",
            reporter_phone=payload.reporter_phone,
            reporter_email=payload.reporter_email,
        )
        incident = await self.store.save(incident)

        logger.info(
            f"Incident {incident.id} created: {incident.title!r} "
            f"[{incident.severity}] at ({lat}, {lng})"
        )
        return incident

    async def get(self, incident_id: str) -> Incident:
        return await self.store.get(incident_id)

    async def feed(
        self,
        filters: IncidentFilters,
        page: int | None = 1,
        limit: int | None = None,
    ) -> FeedPage:
        """Filtered, newest-first, offset-paginated feed."""
        page, limit = clamp_page(page, limit)
        if filters.status == "all":
            filters = filters.model_copy(update={"status": None})

        incidents, total = await self.store.find_many(filters, page, limit)
        return FeedPage(incidents=incidents, page=page, limit=limit, total=total)

    async def nearby(
        self,
        lat: Any,
        lng: Any,
        radius: Any = None,
    ) -> list[tuple[Incident, float]]:
        """Active incidents around a point, nearest first, capped for map rendering."""
        latitude, longitude = validate_coordinates(lat, lng)
        radius_m = self.parse_radius(radius)
        return await self.store.find_near(
            latitude,
            longitude,
            radius_m,
            statuses=ACTIVE_STATUSES,
            limit=settings.live_max_results,
        )

    @staticmethod
    def parse_radius(radius: Any) -> int:
        if radius is None or radius == "":
            return settings.live_default_radius_meters
        try:
            radius_f = float(radius)
        except (TypeError, ValueError) as e:
            raise ValidationError("radius", "radius must be a number of meters") from e
        if not math.isfinite(radius_f):
            raise ValidationError("radius", "radius must be a finite number of meters")
        radius_m = int(radius_f)
        if radius_m <= 0:
            raise ValidationError("radius", "radius must be greater than 0")
        return radius_m

    async def update_status(
        self,
        incident_id: str,
        status: str,
        notes: str | None = None,
    ) -> Incident:
        """
        Move an incident to any lifecycle state.

        Transitions are not restricted to forward moves; reopening a closed
        incident is allowed and logged.
        """
        if status not in VALID_STATUSES:
            raise ValidationError(
                "status",
                f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}",
                allowed=VALID_STATUSES,
            )

        incident = await self.store.get(incident_id)
        previous = incident.status
        now = datetime.now(UTC)

        if previous == IncidentStatus.CLOSED.value and status != previous:
            logger.warning(f"Reopening closed incident {incident.id}: {previous} -> {status}")

        incident.status = status
        if notes:
            incident.admin_notes = notes

        if status == IncidentStatus.IN_PROGRESS.value and incident.response_time_minutes is None:
            incident.response_time_minutes = _minutes_between(incident.created_at, now)
        if status == IncidentStatus.RESOLVED.value and incident.resolved_at is None:
            incident.resolved_at = now
            incident.resolution_time_minutes = _minutes_between(incident.created_at, now)

        # Explicit bump so a same-status write still counts as a mutation
        incident.updated_at = now
        incident = await self.store.save(incident)

        logger.info(f"Incident {incident.id} status updated: {previous} -> {status}")
        return incident

    async def delete(self, incident_id: str) -> None:
        """Administrative hard delete."""
        incident = await self.store.get(incident_id)
        await self.store.delete(incident)
        logger.info(f"Incident {incident_id} deleted")

    async def stats(self) -> dict[str, Any]:
        return await self.store.stats()
