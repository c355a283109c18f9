"""Reverse geocoding client for OpenStreetMap Nominatim with retry logic."""

import asyncio
import logging
from typing import Any, Protocol

import httpx

from resqlink.config import get_settings
from resqlink.errors import GeocodingError

logger = logging.getLogger(__name__)
settings = get_settings()


class ReverseGeocoder(Protocol):
    """Anything that turns a coordinate pair into a human-readable label."""

    async def reverse(self, lat: float, lng: float) -> str | None: ...


def coordinate_label(lat: float, lng: float) -> str:
    """Deterministic fallback label used when no address is available."""
    return f"{lat}, {lng}"


def format_address(payload: dict[str, Any]) -> str | None:
    """Build a short label (street, city, state, country) from a Nominatim reply."""
    address = payload.get("address") or {}
    parts = [
        address.get("road") or address.get("suburb") or address.get("neighbourhood"),
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("county"),
        address.get("state"),
        address.get("country"),
    ]
    label = ", ".join(part for part in parts if part)
    return label or payload.get("display_name") or None


class NominatimGeocoder:
    """
    Client for the Nominatim reverse geocoding endpoint.

    Features:
    - Bounded timeout on every request
    - Exponential backoff retry on rate limiting, 5xx and network errors
    - User-Agent header (required by the Nominatim usage policy)
    """

    def __init__(
        self,
        base_url: str = settings.geocoding_base_url,
        user_agent: str = settings.geocoding_user_agent,
        max_retries: int = settings.geocoding_max_retries,
        timeout: float = settings.geocoding_timeout_seconds,
        backoff_seconds: float = 0.5,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.timeout = timeout
        self.backoff_seconds = backoff_seconds

        self.headers: dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make HTTP request with exponential backoff retry."""
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=self.headers, params=params)
                    response.raise_for_status()
                    return response.json()

            except httpx.HTTPStatusError as e:
                last_error = e
                status = e.response.status_code
                if status != 429 and status < 500:
                    raise GeocodingError(f"HTTP error: {e}") from e
                logger.warning(f"Geocoding HTTP {status}, attempt {attempt + 1}")

            except httpx.RequestError as e:
                last_error = e
                logger.warning(f"Geocoding request error: {e}, attempt {attempt + 1}")

            except ValueError as e:
                raise GeocodingError(f"Invalid JSON from geocoder: {e}") from e

            if attempt < self.max_retries:
                await asyncio.sleep(self.backoff_seconds * 2**attempt)

        raise GeocodingError(f"Failed after {self.max_retries + 1} attempts: {last_error}")

    async def reverse(self, lat: float, lng: float) -> str | None:
        """
        Resolve a coordinate pair to an address label.

        Returns None when the provider knows nothing about the location;
        raises GeocodingError when the provider cannot be used.
        """
        payload = await self._request_with_retry(
            f"{self.base_url}/reverse",
            params={
                "format": "json",
                "lat": lat,
                "lon": lng,
                "zoom": 18,
                "addressdetails": 1,
            },
        )
        if not isinstance(payload, dict):
            raise GeocodingError(f"Unexpected geocoder reply: {type(payload).__name__}")
        if "error" in payload:
            logger.info(f"Geocoder has no address for ({lat}, {lng}): {payload['error']}")
            return None
        return format_address(payload)


def get_geocoder() -> ReverseGeocoder | None:
    """Dependency providing the configured geocoder (None when disabled)."""
    if not settings.geocoding_enabled:
        return None
    return NominatimGeocoder()
