"""Services for incident storage and business logic."""

from resqlink.services.geocoding import NominatimGeocoder, get_geocoder
from resqlink.services.incident_service import IncidentService
from resqlink.services.incident_store import IncidentStore

__all__ = ["IncidentService", "IncidentStore", "NominatimGeocoder", "get_geocoder"]
