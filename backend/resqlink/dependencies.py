"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from resqlink.database import get_db
from resqlink.services.geocoding import ReverseGeocoder, get_geocoder
from resqlink.services.incident_service import IncidentService


def get_incident_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    geocoder: Annotated[ReverseGeocoder | None, Depends(get_geocoder)],
) -> IncidentService:
    return IncidentService(db, geocoder=geocoder)


IncidentServiceDep = Annotated[IncidentService, Depends(get_incident_service)]
