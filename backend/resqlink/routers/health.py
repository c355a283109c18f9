"""Health and probe endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from resqlink import __version__
from resqlink.database import get_db, ping_db

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """
    Liveness probe with store connectivity.

    Always answers 200 so clients can tell "API up, store down" apart from
    "API down".
    """
    connected = await ping_db(db)
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(UTC),
        database="connected" if connected else "disconnected",
        version=__version__,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness probe for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness probe for container orchestration."""
    return {"status": "alive"}
