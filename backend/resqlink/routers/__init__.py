"""API routers."""

from resqlink.routers.dashboard import router as dashboard_router
from resqlink.routers.health import router as health_router
from resqlink.routers.map import router as map_router
from resqlink.routers.reports import router as reports_router

__all__ = ["dashboard_router", "health_router", "map_router", "reports_router"]
