"""API routers package initialization."""

from smartwaste.api.routes import router as routes_router
from smartwaste.api.driver_routes import router as driver_routes_router
from smartwaste.api.bins import router as bins_router
from smartwaste.api.drivers import router as drivers_router
from smartwaste.api.iot import router as iot_router

__all__ = [
    "routes_router",
    "driver_routes_router",
    "bins_router",
    "drivers_router",
    "iot_router",
]
