"""Services package initialization."""

from smartwaste.services.geo import haversine_meters, path_length_km
from smartwaste.services.route_planning import (
    BinPoint,
    DriverStart,
    RoutePlan,
    plan_routes,
    order_stops_by_nearest_neighbor,
)
from smartwaste.services.auto_route_service import generate_routes, GenerateRoutesResult
from smartwaste.services.route_status_service import (
    update_route_status,
    start_collecting_for_date,
    start_route,
    collect_bin,
    CollectResult,
    CollectOutcome,
)
from smartwaste.services.bin_lock_guard import ingest_fill_reading, is_bin_locked, IngestResult
from smartwaste.services.route_query_service import list_routes, get_route, get_today_route_for_driver

__all__ = [
    "haversine_meters",
    "path_length_km",
    "BinPoint",
    "DriverStart",
    "RoutePlan",
    "plan_routes",
    "order_stops_by_nearest_neighbor",
    "generate_routes",
    "GenerateRoutesResult",
    "update_route_status",
    "start_collecting_for_date",
    "start_route",
    "collect_bin",
    "CollectResult",
    "CollectOutcome",
    "ingest_fill_reading",
    "is_bin_locked",
    "IngestResult",
    "list_routes",
    "get_route",
    "get_today_route_for_driver",
]
