"""
Read-only route projections for dispatch screens and driver devices.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smartwaste.core.errors import NotFoundError
from smartwaste.models import CollectionRoute, Driver, RouteStop
from smartwaste.schemas.route import RouteResponse, RouteStopInfo, TodayRouteResponse
from smartwaste.services.geo import path_length_km


def _routes_query():
    return (
        select(CollectionRoute)
        .options(selectinload(CollectionRoute.stops).selectinload(RouteStop.bin))
        .execution_options(populate_existing=True)
    )


def build_route_response(route: CollectionRoute) -> RouteResponse:
    """Project a route with loaded stops into its API shape."""
    ordered = sorted(route.stops, key=lambda s: s.stop_order)
    stops = [
        RouteStopInfo(
            bin_id=stop.bin_id,
            stop_order=stop.stop_order,
            latitude=stop.bin.latitude,
            longitude=stop.bin.longitude,
            fill_level=stop.bin.fill_level,
            overflow=stop.bin.overflow,
        )
        for stop in ordered
        if stop.bin is not None
    ]

    return RouteResponse(
        id=route.id,
        driver_id=route.driver_id,
        route_date=route.route_date,
        status=route.status.value,
        bin_ids=[stop.bin_id for stop in ordered],
        distance_km=path_length_km((s.latitude, s.longitude) for s in stops),
        created_at=route.created_at,
        stops=stops,
    )


async def list_routes(
    db: AsyncSession,
    route_date: Optional[date] = None,
) -> List[RouteResponse]:
    """All routes, newest first, optionally limited to one date."""
    query = _routes_query().order_by(CollectionRoute.id.desc())
    if route_date is not None:
        query = query.where(CollectionRoute.route_date == route_date)

    result = await db.execute(query)
    return [build_route_response(route) for route in result.scalars().all()]


async def get_route(db: AsyncSession, route_id: int) -> RouteResponse:
    """
    Raises:
        NotFoundError: unknown route
    """
    result = await db.execute(_routes_query().where(CollectionRoute.id == route_id))
    route = result.scalar_one_or_none()
    if route is None:
        raise NotFoundError("Route", route_id)
    return build_route_response(route)


async def get_today_route_for_driver(
    db: AsyncSession,
    driver_id: int,
    target_date: date,
) -> TodayRouteResponse:
    """
    Latest route of a driver for the given date.

    Raises:
        NotFoundError: unknown driver
    """
    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise NotFoundError("Driver", driver_id)

    result = await db.execute(
        _routes_query()
        .where(
            CollectionRoute.driver_id == driver_id,
            CollectionRoute.route_date == target_date,
        )
        .order_by(CollectionRoute.id.desc())
        .limit(1)
    )
    route = result.scalar_one_or_none()
    if route is None:
        return TodayRouteResponse(message=f"No route assigned for {target_date}")

    return TodayRouteResponse(
        message=f"Route {route.id} assigned for {target_date}",
        route=build_route_response(route),
    )
