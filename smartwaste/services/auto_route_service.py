"""
Automatic route generation.
Replaces the route set of a date with freshly planned routes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smartwaste.config import get_settings
from smartwaste.core.locks import atomic, lock_route_date
from smartwaste.models import Bin, Driver, CollectionRoute, RouteStop, RouteStatus, ACTIVE_STATUSES
from smartwaste.services.route_planning import (
    BinPoint,
    DriverStart,
    MIN_STOPS_PER_ROUTE,
    plan_routes,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerateRoutesResult:
    """Outcome of a generation run. Zero routes is a normal outcome."""
    message: str
    route_date: date
    threshold: int
    max_stops_per_route: int
    routes_created: int = 0
    bins_used: int = 0
    bins_considered: int = 0
    bins_unassigned: int = 0
    bins_held: int = 0
    route_ids: List[int] = field(default_factory=list)


async def clear_routes_for_date(db: AsyncSession, route_date: date) -> int:
    """
    Delete every route of a date together with its stops.
    Runs inside the caller's transaction.

    Returns:
        Number of routes deleted
    """
    result = await db.execute(
        select(CollectionRoute)
        .where(CollectionRoute.route_date == route_date)
        .options(selectinload(CollectionRoute.stops))
        .with_for_update()
    )
    routes = result.scalars().all()
    for route in routes:
        # Stops go with the route (delete-orphan cascade)
        await db.delete(route)
    await db.flush()
    return len(routes)


def _held_by_other_dates(route_date: date):
    """
    Bins on an assigned/in-progress route of another date that is today or
    later. Active routes left over from past days no longer hold their bins.
    """
    return (
        select(RouteStop.bin_id)
        .join(CollectionRoute, RouteStop.route_id == CollectionRoute.id)
        .where(
            CollectionRoute.status.in_(ACTIVE_STATUSES),
            CollectionRoute.route_date != route_date,
            CollectionRoute.route_date >= date.today(),
        )
    )


def _needs_collection(threshold: int):
    return or_(Bin.fill_level >= threshold, Bin.overflow.is_(True))


async def load_candidate_bins(
    db: AsyncSession,
    route_date: date,
    threshold: int,
) -> List[BinPoint]:
    """
    Bins at or above the threshold, or flagged as overflowing, ordered by id.
    Bins held by a current or upcoming active route of another date are left out.
    """
    result = await db.execute(
        select(Bin)
        .where(
            _needs_collection(threshold),
            Bin.id.not_in(_held_by_other_dates(route_date)),
        )
        .order_by(Bin.id)
    )
    return [
        BinPoint(
            id=b.id,
            latitude=b.latitude,
            longitude=b.longitude,
            fill_level=b.fill_level,
            overflow=b.overflow,
        )
        for b in result.scalars().all()
    ]


async def count_held_bins(db: AsyncSession, route_date: date, threshold: int) -> int:
    """Bins that pass the threshold but are held by another date's active route."""
    result = await db.execute(
        select(func.count())
        .select_from(Bin)
        .where(
            _needs_collection(threshold),
            Bin.id.in_(_held_by_other_dates(route_date)),
        )
    )
    return result.scalar_one()


async def load_available_drivers(db: AsyncSession) -> List[DriverStart]:
    """Available drivers in id order, starting at their last position or the depot."""
    settings = get_settings()
    result = await db.execute(
        select(Driver).where(Driver.available.is_(True)).order_by(Driver.id)
    )
    drivers = []
    for driver in result.scalars().all():
        if driver.has_location:
            lat, lng = driver.last_latitude, driver.last_longitude
        else:
            lat, lng = settings.depot_latitude, settings.depot_longitude
        drivers.append(DriverStart(driver_id=driver.id, latitude=lat, longitude=lng))
    return drivers


async def generate_routes(
    db: AsyncSession,
    route_date: date,
    threshold: Optional[int] = None,
    max_stops: Optional[int] = None,
) -> GenerateRoutesResult:
    """
    Regenerate all routes for a date.

    Existing routes of the date are deleted and the new set is inserted in
    the same transaction, so callers never see a half-replaced route set.
    A lock on the date keeps concurrent generations for it from interleaving.

    Args:
        db: Database session
        route_date: Collection day
        threshold: Minimum fill level (inclusive) for a bin to be collected
        max_stops: Maximum stops per route

    Returns:
        GenerateRoutesResult with counts and a human-readable message
    """
    settings = get_settings()
    threshold = settings.default_threshold if threshold is None else threshold
    max_stops = settings.default_max_stops if max_stops is None else max_stops

    result = GenerateRoutesResult(
        message="",
        route_date=route_date,
        threshold=threshold,
        max_stops_per_route=max_stops,
    )

    async with atomic(db):
        await lock_route_date(db, route_date)
        cleared = await clear_routes_for_date(db, route_date)
        if cleared:
            logger.info("Cleared %d existing routes for %s", cleared, route_date)

        bins = await load_candidate_bins(db, route_date, threshold)
        drivers = await load_available_drivers(db)
        result.bins_considered = len(bins)
        result.bins_held = await count_held_bins(db, route_date, threshold)

        if not bins and result.bins_held:
            result.message = (
                f"All {result.bins_held} bin(s) above threshold / overflow are already "
                "on active routes of other dates. Nothing to route."
            )
        elif not bins:
            result.message = "No bins above threshold / overflow. Nothing to route."
        elif not drivers:
            result.message = "No available drivers. Cannot generate routes."
            result.bins_unassigned = len(bins)
        elif len(bins) < MIN_STOPS_PER_ROUTE:
            result.message = (
                "Only 1 bin needs collection. Not generating routes "
                "(needs 2+ bins for a route)."
            )
            result.bins_unassigned = len(bins)
        else:
            plan = plan_routes(bins, drivers, max_stops)

            for planned in plan.routes:
                route = CollectionRoute(
                    driver_id=planned.driver_id,
                    route_date=route_date,
                    status=RouteStatus.ASSIGNED,
                    stops=[
                        RouteStop(bin_id=bin_id, stop_order=order)
                        for order, bin_id in enumerate(planned.bin_ids)
                    ],
                )
                db.add(route)
                await db.flush()
                result.route_ids.append(route.id)

            result.routes_created = len(plan.routes)
            result.bins_used = plan.bins_used
            result.bins_unassigned = len(plan.unassigned)
            if plan.routes:
                result.message = (
                    f"Auto-routes generated successfully! (replaced routes for {route_date})"
                )
            else:
                result.message = (
                    "No route with 2+ stops could be formed from the available "
                    "drivers and bins."
                )

    logger.info(
        "Route generation for %s: %d routes, %d/%d bins used (threshold=%d, max_stops=%d)",
        route_date, result.routes_created, result.bins_used,
        result.bins_considered, threshold, max_stops,
    )
    return result
