"""
Route status machine and per-stop collection.

Status input is forgiving about case and spelling ("IN PROGRESS",
"in-progress") but anything outside the four canonical states is rejected.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from smartwaste.config import get_settings
from smartwaste.core.errors import InvalidStatusError, InvalidTransitionError, NotFoundError
from smartwaste.core.locks import atomic
from smartwaste.models import Bin, CollectionRoute, RouteStop, RouteStatus

logger = logging.getLogger(__name__)

ALLOWED_STATUSES = tuple(s.value for s in RouteStatus)

_STATUS_SYNONYMS = {
    "in progress": RouteStatus.IN_PROGRESS.value,
    "in-progress": RouteStatus.IN_PROGRESS.value,
}

# Forward order used when strict transitions are enabled
_STATUS_RANK = {
    RouteStatus.PENDING: 0,
    RouteStatus.ASSIGNED: 1,
    RouteStatus.IN_PROGRESS: 2,
    RouteStatus.COMPLETED: 3,
}


def normalize_status(raw: Optional[str]) -> Optional[str]:
    """Trim, lower-case and map known synonyms. None stays None."""
    if raw is None:
        return None
    value = raw.strip().lower()
    return _STATUS_SYNONYMS.get(value, value)


def parse_status(raw: Optional[str]) -> RouteStatus:
    """
    Convert user input into a RouteStatus.

    Raises:
        InvalidStatusError: if the value is not one of the allowed statuses
    """
    value = normalize_status(raw)
    if value not in ALLOWED_STATUSES:
        raise InvalidStatusError(raw, ALLOWED_STATUSES)
    return RouteStatus(value)


async def get_route_for_update(db: AsyncSession, route_id: int) -> CollectionRoute:
    """
    Load a route with its stops, row-locked where the database supports it.

    Raises:
        NotFoundError: if no route has this id
    """
    result = await db.execute(
        select(CollectionRoute)
        .where(CollectionRoute.id == route_id)
        .options(selectinload(CollectionRoute.stops))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    route = result.scalar_one_or_none()
    if route is None:
        raise NotFoundError("Route", route_id)
    return route


async def update_route_status(
    db: AsyncSession,
    route_id: int,
    new_status: str,
) -> CollectionRoute:
    """
    Overwrite a route's status.

    The status is validated before the route is looked up, so a bad value is
    reported as a validation error even for unknown routes.

    Raises:
        InvalidStatusError: unknown status value
        NotFoundError: unknown route
        InvalidTransitionError: backward move while strict_transitions is on
    """
    status = parse_status(new_status)
    strict = get_settings().strict_transitions

    async with atomic(db):
        route = await get_route_for_update(db, route_id)
        previous = route.status
        if strict and _STATUS_RANK[status] < _STATUS_RANK[previous]:
            raise InvalidTransitionError(route_id, previous.value, status.value)
        route.status = status

    logger.info("Route %s status %s -> %s", route_id, previous.value, status.value)
    return route


async def start_collecting_for_date(db: AsyncSession, route_date: date) -> int:
    """
    Move every pending/assigned route of a date to in_progress.

    Returns:
        Number of routes changed
    """
    async with atomic(db):
        result = await db.execute(
            select(CollectionRoute)
            .where(
                CollectionRoute.route_date == route_date,
                CollectionRoute.status.in_((RouteStatus.PENDING, RouteStatus.ASSIGNED)),
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        routes = result.scalars().all()
        for route in routes:
            route.status = RouteStatus.IN_PROGRESS
        updated = len(routes)

    logger.info("Started %d routes for %s", updated, route_date)
    return updated


async def start_route(db: AsyncSession, route_id: int) -> CollectionRoute:
    """
    Put a single route in progress unless it is already completed.

    Raises:
        NotFoundError: unknown route
    """
    async with atomic(db):
        route = await get_route_for_update(db, route_id)
        if route.status != RouteStatus.COMPLETED:
            route.status = RouteStatus.IN_PROGRESS
    return route


class CollectOutcome(str, enum.Enum):
    """What a collect call did."""
    COLLECTED = "collected"
    ROUTE_NOT_ACTIVE = "route_not_active"
    BIN_NOT_ON_ROUTE = "bin_not_on_route"


@dataclass
class CollectResult:
    """Result of collecting one stop of a route."""
    route_id: int
    bin_id: int
    outcome: CollectOutcome
    status: RouteStatus
    message: str
    completed: bool = False
    remaining_stops: int = 0

    @property
    def collected(self) -> bool:
        return self.outcome == CollectOutcome.COLLECTED


async def count_outstanding_stops(db: AsyncSession, route_id: int) -> int:
    """Stops of a route whose bin still holds waste or is flagged overflowing."""
    result = await db.execute(
        select(func.count())
        .select_from(RouteStop)
        .join(Bin, RouteStop.bin_id == Bin.id)
        .where(
            RouteStop.route_id == route_id,
            or_(Bin.fill_level > 0, Bin.overflow.is_(True)),
        )
    )
    return result.scalar_one()


async def collect_bin(db: AsyncSession, route_id: int, bin_id: int) -> CollectResult:
    """
    Record that the truck emptied one bin of an in-progress route.

    The reset, the outstanding-stop count and the completion update happen in
    one transaction, so the last of several concurrent collections always
    sees the route as finished.

    Raises:
        NotFoundError: unknown route
    """
    async with atomic(db):
        route = await get_route_for_update(db, route_id)

        if route.status != RouteStatus.IN_PROGRESS:
            return CollectResult(
                route_id=route_id,
                bin_id=bin_id,
                outcome=CollectOutcome.ROUTE_NOT_ACTIVE,
                status=route.status,
                message=f"Route {route_id} is not in progress (status: {route.status.value}).",
            )

        if bin_id not in route.bin_ids:
            return CollectResult(
                route_id=route_id,
                bin_id=bin_id,
                outcome=CollectOutcome.BIN_NOT_ON_ROUTE,
                status=route.status,
                message=f"Bin {bin_id} is not a stop of route {route_id}.",
            )

        result = await db.execute(
            select(Bin)
            .where(Bin.id == bin_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        bin_ = result.scalar_one()
        bin_.fill_level = 0
        bin_.overflow = False
        await db.flush()

        remaining = await count_outstanding_stops(db, route_id)
        completed = remaining == 0
        if completed:
            route.status = RouteStatus.COMPLETED

    if completed:
        logger.info("Route %s completed after collecting bin %s", route_id, bin_id)
        message = "Bin collected. All stops done, route completed."
    else:
        message = f"Bin collected. {remaining} stop(s) remaining."

    return CollectResult(
        route_id=route_id,
        bin_id=bin_id,
        outcome=CollectOutcome.COLLECTED,
        status=route.status,
        message=message,
        completed=completed,
        remaining_stops=remaining,
    )
