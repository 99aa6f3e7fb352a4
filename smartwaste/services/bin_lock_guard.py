"""
Fill-level ingestion with route locking.

A bin that is a stop of an assigned or in-progress route of the current day
is "locked": sensor readings that would raise its fill level are ignored until the route is done
with it. Readings that keep or lower the level are always applied.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.config import get_settings
from smartwaste.core.errors import NotFoundError
from smartwaste.core.locks import atomic
from smartwaste.models import Bin, CollectionRoute, RouteStop, ACTIVE_STATUSES

logger = logging.getLogger(__name__)

MIN_FILL = 0
MAX_FILL = 100


@dataclass
class IngestResult:
    """Outcome of one fill-level reading. `current_fill` is the level before the reading."""
    bin_id: int
    applied: bool
    locked_rejected: bool
    current_fill: int
    incoming_fill: int
    overflow: bool
    locking_route_id: Optional[int] = None
    message: str = ""


def clamp_fill_level(level: int) -> int:
    return max(MIN_FILL, min(MAX_FILL, int(level)))


def is_overflowing(level: int) -> bool:
    return level >= get_settings().overflow_level


async def find_locking_route_id(
    db: AsyncSession,
    bin_id: int,
    on_date: Optional[date] = None,
) -> Optional[int]:
    """
    Id of an assigned/in-progress route of `on_date` (default today) that has
    this bin as a stop, if any. Routes of other days never lock a bin.
    """
    on_date = on_date or date.today()
    result = await db.execute(
        select(CollectionRoute.id)
        .join(RouteStop, RouteStop.route_id == CollectionRoute.id)
        .where(
            RouteStop.bin_id == bin_id,
            CollectionRoute.status.in_(ACTIVE_STATUSES),
            CollectionRoute.route_date == on_date,
        )
        .order_by(CollectionRoute.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def is_bin_locked(db: AsyncSession, bin_id: int, on_date: Optional[date] = None) -> bool:
    return await find_locking_route_id(db, bin_id, on_date) is not None


async def ingest_fill_reading(
    db: AsyncSession,
    bin_id: int,
    level: int,
    on_date: Optional[date] = None,
) -> IngestResult:
    """
    Apply a sensor reading to a bin unless the bin is locked and the reading
    would raise its level.

    Args:
        db: Database session
        bin_id: Bin the reading belongs to
        level: Reported fill level, clamped to 0-100
        on_date: Day whose active routes lock the bin (defaults to today)

    Returns:
        IngestResult describing whether the reading was applied

    Raises:
        NotFoundError: unknown bin
    """
    incoming = clamp_fill_level(level)

    async with atomic(db):
        result = await db.execute(
            select(Bin)
            .where(Bin.id == bin_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        bin_ = result.scalar_one_or_none()
        if bin_ is None:
            raise NotFoundError("Bin", bin_id)

        current = bin_.fill_level
        locking_route_id = await find_locking_route_id(db, bin_id, on_date)

        if locking_route_id is not None and incoming > current:
            logger.warning(
                "Rejected fill reading for bin %s: %d -> %d (locked by route %s)",
                bin_id, current, incoming, locking_route_id,
            )
            return IngestResult(
                bin_id=bin_id,
                applied=False,
                locked_rejected=True,
                current_fill=current,
                incoming_fill=incoming,
                overflow=bin_.overflow,
                locking_route_id=locking_route_id,
                message=(
                    f"Bin {bin_id} is on active route {locking_route_id}; "
                    f"ignoring rise from {current} to {incoming}."
                ),
            )

        bin_.fill_level = incoming
        bin_.overflow = is_overflowing(incoming)

    return IngestResult(
        bin_id=bin_id,
        applied=True,
        locked_rejected=False,
        current_fill=current,
        incoming_fill=incoming,
        overflow=bin_.overflow,
        locking_route_id=locking_route_id,
        message=f"Bin {bin_id} fill level set to {incoming}.",
    )
