"""
Fill-level history recorder: one snapshot row per bin per tick.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.core.locks import atomic
from smartwaste.models import Bin, BinFillHistory

logger = logging.getLogger(__name__)


async def record_snapshot(db: AsyncSession) -> int:
    """
    Append the current fill level of every bin to the history log.

    Returns:
        Number of rows written
    """
    async with atomic(db):
        result = await db.execute(
            select(Bin.id, Bin.fill_level, Bin.overflow).order_by(Bin.id)
        )
        rows = result.all()
        recorded_at = datetime.utcnow()
        db.add_all(
            BinFillHistory(
                bin_id=bin_id,
                fill_level=fill_level,
                overflow=overflow,
                recorded_at=recorded_at,
            )
            for bin_id, fill_level, overflow in rows
        )

    logger.debug("History snapshot saved %d rows", len(rows))
    return len(rows)
