"""
Bin fill-level simulator.

Stands in for the sensor network: every tick it produces a few readings and
hands them to the bin lock guard, exactly like a real ingestion client would.
"""

import logging
import random
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.config import Settings
from smartwaste.models import Bin
from smartwaste.services.bin_lock_guard import IngestResult, ingest_fill_reading

logger = logging.getLogger(__name__)

# Range of a fresh reading after a bin was emptied outside of a route
EMPTIED_MAX_LEVEL = 20
FILL_STEP_MIN = 3
FILL_STEP_MAX = 17


class SimulatorState:
    """Pause/resume switch owned by the simulator."""

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled


class BinFillSimulator:
    """
    Generates fill readings for random bins.

    The random source is injected so runs can be reproduced with a seed.
    """

    def __init__(
        self,
        rng: random.Random,
        state: Optional[SimulatorState] = None,
        max_updates: int = 4,
        empty_chance_pct: int = 20,
    ) -> None:
        self.rng = rng
        self.state = state or SimulatorState()
        self.max_updates = max_updates
        self.empty_chance_pct = empty_chance_pct

    @classmethod
    def from_settings(cls, settings: Settings) -> "BinFillSimulator":
        return cls(
            rng=random.Random(settings.simulator_seed),
            state=SimulatorState(enabled=settings.simulator_enabled),
            max_updates=settings.simulator_max_updates,
            empty_chance_pct=settings.simulator_empty_chance_pct,
        )

    def next_level(self, current: int) -> int:
        """Either a bin emptied to a low level, or a bin that kept filling up."""
        if self.rng.randrange(100) < self.empty_chance_pct:
            return self.rng.randint(0, EMPTIED_MAX_LEVEL)
        return min(100, current + self.rng.randint(FILL_STEP_MIN, FILL_STEP_MAX))

    async def tick(self, db: AsyncSession) -> List[IngestResult]:
        """Produce up to `max_updates` readings. Does nothing while paused."""
        if not self.state.is_enabled():
            return []

        result = await db.execute(select(Bin.id, Bin.fill_level).order_by(Bin.id))
        levels: Dict[int, int] = {bin_id: fill for bin_id, fill in result.all()}
        if not levels:
            return []

        bin_ids = list(levels)
        readings = []
        for _ in range(min(self.max_updates, len(bin_ids))):
            bin_id = bin_ids[self.rng.randrange(len(bin_ids))]
            reading = await ingest_fill_reading(db, bin_id, self.next_level(levels[bin_id]))
            if reading.applied:
                levels[bin_id] = reading.incoming_fill
            readings.append(reading)

        rejected = sum(1 for r in readings if r.locked_rejected)
        logger.debug("Simulator tick: %d readings, %d rejected by route lock", len(readings), rejected)
        return readings
