"""
Background loop running a job on a fixed interval with its own session.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs `job(session)` every `interval_seconds` until stopped.
    A failing tick is logged and the loop carries on with the next one.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        job: Callable[[AsyncSession], Awaitable[Any]],
        session_factory: async_sessionmaker,
    ) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self.job = job
        self.session_factory = session_factory
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Any:
        async with self.session_factory() as session:
            return await self.job(session)

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Periodic task %s failed", self.name)
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        logger.info("Starting periodic task %s (every %ss)", self.name, self.interval_seconds)
        self._task = asyncio.create_task(self._loop(), name=self.name)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped periodic task %s", self.name)
