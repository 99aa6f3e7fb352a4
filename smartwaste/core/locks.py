"""
Write gate and unit-of-work helper for dispatch operations.

Every mutating operation (route generation, status changes, collections,
fill-level ingestion) runs inside ``atomic(db)``. Within one process the gate
serializes those operations, which is what keeps SQLite consistent. On
PostgreSQL the services also take row locks (``SELECT ... FOR UPDATE``) so
several API workers stay serialized on the rows they touch. Route generation
additionally takes a transaction-scoped advisory lock on its date, since the
routes it is about to insert have no rows to lock yet.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

# First key of pg_advisory_xact_lock(int, int) for per-date route locks
ROUTE_DATE_LOCK_NAMESPACE = 7401


class WriteGate:
    """
    Process-wide mutual exclusion for state-changing operations.

    asyncio locks belong to one event loop, so one lock is kept per running
    loop. Test suites that spin a fresh loop per test get a fresh lock.
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = (
            weakref.WeakKeyDictionary()
        )

    def _lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        lock = self._locks.get(loop)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[loop] = lock
        return lock

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        async with self._lock():
            yield


write_gate = WriteGate()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block as one transaction under the write gate.

    Commits on success, rolls back on any exception and re-raises it, so the
    enclosing operation never leaves partial state behind.
    """
    async with write_gate.hold():
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise


def route_date_lock_statement(route_date: date) -> Select:
    return select(func.pg_advisory_xact_lock(ROUTE_DATE_LOCK_NAMESPACE, route_date.toordinal()))


async def lock_route_date(db: AsyncSession, route_date: date) -> bool:
    """
    Take a lock on a route date that is released when the transaction ends.

    PostgreSQL only. Other backends run a single writer process and rely on
    the write gate, so nothing is executed there.

    Returns:
        True if a database lock was taken
    """
    if db.get_bind().dialect.name != "postgresql":
        return False
    await db.execute(route_date_lock_statement(route_date))
    return True
