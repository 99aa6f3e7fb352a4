"""
Tests for the write gate, the unit-of-work helper and per-date route locks.
"""

import asyncio
from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from smartwaste.core.locks import (
    ROUTE_DATE_LOCK_NAMESPACE,
    atomic,
    lock_route_date,
    route_date_lock_statement,
    write_gate,
)
from smartwaste.models import Bin
from tests.fixtures.factories import add_bin


class TestAtomic:
    """Tests for commit and rollback around a block."""

    async def test_commits_on_success(self, db_session, session_factory):
        async with atomic(db_session):
            db_session.add(Bin(latitude=6.9, longitude=79.8, fill_level=40, overflow=False))

        async with session_factory() as other:
            result = await other.execute(select(Bin.fill_level))
            assert result.scalars().all() == [40]

    async def test_rolls_back_and_reraises(self, db_session):
        bin_ = await add_bin(db_session, 6.9, 79.8, fill_level=40)
        bin_id = bin_.id

        with pytest.raises(RuntimeError):
            async with atomic(db_session):
                bin_.fill_level = 0
                await db_session.flush()
                raise RuntimeError("boom")

        result = await db_session.execute(select(Bin.fill_level).where(Bin.id == bin_id))
        assert result.scalar_one() == 40

    async def test_gate_serializes_blocks(self):
        order = []

        async def worker(name):
            async with write_gate.hold():
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (
            ["a-in", "a-out", "b-in", "b-out"],
            ["b-in", "b-out", "a-in", "a-out"],
        )


class TestRouteDateLock:
    """Tests for the transaction-scoped lock on a route date."""

    def test_statement_keys_on_the_date(self):
        day = date(2026, 1, 12)

        compiled = route_date_lock_statement(day).compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )

        sql = str(compiled)
        assert "pg_advisory_xact_lock" in sql
        assert str(ROUTE_DATE_LOCK_NAMESPACE) in sql
        assert str(day.toordinal()) in sql

    def test_different_dates_use_different_keys(self):
        first = route_date_lock_statement(date(2026, 1, 12)).compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )
        second = route_date_lock_statement(date(2026, 1, 13)).compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )
        assert str(first) != str(second)

    async def test_skipped_on_sqlite(self, db_session):
        assert await lock_route_date(db_session, date(2026, 1, 12)) is False
