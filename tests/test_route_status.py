"""
Tests for the route status machine and per-stop collection.
"""

import asyncio
from datetime import date

import pytest
from sqlalchemy import select

from smartwaste.core.errors import InvalidStatusError, InvalidTransitionError, NotFoundError
from smartwaste.models import Bin, CollectionRoute, RouteStatus
from smartwaste.services import route_status_service
from smartwaste.services.route_status_service import (
    CollectOutcome,
    collect_bin,
    normalize_status,
    parse_status,
    start_collecting_for_date,
    start_route,
    update_route_status,
)
from tests.fixtures.factories import ROUTE_DATE, add_bin, add_driver, add_route


async def stored_status(db, route_id):
    result = await db.execute(select(CollectionRoute.status).where(CollectionRoute.id == route_id))
    return result.scalar_one()


async def stored_fill(db, bin_id):
    result = await db.execute(select(Bin.fill_level, Bin.overflow).where(Bin.id == bin_id))
    return tuple(result.one())


async def make_route(db, status=RouteStatus.IN_PROGRESS, fills=(90, 100), route_date=ROUTE_DATE):
    driver = await add_driver(db, "Sunil", 6.90, 79.85)
    bins = [
        await add_bin(db, 6.90 + 0.001 * i, 79.85, fill_level=fill)
        for i, fill in enumerate(fills, start=1)
    ]
    route = await add_route(db, driver, bins, status=status, route_date=route_date)
    return route, bins


class TestStatusParsing:
    """Tests for status normalization and validation."""

    @pytest.mark.parametrize("raw,expected", [
        ("IN PROGRESS", "in_progress"),
        ("in-progress", "in_progress"),
        ("In_Progress", "in_progress"),
        (" Completed ", "completed"),
        ("ASSIGNED", "assigned"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_status(raw) == expected

    def test_normalize_none(self):
        assert normalize_status(None) is None

    def test_parse_returns_enum(self):
        assert parse_status("Pending") is RouteStatus.PENDING

    def test_unknown_status_names_value_and_allowed_set(self):
        with pytest.raises(InvalidStatusError) as exc_info:
            parse_status("done")
        message = str(exc_info.value)
        assert "'done'" in message
        for allowed in ("pending", "assigned", "in_progress", "completed"):
            assert allowed in message

    def test_invalid_status_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_status(None)


class TestUpdateRouteStatus:
    """Tests for single route status updates."""

    async def test_synonym_is_applied(self, db_session):
        route, _ = await make_route(db_session, status=RouteStatus.ASSIGNED)

        updated = await update_route_status(db_session, route.id, "IN PROGRESS")

        assert updated.status == RouteStatus.IN_PROGRESS
        assert await stored_status(db_session, route.id) == RouteStatus.IN_PROGRESS

    async def test_invalid_status_checked_before_lookup(self, db_session):
        with pytest.raises(InvalidStatusError):
            await update_route_status(db_session, 999, "done")

    async def test_unknown_route(self, db_session):
        with pytest.raises(NotFoundError):
            await update_route_status(db_session, 999, "completed")

    async def test_backward_move_allowed_by_default(self, db_session):
        route, _ = await make_route(db_session, status=RouteStatus.COMPLETED)

        await update_route_status(db_session, route.id, "pending")

        assert await stored_status(db_session, route.id) == RouteStatus.PENDING

    async def test_backward_move_rejected_in_strict_mode(self, db_session, strict_transitions):
        route, _ = await make_route(db_session, status=RouteStatus.COMPLETED)
        route_id = route.id

        with pytest.raises(InvalidTransitionError):
            await update_route_status(db_session, route_id, "assigned")

        assert await stored_status(db_session, route_id) == RouteStatus.COMPLETED

    async def test_forward_move_allowed_in_strict_mode(self, db_session, strict_transitions):
        route, _ = await make_route(db_session, status=RouteStatus.ASSIGNED)

        await update_route_status(db_session, route.id, "completed")

        assert await stored_status(db_session, route.id) == RouteStatus.COMPLETED


class TestStartCollecting:
    """Tests for bulk and single route start."""

    async def test_starts_pending_and_assigned_routes_of_date(self, db_session):
        driver = await add_driver(db_session)
        bins = [await add_bin(db_session, 6.9, 79.8 + 0.01 * i, fill_level=90) for i in range(8)]
        pending = await add_route(db_session, driver, bins[0:2], status=RouteStatus.PENDING)
        assigned = await add_route(db_session, driver, bins[2:4], status=RouteStatus.ASSIGNED)
        done = await add_route(db_session, driver, bins[4:6], status=RouteStatus.COMPLETED)
        other_day = await add_route(
            db_session, driver, bins[6:8],
            status=RouteStatus.ASSIGNED, route_date=date(2026, 1, 13),
        )

        updated = await start_collecting_for_date(db_session, ROUTE_DATE)

        assert updated == 2
        assert await stored_status(db_session, pending.id) == RouteStatus.IN_PROGRESS
        assert await stored_status(db_session, assigned.id) == RouteStatus.IN_PROGRESS
        assert await stored_status(db_session, done.id) == RouteStatus.COMPLETED
        assert await stored_status(db_session, other_day.id) == RouteStatus.ASSIGNED

    async def test_nothing_to_start(self, db_session):
        assert await start_collecting_for_date(db_session, ROUTE_DATE) == 0

    async def test_start_single_route(self, db_session):
        route, _ = await make_route(db_session, status=RouteStatus.ASSIGNED)

        started = await start_route(db_session, route.id)

        assert started.status == RouteStatus.IN_PROGRESS

    async def test_start_keeps_completed_route(self, db_session):
        route, _ = await make_route(db_session, status=RouteStatus.COMPLETED)

        started = await start_route(db_session, route.id)

        assert started.status == RouteStatus.COMPLETED

    async def test_start_unknown_route(self, db_session):
        with pytest.raises(NotFoundError):
            await start_route(db_session, 12345)


class TestCollectBin:
    """Tests for per-stop collection and auto-completion."""

    async def test_collect_resets_bin_and_keeps_route_active(self, db_session):
        route, bins = await make_route(db_session, fills=(90, 100))

        result = await collect_bin(db_session, route.id, bins[0].id)

        assert result.collected
        assert result.outcome == CollectOutcome.COLLECTED
        assert not result.completed
        assert result.remaining_stops == 1
        assert result.status == RouteStatus.IN_PROGRESS
        assert result.message == "Bin collected. 1 stop(s) remaining."
        assert await stored_fill(db_session, bins[0].id) == (0, False)
        assert await stored_status(db_session, route.id) == RouteStatus.IN_PROGRESS

    async def test_last_stop_completes_route(self, db_session):
        route, bins = await make_route(db_session, fills=(90, 100))

        await collect_bin(db_session, route.id, bins[0].id)
        result = await collect_bin(db_session, route.id, bins[1].id)

        assert result.completed
        assert result.status == RouteStatus.COMPLETED
        assert result.message == "Bin collected. All stops done, route completed."
        assert await stored_fill(db_session, bins[1].id) == (0, False)
        assert await stored_status(db_session, route.id) == RouteStatus.COMPLETED

    async def test_stop_emptied_elsewhere_counts_as_done(self, db_session):
        route, bins = await make_route(db_session, fills=(0, 90))

        result = await collect_bin(db_session, route.id, bins[1].id)

        assert result.completed

    async def test_forced_overflow_keeps_stop_outstanding(self, db_session):
        driver = await add_driver(db_session)
        flagged = await add_bin(db_session, 6.9, 79.8, fill_level=0, overflow=True)
        full = await add_bin(db_session, 6.9, 79.9, fill_level=90)
        route = await add_route(db_session, driver, [flagged, full], status=RouteStatus.IN_PROGRESS)

        result = await collect_bin(db_session, route.id, full.id)

        assert not result.completed
        assert result.remaining_stops == 1

    async def test_route_not_in_progress(self, db_session):
        route, bins = await make_route(db_session, status=RouteStatus.ASSIGNED)

        result = await collect_bin(db_session, route.id, bins[0].id)

        assert not result.collected
        assert result.outcome == CollectOutcome.ROUTE_NOT_ACTIVE
        assert result.status == RouteStatus.ASSIGNED
        assert await stored_fill(db_session, bins[0].id) == (90, False)

    async def test_bin_not_on_route(self, db_session):
        route, _ = await make_route(db_session)
        stranger = await add_bin(db_session, 7.0, 80.0, fill_level=99)

        result = await collect_bin(db_session, route.id, stranger.id)

        assert result.outcome == CollectOutcome.BIN_NOT_ON_ROUTE
        assert await stored_fill(db_session, stranger.id) == (99, True)

    async def test_unknown_route(self, db_session):
        with pytest.raises(NotFoundError):
            await collect_bin(db_session, 999, 1)

    async def test_concurrent_collection_of_last_two_stops(self, db_session, session_factory):
        """Exactly one of two simultaneous collections observes completion."""
        route, bins = await make_route(db_session, fills=(90, 100))
        route_id, bin_ids = route.id, [b.id for b in bins]

        async with session_factory() as first, session_factory() as second:
            results = await asyncio.gather(
                collect_bin(first, route_id, bin_ids[0]),
                collect_bin(second, route_id, bin_ids[1]),
            )

        assert all(r.collected for r in results)
        assert sorted(r.completed for r in results) == [False, True]
        assert await stored_status(db_session, route_id) == RouteStatus.COMPLETED

    async def test_failure_after_reset_leaves_bin_and_route_unchanged(self, db_session, monkeypatch):
        route, bins = await make_route(db_session, fills=(90, 100))
        route_id, bin_id = route.id, bins[0].id

        async def broken_count(db, route_id):
            raise RuntimeError("database went away")

        monkeypatch.setattr(route_status_service, "count_outstanding_stops", broken_count)

        with pytest.raises(RuntimeError):
            await collect_bin(db_session, route_id, bin_id)

        assert await stored_fill(db_session, bin_id) == (90, False)
        assert await stored_status(db_session, route_id) == RouteStatus.IN_PROGRESS
