"""
Routes API endpoints.
Route generation, listing, status updates and stop collection.
"""

from datetime import date as date_type
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.config import get_settings
from smartwaste.core.errors import NotFoundError
from smartwaste.database import get_db
from smartwaste.schemas.route import (
    RouteResponse,
    GenerateRoutesResponse,
    RouteStatusUpdateRequest,
    StartCollectingResponse,
    CollectBinResponse,
)
from smartwaste.services.auto_route_service import generate_routes
from smartwaste.services.route_query_service import list_routes, get_route
from smartwaste.services.route_status_service import (
    update_route_status,
    start_collecting_for_date,
    collect_bin,
)

router = APIRouter(prefix="/routes", tags=["Routes"])

settings = get_settings()


@router.post(
    "/auto-generate",
    response_model=GenerateRoutesResponse,
    summary="Generate routes for a date",
    description="Replaces all routes of the date with freshly planned routes.",
)
async def auto_generate_routes(
    target_date: Optional[date_type] = Query(default=None, alias="date", description="Date (defaults to today)"),
    threshold: int = Query(default=settings.default_threshold, ge=0, le=100),
    max_stops: int = Query(default=settings.default_max_stops, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> GenerateRoutesResponse:
    """Generate collection routes for one day."""
    result = await generate_routes(
        db,
        route_date=target_date or date_type.today(),
        threshold=threshold,
        max_stops=max_stops,
    )
    return GenerateRoutesResponse(
        message=result.message,
        route_date=result.route_date,
        threshold=result.threshold,
        max_stops_per_route=result.max_stops_per_route,
        routes_created=result.routes_created,
        bins_used=result.bins_used,
        bins_considered=result.bins_considered,
        bins_unassigned=result.bins_unassigned,
        bins_held=result.bins_held,
        route_ids=result.route_ids,
    )


@router.get(
    "",
    response_model=List[RouteResponse],
    summary="List routes",
    description="Routes newest first with ordered stops and straight-line distance.",
)
async def get_routes(
    target_date: Optional[date_type] = Query(default=None, alias="date"),
    db: AsyncSession = Depends(get_db),
) -> List[RouteResponse]:
    return await list_routes(db, target_date)


@router.post(
    "/start-collecting",
    response_model=StartCollectingResponse,
    summary="Start all routes of a date",
)
async def start_collecting(
    target_date: Optional[date_type] = Query(default=None, alias="date"),
    db: AsyncSession = Depends(get_db),
) -> StartCollectingResponse:
    """Move pending/assigned routes of the date to in_progress."""
    route_date = target_date or date_type.today()
    updated = await start_collecting_for_date(db, route_date)
    return StartCollectingResponse(route_date=route_date, routes_updated=updated)


@router.get(
    "/{route_id}",
    response_model=RouteResponse,
    summary="Get route details",
)
async def get_route_detail(
    route_id: int,
    db: AsyncSession = Depends(get_db),
) -> RouteResponse:
    try:
        return await get_route(db, route_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.patch(
    "/{route_id}/status",
    response_model=RouteResponse,
    summary="Update route status",
    description="Accepts pending, assigned, in_progress or completed (any case).",
)
async def patch_route_status(
    route_id: int,
    request: RouteStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
) -> RouteResponse:
    try:
        await update_route_status(db, route_id, request.status)
        return await get_route(db, route_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.patch(
    "/{route_id}/collect/{bin_id}",
    response_model=CollectBinResponse,
    summary="Collect a bin",
    description="Marks a stop as emptied and completes the route once no stop is left.",
)
async def patch_collect_bin(
    route_id: int,
    bin_id: int,
    db: AsyncSession = Depends(get_db),
) -> CollectBinResponse:
    try:
        result = await collect_bin(db, route_id, bin_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    return CollectBinResponse(
        route_id=result.route_id,
        bin_id=result.bin_id,
        collected=result.collected,
        outcome=result.outcome.value,
        status=result.status.value,
        completed=result.completed,
        remaining_stops=result.remaining_stops,
        message=result.message,
    )
