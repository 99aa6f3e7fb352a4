"""
Driver-facing route endpoints: today's route and route start.
"""

from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.core.errors import NotFoundError
from smartwaste.database import get_db
from smartwaste.schemas.route import RouteResponse, TodayRouteResponse
from smartwaste.services.route_query_service import get_route, get_today_route_for_driver
from smartwaste.services.route_status_service import start_route

router = APIRouter(prefix="/driver/routes", tags=["Driver"])


@router.get(
    "/today",
    response_model=TodayRouteResponse,
    summary="Get today's route",
    description="The driver's latest route for the date, or a message when there is none.",
)
async def get_today_route(
    driver_id: int = Query(..., description="Driver id"),
    target_date: Optional[date_type] = Query(default=None, alias="date", description="Date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
) -> TodayRouteResponse:
    try:
        return await get_today_route_for_driver(db, driver_id, target_date or date_type.today())
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )


@router.patch(
    "/{route_id}/start",
    response_model=RouteResponse,
    summary="Start a route",
    description="Sets the route in progress unless it is already completed.",
)
async def patch_start_route(
    route_id: int,
    db: AsyncSession = Depends(get_db),
) -> RouteResponse:
    try:
        await start_route(db, route_id)
        return await get_route(db, route_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
