"""
Drivers API endpoints.
Registration, listing and availability/location updates.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.core.errors import NotFoundError
from smartwaste.database import get_db
from smartwaste.schemas.driver import DriverCreate, DriverUpdate, DriverResponse
from smartwaste.services.registry_service import create_driver, list_drivers, update_driver

router = APIRouter(prefix="/drivers", tags=["Drivers"])


@router.get("", response_model=List[DriverResponse], summary="List drivers")
async def get_drivers(
    available_only: bool = Query(default=False),
    db: AsyncSession = Depends(get_db),
) -> List[DriverResponse]:
    drivers = await list_drivers(db, available_only=available_only)
    return [DriverResponse.model_validate(d) for d in drivers]


@router.post(
    "",
    response_model=DriverResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register driver",
)
async def post_driver(request: DriverCreate, db: AsyncSession = Depends(get_db)) -> DriverResponse:
    return DriverResponse.model_validate(await create_driver(db, request))


@router.patch(
    "/{driver_id}",
    response_model=DriverResponse,
    summary="Update driver",
    description="Change availability and/or last known position.",
)
async def patch_driver(
    driver_id: int,
    request: DriverUpdate,
    db: AsyncSession = Depends(get_db),
) -> DriverResponse:
    try:
        driver = await update_driver(db, driver_id, request)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return DriverResponse.model_validate(driver)
