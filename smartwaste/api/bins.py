"""
Bins API endpoints.
Registration, listing and the sensor fill-level feed.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.core.errors import NotFoundError
from smartwaste.database import get_db
from smartwaste.schemas.bin import BinCreate, BinResponse, FillReadingRequest, FillReadingResponse
from smartwaste.services.bin_lock_guard import ingest_fill_reading
from smartwaste.services.registry_service import create_bin, list_bins

router = APIRouter(prefix="/bins", tags=["Bins"])


@router.get("", response_model=List[BinResponse], summary="List bins")
async def get_bins(db: AsyncSession = Depends(get_db)) -> List[BinResponse]:
    return [BinResponse.model_validate(b) for b in await list_bins(db)]


@router.post(
    "",
    response_model=BinResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register bin",
)
async def post_bin(request: BinCreate, db: AsyncSession = Depends(get_db)) -> BinResponse:
    return BinResponse.model_validate(await create_bin(db, request))


@router.patch(
    "/{bin_id}/fill",
    response_model=FillReadingResponse,
    summary="Report fill level",
    description=(
        "Sensor reading for a bin. Readings that would raise the level of a bin "
        "on an active route are rejected."
    ),
)
async def patch_bin_fill(
    bin_id: int,
    request: FillReadingRequest,
    db: AsyncSession = Depends(get_db),
) -> FillReadingResponse:
    try:
        result = await ingest_fill_reading(db, bin_id, request.fill_level)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    return FillReadingResponse(
        bin_id=result.bin_id,
        applied=result.applied,
        locked_rejected=result.locked_rejected,
        current_fill=result.current_fill,
        incoming_fill=result.incoming_fill,
        overflow=result.overflow,
        locking_route_id=result.locking_route_id,
        message=result.message,
    )
