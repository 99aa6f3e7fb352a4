"""
Bin and driver registration.
Thin persistence helpers used to seed the dispatch engine.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from smartwaste.core.errors import NotFoundError
from smartwaste.core.locks import atomic
from smartwaste.models import Bin, Driver
from smartwaste.schemas.bin import BinCreate
from smartwaste.schemas.driver import DriverCreate, DriverUpdate
from smartwaste.services.bin_lock_guard import is_overflowing


async def create_bin(db: AsyncSession, data: BinCreate) -> Bin:
    """Register a bin. A forced overflow flag is kept even below the overflow level."""
    bin_ = Bin(
        latitude=data.latitude,
        longitude=data.longitude,
        fill_level=data.fill_level,
        overflow=data.overflow or is_overflowing(data.fill_level),
    )
    async with atomic(db):
        db.add(bin_)
        await db.flush()
    return bin_


async def list_bins(db: AsyncSession) -> List[Bin]:
    result = await db.execute(select(Bin).order_by(Bin.id))
    return list(result.scalars().all())


async def create_driver(db: AsyncSession, data: DriverCreate) -> Driver:
    driver = Driver(**data.model_dump())
    async with atomic(db):
        db.add(driver)
        await db.flush()
    return driver


async def list_drivers(db: AsyncSession, available_only: bool = False) -> List[Driver]:
    query = select(Driver).order_by(Driver.id)
    if available_only:
        query = query.where(Driver.available.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_driver(db: AsyncSession, driver_id: int, data: DriverUpdate) -> Driver:
    """
    Update availability and/or last known position.

    Raises:
        NotFoundError: unknown driver
    """
    async with atomic(db):
        driver = await db.get(Driver, driver_id)
        if driver is None:
            raise NotFoundError("Driver", driver_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(driver, key, value)
    return driver
