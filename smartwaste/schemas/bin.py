"""
Pydantic schemas for bin API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BinCreate(BaseModel):
    """Register a bin."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    fill_level: int = Field(0, ge=0, le=100)
    overflow: bool = Field(False, description="Forced on; otherwise derived from fill level")


class BinResponse(BaseModel):
    """Bin details."""
    id: int
    latitude: float
    longitude: float
    fill_level: int
    overflow: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class FillReadingRequest(BaseModel):
    """Sensor reading for a bin. Out-of-range values are clamped to 0-100."""
    fill_level: int


class FillReadingResponse(BaseModel):
    """Outcome of a sensor reading."""
    bin_id: int
    applied: bool
    locked_rejected: bool
    current_fill: int
    incoming_fill: int
    overflow: bool
    locking_route_id: Optional[int] = None
    message: str
