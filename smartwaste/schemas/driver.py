"""
Pydantic schemas for driver API.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DriverCreate(BaseModel):
    """Register a driver."""
    name: str = Field(..., min_length=1, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=20)
    vehicle_number: Optional[str] = Field(None, max_length=50)
    available: bool = True
    last_latitude: Optional[float] = Field(None, ge=-90, le=90)
    last_longitude: Optional[float] = Field(None, ge=-180, le=180)


class DriverUpdate(BaseModel):
    """Partial update of availability and last known position."""
    available: Optional[bool] = None
    last_latitude: Optional[float] = Field(None, ge=-90, le=90)
    last_longitude: Optional[float] = Field(None, ge=-180, le=180)


class DriverResponse(BaseModel):
    """Driver details."""
    id: int
    name: str
    phone_number: Optional[str] = None
    vehicle_number: Optional[str] = None
    available: bool
    last_latitude: Optional[float] = None
    last_longitude: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
