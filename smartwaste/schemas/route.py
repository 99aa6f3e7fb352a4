"""
Pydantic schemas for route API.
Requests and responses for route generation, listing, status and collection.
"""

from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, Field


class RouteStopInfo(BaseModel):
    """Information about a stop on the route."""
    bin_id: int
    stop_order: int
    latitude: float
    longitude: float
    fill_level: int
    overflow: bool


class RouteResponse(BaseModel):
    """Route with its stops in visiting order."""
    id: int
    driver_id: int
    route_date: date
    status: str
    bin_ids: List[int] = Field(default_factory=list, description="Stops in visiting order")
    distance_km: float = Field(0.0, description="Sum of straight-line legs between consecutive stops")
    created_at: Optional[datetime] = None
    stops: List[RouteStopInfo] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class GenerateRoutesResponse(BaseModel):
    """Result of automatic route generation for one date."""
    message: str
    route_date: date
    threshold: int
    max_stops_per_route: int
    routes_created: int
    bins_used: int
    bins_considered: int
    bins_unassigned: int
    bins_held: int = Field(0, description="Bins above threshold held by active routes of other dates")
    route_ids: List[int] = Field(default_factory=list)


class RouteStatusUpdateRequest(BaseModel):
    """New status for a route (case-insensitive)."""
    status: str = Field(..., description="pending, assigned, in_progress or completed")


class StartCollectingResponse(BaseModel):
    """Result of starting every route of a date."""
    route_date: date
    routes_updated: int


class CollectBinResponse(BaseModel):
    """Result of collecting one stop."""
    route_id: int
    bin_id: int
    collected: bool
    outcome: str
    status: str
    completed: bool
    remaining_stops: int
    message: str


class TodayRouteResponse(BaseModel):
    """Driver's route for a day, or a message when there is none."""
    message: str
    route: Optional[RouteResponse] = None
