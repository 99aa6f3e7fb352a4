"""Schemas package initialization."""

from smartwaste.schemas.bin import (
    BinCreate,
    BinResponse,
    FillReadingRequest,
    FillReadingResponse,
)
from smartwaste.schemas.driver import DriverCreate, DriverUpdate, DriverResponse
from smartwaste.schemas.route import (
    RouteStopInfo,
    RouteResponse,
    GenerateRoutesResponse,
    RouteStatusUpdateRequest,
    StartCollectingResponse,
    CollectBinResponse,
    TodayRouteResponse,
)
from smartwaste.schemas.iot import SimulatorStatusResponse

__all__ = [
    "BinCreate",
    "BinResponse",
    "FillReadingRequest",
    "FillReadingResponse",
    "DriverCreate",
    "DriverUpdate",
    "DriverResponse",
    "RouteStopInfo",
    "RouteResponse",
    "GenerateRoutesResponse",
    "RouteStatusUpdateRequest",
    "StartCollectingResponse",
    "CollectBinResponse",
    "TodayRouteResponse",
    "SimulatorStatusResponse",
]
