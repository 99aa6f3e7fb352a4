"""Models package initialization - imports all models for easy access."""

from smartwaste.models.bin import Bin, BinFillHistory
from smartwaste.models.driver import Driver
from smartwaste.models.route import CollectionRoute, RouteStop, RouteStatus, ACTIVE_STATUSES

__all__ = [
    "Bin",
    "BinFillHistory",
    "Driver",
    "CollectionRoute",
    "RouteStop",
    "RouteStatus",
    "ACTIVE_STATUSES",
]
