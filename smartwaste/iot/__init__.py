"""IoT feed: fill simulator, history recorder and their background runner."""

from smartwaste.iot.history import record_snapshot
from smartwaste.iot.runner import PeriodicTask
from smartwaste.iot.simulator import BinFillSimulator, SimulatorState

__all__ = [
    "record_snapshot",
    "PeriodicTask",
    "BinFillSimulator",
    "SimulatorState",
]
