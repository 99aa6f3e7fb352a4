"""
IoT simulator control endpoints: status, pause, resume.
"""

from fastapi import APIRouter, Request

from smartwaste.iot.simulator import SimulatorState
from smartwaste.schemas.iot import SimulatorStatusResponse

router = APIRouter(prefix="/iot", tags=["IoT"])


def _state(request: Request) -> SimulatorState:
    return request.app.state.simulator.state


def _status(state: SimulatorState) -> SimulatorStatusResponse:
    enabled = state.is_enabled()
    return SimulatorStatusResponse(
        iot_enabled=enabled,
        message="IoT Simulator is RUNNING" if enabled else "IoT Simulator is PAUSED",
    )


@router.get("/status", response_model=SimulatorStatusResponse, summary="Simulator status")
async def get_status(request: Request) -> SimulatorStatusResponse:
    return _status(_state(request))


@router.post("/pause", response_model=SimulatorStatusResponse, summary="Pause simulator")
async def pause(request: Request) -> SimulatorStatusResponse:
    state = _state(request)
    state.disable()
    return _status(state)


@router.post("/resume", response_model=SimulatorStatusResponse, summary="Resume simulator")
async def resume(request: Request) -> SimulatorStatusResponse:
    state = _state(request)
    state.enable()
    return _status(state)
