"""
Pydantic schemas for the IoT simulator control API.
"""

from pydantic import BaseModel


class SimulatorStatusResponse(BaseModel):
    """Whether the fill simulator is running."""
    iot_enabled: bool
    message: str
