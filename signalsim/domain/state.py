from typing import Dict
from pydantic import BaseModel, ConfigDict, Field
from signalsim.domain.models import Direction, SensorReading, empty_snapshot
from signalsim.domain.settings import SimulationSettings

class SimulationState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tick_id: int = 0
    time_ms: float = 0.0
    paused: bool = False
    settings: SimulationSettings = Field(default_factory=SimulationSettings)

    # Latest detector output, consumed by the adaptive controller on the next tick
    sensors: Dict[Direction, SensorReading] = Field(default_factory=empty_snapshot)
