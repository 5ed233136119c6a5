from abc import ABC, abstractmethod
from typing import Dict, Optional
from signalsim.domain.models import ControlMode, Direction, LightState, SensorSnapshot
from signalsim.domain.settings import SimulationSettings

Lights = Dict[Direction, LightState]

AXIS_DIRECTIONS = {
    "NS": (Direction.NORTH, Direction.SOUTH),
    "EW": (Direction.EAST, Direction.WEST),
}

def set_all_red(lights: Lights):
    for direction in Direction:
        lights[direction] = LightState.RED

def set_axis(lights: Lights, axis: str, state: LightState):
    for direction in AXIS_DIRECTIONS[axis]:
        lights[direction] = state

class Controller(ABC):
    mode: ControlMode

    def __init__(self, settings: SimulationSettings):
        self.settings = settings
        self.phase_timer_ms = 0.0

    @abstractmethod
    def reset(self, lights: Lights):
        pass

    @abstractmethod
    def run_tick(self, lights: Lights, dt_ms: float, sensors: Optional[SensorSnapshot]):
        pass

    @abstractmethod
    def phase_name(self, lights: Lights) -> str:
        pass
