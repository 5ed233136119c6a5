import logging
from typing import List, NamedTuple, Optional
from signalsim.controllers.base import Controller, Lights, set_all_red, set_axis
from signalsim.domain.models import ControlMode, Direction, LightState, SensorSnapshot

log = logging.getLogger(__name__)

class Phase(NamedTuple):
    name: str
    axis: Optional[str]
    light: LightState
    duration: str # settings attribute holding the phase length

FIXED_PHASES: List[Phase] = [
    Phase("NS-GREEN", "NS", LightState.GREEN, "green_ms"),
    Phase("NS-YELLOW", "NS", LightState.YELLOW, "yellow_ms"),
    Phase("ALL-RED", None, LightState.RED, "all_red_ms"),
    Phase("EW-GREEN", "EW", LightState.GREEN, "green_ms"),
    Phase("EW-YELLOW", "EW", LightState.YELLOW, "yellow_ms"),
    Phase("ALL-RED", None, LightState.RED, "all_red_ms"),
]

class FixedCycleController(Controller):
    mode = ControlMode.FIXED

    def __init__(self, settings):
        super().__init__(settings)
        self.phase_index = 0

    @property
    def phase(self) -> Phase:
        return FIXED_PHASES[self.phase_index]

    def phase_name(self, lights: Lights) -> str:
        return self.phase.name

    def reset(self, lights: Lights):
        self.phase_index = 0
        self.phase_timer_ms = 0.0
        self._apply_phase(lights)

    def run_tick(self, lights: Lights, dt_ms: float, sensors: Optional[SensorSnapshot]):
        self.phase_timer_ms += dt_ms
        if self.phase_timer_ms >= getattr(self.settings, self.phase.duration):
            self.advance_phase(lights)

    def advance_phase(self, lights: Lights):
        self.phase_index = (self.phase_index + 1) % len(FIXED_PHASES)
        self.phase_timer_ms = 0.0
        self._apply_phase(lights)
        log.debug("Fixed cycle entered phase %d (%s)", self.phase_index, self.phase.name)

    def _apply_phase(self, lights: Lights):
        set_all_red(lights)
        if self.phase.axis is not None:
            set_axis(lights, self.phase.axis, self.phase.light)

class AdaptiveController(Controller):
    mode = ControlMode.ADAPTIVE

    def phase_name(self, lights: Lights) -> str:
        green = self.current_green(lights)
        return f"{green.axis}-GREEN" if green else "ALL-RED"

    def reset(self, lights: Lights):
        self.phase_timer_ms = 0.0
        set_all_red(lights)
        set_axis(lights, "NS", LightState.GREEN)

    def run_tick(self, lights: Lights, dt_ms: float, sensors: Optional[SensorSnapshot]):
        self.phase_timer_ms += dt_ms

        # Minimum green guard
        if self.phase_timer_ms < self.settings.min_green_ms:
            return
        if not sensors:
            return

        current = self.current_green(lights)
        nxt = self.next_direction(lights, sensors)
        if nxt is not None and nxt != current:
            self.change_to(lights, nxt)

    @staticmethod
    def current_green(lights: Lights) -> Optional[Direction]:
        for direction in Direction:
            if lights[direction] == LightState.GREEN:
                return direction
        return None

    @staticmethod
    def next_direction(lights: Lights, sensors: SensorSnapshot) -> Optional[Direction]:
        best: Optional[Direction] = None
        best_priority = 0.0
        for direction in Direction:
            reading = sensors.get(direction)
            if reading is None or lights[direction] == LightState.GREEN or reading.cars_waiting <= 0:
                continue
            # Only a strictly higher score replaces the running best
            if reading.priority > best_priority:
                best_priority = reading.priority
                best = direction
        return best

    def change_to(self, lights: Lights, direction: Direction):
        set_all_red(lights)
        set_axis(lights, direction.axis, LightState.GREEN)
        self.phase_timer_ms = 0.0
        log.debug("Adaptive controller switched green to %s", direction.axis)
