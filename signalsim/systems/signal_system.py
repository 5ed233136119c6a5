import logging
from typing import Dict, Optional
from signalsim.controllers.base import Controller
from signalsim.controllers.implementations import AdaptiveController, FixedCycleController
from signalsim.domain.models import ControlMode, Direction, LightState, SensorSnapshot
from signalsim.domain.settings import SimulationSettings

log = logging.getLogger(__name__)

CONTROLLERS = {
    ControlMode.FIXED: FixedCycleController,
    ControlMode.ADAPTIVE: AdaptiveController,
}

class SignalSystem:
    """Owns the per-direction light map and the controller that drives it.

    The controller is swapped only through :meth:`set_mode`; a mode change
    always restarts the new controller from its initial state.
    """

    def __init__(self, settings: SimulationSettings):
        self.settings = settings
        self.lights: Dict[Direction, LightState] = {d: LightState.RED for d in Direction}
        self.controller: Controller = CONTROLLERS[settings.mode](settings)
        self.controller.reset(self.lights)

    @property
    def mode(self) -> ControlMode:
        return self.controller.mode

    @property
    def phase_name(self) -> str:
        return self.controller.phase_name(self.lights)

    @property
    def phase_timer_ms(self) -> float:
        return self.controller.phase_timer_ms

    def set_mode(self, mode: ControlMode):
        mode = ControlMode(mode)
        self.controller = CONTROLLERS[mode](self.settings)
        self.controller.reset(self.lights)
        log.info("Signal control mode set to %s", mode.value)

    def apply_settings(self, settings: SimulationSettings):
        self.settings = settings
        self.controller.settings = settings

    def reset(self):
        self.controller.reset(self.lights)

    def update(self, dt_ms: float, sensors: Optional[SensorSnapshot] = None):
        self.controller.run_tick(self.lights, dt_ms, sensors)

    def light_states(self) -> Dict[Direction, LightState]:
        # Copy so every vehicle in a tick reads the same snapshot
        return dict(self.lights)
