import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from signalsim.domain.models import ControlMode, Direction, TurnType
from signalsim.domain.settings import SettingsUpdate

log = logging.getLogger(__name__)

class Command(ABC):
    @abstractmethod
    def execute(self, kernel: Any):
        pass

class SetControlModeCommand(Command):
    def __init__(self, mode: ControlMode):
        self.mode = ControlMode(mode)

    def execute(self, kernel: Any):
        kernel.set_mode(self.mode)

class UpdateSettingsCommand(Command):
    def __init__(self, updates: SettingsUpdate):
        self.updates = updates

    def execute(self, kernel: Any):
        kernel.apply_settings(kernel.state.settings.merged(self.updates))

class ResetCommand(Command):
    def execute(self, kernel: Any):
        kernel.reset()

class PauseCommand(Command):
    def execute(self, kernel: Any):
        kernel.state.paused = True

class ResumeCommand(Command):
    def execute(self, kernel: Any):
        kernel.state.paused = False

class SpawnVehicleCommand(Command):
    def __init__(self, direction: Optional[Direction] = None, turn: Optional[TurnType] = None):
        self.direction = direction
        self.turn = turn

    def execute(self, kernel: Any):
        # Force a spawn attempt, still subject to the clearance check
        if kernel.vehicle_manager.try_spawn(self.direction, self.turn) is None:
            log.info("Requested spawn was rejected")
