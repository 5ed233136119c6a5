import logging
import random
from typing import Dict, List, Optional
from signalsim.application.commands import Command
from signalsim.domain.models import (
    ControlMode, Direction, LightState, SensorReading, SimulationSnapshot, Vehicle, empty_snapshot
)
from signalsim.domain.settings import SimulationSettings
from signalsim.domain.state import SimulationState
from signalsim.domain import config
from signalsim.geometry.intersection import IntersectionGeometry
from signalsim.kernel.command_queue import CommandQueue
from signalsim.kernel.snapshot_builder import SnapshotBuilder
from signalsim.systems.sensor_system import SensorSystem
from signalsim.systems.signal_system import SignalSystem
from signalsim.systems.vehicle_manager import CompletionListener, VehicleManager

log = logging.getLogger(__name__)

class SimulationKernel:
    """Fixed-step driver: signals, then vehicles, then sensors, once per tick."""

    def __init__(self, settings: Optional[SimulationSettings] = None,
                 geometry: Optional[IntersectionGeometry] = None):
        self.state = SimulationState(settings=settings or SimulationSettings())
        self.geometry = geometry or IntersectionGeometry()
        self.dt = config.TICK_SECONDS
        self.command_queue = CommandQueue()
        self.snapshot_builder = SnapshotBuilder()
        self.rng = random.Random(config.DEFAULT_SEED)

        settings = self.state.settings
        self.signal_system = SignalSystem(settings)
        self.vehicle_manager = VehicleManager(self.geometry, settings, self.rng)
        self.sensor_system = SensorSystem(self.geometry, settings.detector_distance)
        self.initialized = False

    def initialize(self, seed: int = config.DEFAULT_SEED):
        self.rng.seed(seed)
        self.reset()
        self.initialized = True
        log.info("Simulation kernel initialized (seed %s, mode %s)", seed, self.signal_system.mode.value)

    def reset(self):
        self.state.tick_id = 0
        self.state.time_ms = 0.0
        self.state.sensors = empty_snapshot()
        self.vehicle_manager.reset()
        self.signal_system.reset()
        log.info("Simulation reset")

    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def add_completion_listener(self, listener: CompletionListener):
        self.vehicle_manager.add_listener(listener)

    def run_tick(self, dt: Optional[float] = None) -> bool:
        """Advance one tick of ``dt`` seconds. Returns False while paused."""
        if not self.initialized:
            self.initialize()

        # 1. Consume Commands
        self.command_queue.run_pending(self)

        if self.state.paused:
            return False

        dt = self.dt if dt is None else dt
        if dt < 0:
            raise ValueError(f"dt must not be negative, got {dt}")
        dt_ms = dt * 1000.0
        now = self.state.time_ms
        adaptive = self.signal_system.mode == ControlMode.ADAPTIVE

        # 2. Signals read the detector snapshot from the previous tick
        self.signal_system.update(dt_ms, self.state.sensors if adaptive else None)

        # 3. Vehicles all see the same light snapshot
        self.vehicle_manager.update(dt, self.signal_system.light_states(), now)

        # 4. Sensors
        if adaptive:
            self.state.sensors = self.sensor_system.scan(self.vehicle_manager.vehicles, now)

        # 5. Advance Time
        self.state.time_ms += dt_ms
        self.state.tick_id += 1
        return True

    def set_mode(self, mode: ControlMode):
        mode = ControlMode(mode)
        self.state.settings = self.state.settings.model_copy(update={"mode": mode})
        self.state.sensors = empty_snapshot()
        self._push_settings()
        self.signal_system.set_mode(mode)

    def apply_settings(self, settings: SimulationSettings):
        mode_changed = settings.mode != self.signal_system.mode
        self.state.settings = settings
        self._push_settings()
        if mode_changed:
            self.signal_system.set_mode(settings.mode)
        log.info("Settings updated: %s", settings.model_dump(mode="json"))

    def _push_settings(self):
        settings = self.state.settings
        self.signal_system.apply_settings(settings)
        self.vehicle_manager.apply_settings(settings)
        self.sensor_system.detector_distance = settings.detector_distance

    # Getters for API

    @property
    def vehicles(self) -> List[Vehicle]:
        return list(self.vehicle_manager.vehicles)

    def light_states(self) -> Dict[Direction, LightState]:
        return self.signal_system.light_states()

    def sensor_snapshot(self) -> Dict[Direction, SensorReading]:
        return {d: r.model_copy(deep=True) for d, r in self.state.sensors.items()}

    def get_state(self) -> SimulationSnapshot:
        return self.snapshot_builder.build(self)
