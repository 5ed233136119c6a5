import logging
import math
import random
from typing import Callable, Dict, List, Optional, Tuple
from signalsim.domain.models import (
    Direction, LightState, TurnType, Vehicle, VehicleCompletedEvent, destination_for
)
from signalsim.domain.settings import SimulationSettings
from signalsim.domain import config
from signalsim.geometry.intersection import IntersectionGeometry, forward_coordinate, inbound_heading
from signalsim.systems.vehicle_system import VehicleSystem

log = logging.getLogger(__name__)

CompletionListener = Callable[[VehicleCompletedEvent], None]

class VehicleManager:
    """Sole owner of the vehicle list: spawns, advances and retires vehicles."""

    def __init__(self, geometry: IntersectionGeometry, settings: SimulationSettings,
                 rng: Optional[random.Random] = None):
        self.geometry = geometry
        self.settings = settings
        self.rng = rng or random.Random(config.DEFAULT_SEED)
        self.vehicle_system = VehicleSystem(geometry, settings)
        self.vehicles: List[Vehicle] = []
        self.next_vehicle_id = 1
        self.spawn_timer_ms = 0.0
        self.listeners: List[CompletionListener] = []

    def reset(self):
        self.vehicles = []
        self.next_vehicle_id = 1
        self.spawn_timer_ms = 0.0

    def apply_settings(self, settings: SimulationSettings):
        self.settings = settings
        self.vehicle_system.settings = settings

    def add_listener(self, listener: CompletionListener):
        self.listeners.append(listener)

    def update(self, dt: float, lights: Dict[Direction, LightState], now_ms: float):
        self.spawn_timer_ms += dt * 1000.0
        interval = self.settings.spawn_interval_ms
        if interval is not None and self.spawn_timer_ms >= interval:
            self.try_spawn()
            self.spawn_timer_ms = 0.0

        for v in self.vehicles:
            v.max_speed = self.settings.max_speed
            self.vehicle_system.update(v, dt, lights, now_ms, self)

        self._retire_completed()

    def try_spawn(self, direction: Optional[Direction] = None,
                  turn: Optional[TurnType] = None) -> Optional[Vehicle]:
        if direction is None:
            direction = self.rng.choice(list(Direction))
        direction = Direction(direction)
        spawn = self.geometry.spawn_point(direction)

        if self.vehicles_near(direction, spawn.x, spawn.y, config.SPAWN_CLEARANCE):
            log.debug("Spawn on %s rejected, approach not clear", direction.value)
            return None

        if turn is None:
            turn = self.rng.choice(list(TurnType))
        vehicle = Vehicle(
            id=self.next_vehicle_id,
            origin=direction,
            destination=destination_for(direction, turn),
            turn=turn,
            x=spawn.x,
            y=spawn.y,
            heading=inbound_heading(direction),
            max_speed=self.settings.max_speed,
        )
        self.next_vehicle_id += 1
        self.vehicles.append(vehicle)
        log.debug("Spawned vehicle %s from %s turning %s", vehicle.id, direction.value, turn.value)
        return vehicle

    def vehicles_near(self, direction: Direction, x: float, y: float, radius: float) -> List[Vehicle]:
        return [
            v for v in self.vehicles
            if v.origin == direction and math.hypot(v.x - x, v.y - y) < radius
        ]

    def car_ahead(self, vehicle: Vehicle) -> Optional[Tuple[Vehicle, float]]:
        """Closest same-approach vehicle strictly ahead of ``vehicle`` and the gap to it."""
        own = forward_coordinate(vehicle.origin, vehicle.x, vehicle.y)
        closest: Optional[Vehicle] = None
        closest_gap = math.inf
        for other in self.vehicles:
            if other.id == vehicle.id or other.origin != vehicle.origin:
                continue
            gap = forward_coordinate(other.origin, other.x, other.y) - own
            if 0 < gap < closest_gap:
                closest = other
                closest_gap = gap
        if closest is None:
            return None
        return closest, closest_gap

    def waiting_vehicles(self, direction: Direction) -> List[Vehicle]:
        return [v for v in self.vehicles if v.origin == direction and v.is_waiting]

    def _retire_completed(self):
        completed = [v for v in self.vehicles if v.is_completed]
        if not completed:
            return
        for v in completed:
            event = VehicleCompletedEvent(vehicle_id=v.id, origin=v.origin, total_wait_ms=v.total_wait_ms)
            log.debug("Vehicle %s completed after waiting %.0f ms", v.id, v.total_wait_ms)
            for listener in self.listeners:
                listener(event)
        self.vehicles = [v for v in self.vehicles if not v.is_completed]
