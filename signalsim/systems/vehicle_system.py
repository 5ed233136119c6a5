import logging
import math
from typing import Dict, Optional, Protocol, Tuple
from signalsim.domain.models import Direction, LightState, TurnType, Vehicle, VehicleState
from signalsim.domain.settings import SimulationSettings
from signalsim.domain import config
from signalsim.geometry.intersection import GeometryError, IntersectionGeometry, outbound_heading

log = logging.getLogger(__name__)

class TrafficView(Protocol):
    """Read-only view of the other vehicles, handed to each update call."""

    def car_ahead(self, vehicle: Vehicle) -> Optional[Tuple[Vehicle, float]]:
        ...

def normalize_angle(angle: float) -> float:
    """Wrap ``angle`` into (-pi, pi]."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle <= -math.pi:
        angle += 2 * math.pi
    return angle

class VehicleSystem:
    """Per-vehicle state machine: APPROACHING -> WAITING -> CROSSING -> EXITING -> COMPLETED."""

    def __init__(self, geometry: IntersectionGeometry, settings: SimulationSettings):
        self.geometry = geometry
        self.settings = settings

    def update(self, vehicle: Vehicle, dt: float, lights: Dict[Direction, LightState],
               now_ms: float, traffic: TrafficView):
        if vehicle.is_completed:
            return
        light = lights[Direction(vehicle.origin)]

        # Work on a copy so a geometry failure leaves the vehicle as it was
        v = vehicle.model_copy()
        try:
            if v.state == VehicleState.APPROACHING:
                self._update_approaching(v, dt, light, now_ms, traffic)
            elif v.state == VehicleState.WAITING:
                self._update_waiting(v, light, now_ms, traffic)
            elif v.state == VehicleState.CROSSING:
                self._update_crossing(v, dt)
            elif v.state == VehicleState.EXITING:
                self._update_exiting(v)
            self._move(v, dt)
        except GeometryError as exc:
            log.warning("Vehicle %s skipped this tick: %s", vehicle.id, exc)
            return

        for name in Vehicle.model_fields:
            setattr(vehicle, name, getattr(v, name))

    def _update_approaching(self, v: Vehicle, dt: float, light: LightState,
                            now_ms: float, traffic: TrafficView):
        distance = self.geometry.distance_to_stop_line(v.origin, v.x, v.y)
        ahead = traffic.car_ahead(v)
        queue_stop = ahead is not None and ahead[1] < config.FOLLOWING_GAP
        light_stop = 0.0 <= distance <= config.STOP_THRESHOLD and light == LightState.RED

        if light_stop or queue_stop:
            self._enter_waiting(v, now_ms, light_induced=light_stop)
            return

        v.speed = min(v.max_speed, v.speed + config.APPROACH_ACCELERATION * dt)
        if v.in_intersection:
            v.has_entered = True
            v.state = VehicleState.CROSSING

    def _update_waiting(self, v: Vehicle, light: LightState, now_ms: float, traffic: TrafficView):
        v.speed = 0.0
        if v.wait_start_ms is not None:
            v.total_wait_ms = v.banked_wait_ms + (now_ms - v.wait_start_ms)

        if light.can_proceed:
            self._leave_waiting(v, now_ms)
            v.state = VehicleState.CROSSING
            return

        # Stopped only for the car ahead: resume once the gap opens
        if v.held_by_queue:
            ahead = traffic.car_ahead(v)
            if ahead is None or ahead[1] >= config.FOLLOWING_GAP:
                self._leave_waiting(v, now_ms)
                v.state = VehicleState.APPROACHING

    def _update_crossing(self, v: Vehicle, dt: float):
        v.speed = min(v.max_speed * config.CROSSING_SPEED_FACTOR,
                      v.speed + config.CROSSING_ACCELERATION * dt)

        if v.in_intersection:
            v.has_entered = True
            if not v.turn_started:
                v.turn_started = True
                v.turn_progress = 0.0
                v.turn_target_heading = outbound_heading(v.destination)

        if v.turn_started and v.turn_progress < 1.0:
            self._perform_turn(v, dt)

        if v.has_entered and not v.in_intersection and v.path_progress > 0:
            v.state = VehicleState.EXITING

        v.path_progress += dt

    def _perform_turn(self, v: Vehicle, dt: float):
        v.turn_progress += config.TURN_RATE * dt
        if v.turn == TurnType.STRAIGHT:
            return

        target = v.turn_target_heading
        if v.turn_progress < 1.0:
            diff = normalize_angle(target - v.heading)
            v.heading = normalize_angle(
                v.heading + diff * v.turn_progress * dt * config.TURN_INTERPOLATION_GAIN)
        else:
            lane = self.geometry.lane_center(v.destination)
            if not math.isfinite(lane):
                raise GeometryError(f"malformed lane center for {v.destination}")
            v.heading = target
            if Direction(v.destination) in (Direction.NORTH, Direction.SOUTH):
                v.x = lane
            else:
                v.y = lane

    def _update_exiting(self, v: Vehicle):
        v.speed = v.max_speed
        if self.geometry.is_outside_canvas(v.x, v.y):
            v.state = VehicleState.COMPLETED

    def _enter_waiting(self, v: Vehicle, now_ms: float, light_induced: bool):
        v.state = VehicleState.WAITING
        v.speed = 0.0
        v.held_by_queue = not light_induced
        if light_induced or self.settings.count_queue_wait:
            v.wait_start_ms = now_ms

    def _leave_waiting(self, v: Vehicle, now_ms: float):
        if v.wait_start_ms is not None:
            v.banked_wait_ms += now_ms - v.wait_start_ms
            v.total_wait_ms = v.banked_wait_ms
        v.wait_start_ms = None
        v.held_by_queue = False

    def _move(self, v: Vehicle, dt: float):
        if v.speed > 0:
            x = v.x + math.cos(v.heading) * v.speed * dt
            y = v.y + math.sin(v.heading) * v.speed * dt
            if not (math.isfinite(x) and math.isfinite(y)):
                raise GeometryError(f"vehicle {v.id} moved to ({x}, {y})")
            v.x, v.y = x, y
        v.in_intersection = self.geometry.contains(v.x, v.y)
