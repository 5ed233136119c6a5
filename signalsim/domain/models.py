from enum import Enum
from typing import List, Optional, Dict
from pydantic import BaseModel, Field

class Direction(str, Enum):
    NORTH = "NORTH"
    EAST = "EAST"
    SOUTH = "SOUTH"
    WEST = "WEST"

    @property
    def ordinal(self) -> int:
        return _DIRECTION_ORDER.index(self)

    def step(self, n: int) -> "Direction":
        # N -> E -> S -> W -> N
        return _DIRECTION_ORDER[(self.ordinal + n) % 4]

    @property
    def opposite(self) -> "Direction":
        return self.step(2)

    @property
    def axis(self) -> str:
        return "NS" if self in (Direction.NORTH, Direction.SOUTH) else "EW"

_DIRECTION_ORDER = [Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST]

class TurnType(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STRAIGHT = "STRAIGHT"

    @property
    def steps(self) -> int:
        return {TurnType.LEFT: 3, TurnType.RIGHT: 1, TurnType.STRAIGHT: 2}[self]

def destination_for(origin: Direction, turn: TurnType) -> Direction:
    return origin.step(turn.steps)

class LightState(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"
    OFF = "OFF"

    @property
    def can_proceed(self) -> bool:
        return self in (LightState.GREEN, LightState.YELLOW)

class VehicleState(str, Enum):
    APPROACHING = "APPROACHING"
    WAITING = "WAITING"
    CROSSING = "CROSSING"
    EXITING = "EXITING"
    COMPLETED = "COMPLETED"

class ControlMode(str, Enum):
    FIXED = "FIXED"
    ADAPTIVE = "ADAPTIVE"

class Vehicle(BaseModel):
    id: int
    origin: Direction
    destination: Direction
    turn: TurnType
    x: float
    y: float
    heading: float # radians, y axis points down
    speed: float = 0.0
    max_speed: float
    state: VehicleState = VehicleState.APPROACHING

    # Wait bookkeeping, all in simulated milliseconds
    wait_start_ms: Optional[float] = None
    banked_wait_ms: float = 0.0
    total_wait_ms: float = 0.0
    held_by_queue: bool = False

    in_intersection: bool = False
    has_entered: bool = False
    path_progress: float = 0.0
    turn_started: bool = False
    turn_progress: float = 0.0
    turn_target_heading: Optional[float] = None

    @property
    def is_waiting(self) -> bool:
        return self.state == VehicleState.WAITING

    @property
    def is_completed(self) -> bool:
        return self.state == VehicleState.COMPLETED

class SensorReading(BaseModel):
    cars_waiting: int = 0
    wait_time_ms: float = 0.0
    first_wait_start_ms: Optional[float] = None
    detected: List[int] = [] # vehicle ids inside the detection zone

    @property
    def priority(self) -> float:
        return self.cars_waiting * (self.wait_time_ms / 1000.0)

SensorSnapshot = Dict[Direction, SensorReading]

def empty_snapshot() -> SensorSnapshot:
    return {d: SensorReading() for d in Direction}

class VehicleCompletedEvent(BaseModel):
    vehicle_id: int
    origin: Direction
    total_wait_ms: float

# API/Response Models

class VehicleView(BaseModel):
    id: int
    origin: Direction
    destination: Direction
    turn: TurnType
    state: VehicleState
    x: float
    y: float
    heading: float
    speed: float
    waitMs: float

class SimulationSnapshot(BaseModel):
    tick: int
    timeMs: float
    mode: ControlMode
    phase: str
    paused: bool
    lights: Dict[Direction, LightState]
    vehicles: List[VehicleView]
    vehicleCount: int
    sensors: Dict[Direction, SensorReading]

class ModeUpdate(BaseModel):
    mode: ControlMode

class CurvePoint(BaseModel):
    x: float
    y: float
    heading: float

class TurnPathView(BaseModel):
    origin: Direction
    turn: TurnType
    destination: Direction
    points: List[CurvePoint] = Field(default_factory=list)
