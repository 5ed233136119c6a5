"""Quadratic turn curves through the intersection footprint.

Curves are stored relative to the intersection center for the default
road width. ``start`` sits where the inbound lane meets the footprint
edge and ``end`` where the outbound lane leaves it.
"""
import math
from typing import Dict, List, NamedTuple, Tuple
from signalsim.domain.models import Direction, TurnType
from signalsim.domain import config
from signalsim.geometry.intersection import IntersectionGeometry, Point

_H = config.ROAD_WIDTH / 2   # half footprint
_O = config.ROAD_WIDTH / 4   # lane center offset

class QuadraticCurve(NamedTuple):
    start: Point
    control: Point
    end: Point

class CurveSample(NamedTuple):
    x: float
    y: float
    heading: float

N, E, S, W = Direction.NORTH, Direction.EAST, Direction.SOUTH, Direction.WEST
L, R, F = TurnType.LEFT, TurnType.RIGHT, TurnType.STRAIGHT

TURN_PATHS: Dict[Tuple[Direction, TurnType], QuadraticCurve] = {
    # From north, driving south on x = -O
    (N, R): QuadraticCurve(Point(-_O, -_H), Point(-_O, +_O), Point(+_H, +_O)),
    (N, L): QuadraticCurve(Point(-_O, -_H), Point(-_O, -_O), Point(-_H, -_O)),
    (N, F): QuadraticCurve(Point(-_O, -_H), Point(-_O, 0.0), Point(-_O, +_H)),
    # From east, driving west on y = -O
    (E, R): QuadraticCurve(Point(+_H, -_O), Point(-_O, -_O), Point(-_O, +_H)),
    (E, L): QuadraticCurve(Point(+_H, -_O), Point(+_O, -_O), Point(+_O, -_H)),
    (E, F): QuadraticCurve(Point(+_H, -_O), Point(0.0, -_O), Point(-_H, -_O)),
    # From south, driving north on x = +O
    (S, R): QuadraticCurve(Point(+_O, +_H), Point(+_O, -_O), Point(-_H, -_O)),
    (S, L): QuadraticCurve(Point(+_O, +_H), Point(+_O, +_O), Point(+_H, +_O)),
    (S, F): QuadraticCurve(Point(+_O, +_H), Point(+_O, 0.0), Point(+_O, -_H)),
    # From west, driving east on y = +O
    (W, R): QuadraticCurve(Point(-_H, +_O), Point(+_O, +_O), Point(+_O, -_H)),
    (W, L): QuadraticCurve(Point(-_H, +_O), Point(-_O, +_O), Point(-_O, +_H)),
    (W, F): QuadraticCurve(Point(-_H, +_O), Point(0.0, +_O), Point(+_H, +_O)),
}

def _bezier(a: float, b: float, c: float, t: float) -> float:
    u = 1.0 - t
    return u * u * a + 2.0 * u * t * b + t * t * c

def _tangent(a: float, b: float, c: float, t: float) -> float:
    return 2.0 * (1.0 - t) * (b - a) + 2.0 * t * (c - b)

def sample_curve(curve: QuadraticCurve, t: float) -> CurveSample:
    """Position and heading on ``curve`` at parameter ``t`` (clamped to [0, 1])."""
    t = min(1.0, max(0.0, t))
    p0, p1, p2 = curve
    if t >= 1.0:
        x, y = p2.x, p2.y
    else:
        x = _bezier(p0.x, p1.x, p2.x, t)
        y = _bezier(p0.y, p1.y, p2.y, t)
    dx = _tangent(p0.x, p1.x, p2.x, t)
    dy = _tangent(p0.y, p1.y, p2.y, t)
    return CurveSample(x, y, math.atan2(dy, dx))

def lookup(origin: Direction, turn: TurnType) -> QuadraticCurve:
    try:
        return TURN_PATHS[(Direction(origin), TurnType(turn))]
    except KeyError:
        raise ValueError(f"no turn path for {origin}/{turn}") from None

def turn_path_for(geometry: IntersectionGeometry, origin: Direction, turn: TurnType) -> QuadraticCurve:
    """The table curve scaled to ``geometry`` and moved to its center."""
    scale = geometry.half_size / _H
    cx, cy = geometry.center_x, geometry.center_y
    return QuadraticCurve(*(Point(cx + p.x * scale, cy + p.y * scale) for p in lookup(origin, turn)))

def sample_points(curve: QuadraticCurve, count: int = 11) -> List[CurveSample]:
    if count < 2:
        raise ValueError("count must be at least 2")
    return [sample_curve(curve, i / (count - 1)) for i in range(count)]
