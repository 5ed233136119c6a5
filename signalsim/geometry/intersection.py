import math
from typing import Dict, NamedTuple
from signalsim.domain.models import Direction
from signalsim.domain import config

class GeometryError(ValueError):
    """Raised when a geometry query yields a point the simulation cannot use."""

class Point(NamedTuple):
    x: float
    y: float

class Segment(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float

def checked_point(x: float, y: float) -> Point:
    if not (math.isfinite(x) and math.isfinite(y)):
        raise GeometryError(f"malformed point ({x}, {y})")
    return Point(x, y)

# Heading a vehicle has while driving in from each approach (y axis points down)
INBOUND_HEADING: Dict[Direction, float] = {
    Direction.NORTH: math.pi / 2,
    Direction.EAST: math.pi,
    Direction.SOUTH: -math.pi / 2,
    Direction.WEST: 0.0,
}

# Heading a vehicle has while leaving toward each direction
OUTBOUND_HEADING: Dict[Direction, float] = {
    Direction.NORTH: -math.pi / 2,
    Direction.EAST: 0.0,
    Direction.SOUTH: math.pi / 2,
    Direction.WEST: math.pi,
}

def inbound_heading(direction: Direction) -> float:
    return INBOUND_HEADING[Direction(direction)]

def outbound_heading(direction: Direction) -> float:
    return OUTBOUND_HEADING[Direction(direction)]

def forward_coordinate(direction: Direction, x: float, y: float) -> float:
    """Position along the travel axis of vehicles arriving from ``direction``.

    Larger values are further along the road, so the vehicle ahead of
    another always has the larger forward coordinate.
    """
    direction = Direction(direction)
    if direction == Direction.NORTH:
        return y
    if direction == Direction.EAST:
        return -x
    if direction == Direction.SOUTH:
        return -y
    return x

class IntersectionGeometry:
    """Single four-way intersection with right-hand traffic.

    Every approach has one inbound and one outbound lane. Coordinates are
    canvas units with the origin at the top-left corner.
    """

    def __init__(
        self,
        center_x: float = config.CANVAS_WIDTH / 2,
        center_y: float = config.CANVAS_HEIGHT / 2,
        road_width: float = config.ROAD_WIDTH,
        canvas_width: float = config.CANVAS_WIDTH,
        canvas_height: float = config.CANVAS_HEIGHT,
        stop_line_offset: float = config.STOP_LINE_OFFSET,
        spawn_margin: float = config.SPAWN_MARGIN,
    ):
        self.center_x = center_x
        self.center_y = center_y
        self.road_width = road_width
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.stop_line_offset = stop_line_offset
        self.spawn_margin = spawn_margin

    @property
    def half_size(self) -> float:
        return self.road_width / 2

    @property
    def lane_offset(self) -> float:
        return self.road_width / 4

    def lane_center(self, direction: Direction) -> float:
        """Lateral coordinate of the lane carrying traffic toward ``direction``.

        x for NORTH/SOUTH, y for EAST/WEST.
        """
        direction = Direction(direction)
        off = self.lane_offset
        if direction == Direction.NORTH:
            return self.center_x + off
        if direction == Direction.SOUTH:
            return self.center_x - off
        if direction == Direction.EAST:
            return self.center_y + off
        return self.center_y - off

    def inbound_lane_center(self, direction: Direction) -> float:
        # Arriving from NORTH means driving toward SOUTH
        return self.lane_center(Direction(direction).opposite)

    def stop_line(self, direction: Direction) -> Segment:
        direction = Direction(direction)
        cx, cy, s, h = self.center_x, self.center_y, self.stop_line_offset, self.half_size
        if direction == Direction.NORTH:
            return Segment(cx - h, cy - s, cx, cy - s)
        if direction == Direction.SOUTH:
            return Segment(cx, cy + s, cx + h, cy + s)
        if direction == Direction.WEST:
            return Segment(cx - s, cy, cx - s, cy + h)
        return Segment(cx + s, cy - h, cx + s, cy)

    def distance_to_stop_line(self, direction: Direction, x: float, y: float) -> float:
        """Signed distance along the travel axis, positive before the line."""
        direction = Direction(direction)
        line = self.stop_line(direction)
        checked_point(line.x1, line.y1)
        if direction == Direction.NORTH:
            return line.y1 - y
        if direction == Direction.SOUTH:
            return y - line.y1
        if direction == Direction.WEST:
            return line.x1 - x
        return x - line.x1

    def spawn_point(self, direction: Direction) -> Point:
        direction = Direction(direction)
        lane = self.inbound_lane_center(direction)
        m = self.spawn_margin
        if direction == Direction.NORTH:
            return checked_point(lane, -m)
        if direction == Direction.SOUTH:
            return checked_point(lane, self.canvas_height + m)
        if direction == Direction.WEST:
            return checked_point(-m, lane)
        return checked_point(self.canvas_width + m, lane)

    def exit_point(self, direction: Direction) -> Point:
        direction = Direction(direction)
        lane = self.lane_center(direction)
        if direction == Direction.NORTH:
            return checked_point(lane, 0.0)
        if direction == Direction.SOUTH:
            return checked_point(lane, self.canvas_height)
        if direction == Direction.EAST:
            return checked_point(self.canvas_width, lane)
        return checked_point(0.0, lane)

    def contains(self, x: float, y: float) -> bool:
        h = self.half_size
        return abs(x - self.center_x) <= h and abs(y - self.center_y) <= h

    def is_outside_canvas(self, x: float, y: float, margin: float = config.EXIT_MARGIN) -> bool:
        return (x < -margin or x > self.canvas_width + margin or
                y < -margin or y > self.canvas_height + margin)
