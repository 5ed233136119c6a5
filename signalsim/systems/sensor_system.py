from typing import Iterable, NamedTuple
from signalsim.domain.models import Direction, SensorReading, SensorSnapshot, Vehicle
from signalsim.geometry.intersection import IntersectionGeometry

class DetectionZone(NamedTuple):
    x1: float
    y1: float
    x2: float
    y2: float

    def contains(self, x: float, y: float) -> bool:
        return self.x1 <= x <= self.x2 and self.y1 <= y <= self.y2

class SensorSystem:
    """Virtual loop detectors in front of each stop line.

    Every scan rebuilds the snapshot from the vehicles alone; nothing is
    carried over between ticks except the vehicles' own wait clocks.
    """

    def __init__(self, geometry: IntersectionGeometry, detector_distance: float):
        self.geometry = geometry
        self.detector_distance = detector_distance

    def detection_zone(self, direction: Direction) -> DetectionZone:
        direction = Direction(direction)
        line = self.geometry.stop_line(direction)
        half = self.geometry.road_width / 2
        cx, cy, d = self.geometry.center_x, self.geometry.center_y, self.detector_distance
        if direction == Direction.NORTH:
            return DetectionZone(cx - half, line.y1 - d, cx + half, line.y1)
        if direction == Direction.EAST:
            return DetectionZone(line.x1, cy - half, line.x1 + d, cy + half)
        if direction == Direction.SOUTH:
            return DetectionZone(cx - half, line.y1, cx + half, line.y1 + d)
        return DetectionZone(line.x1 - d, cy - half, line.x1, cy + half)

    def scan(self, vehicles: Iterable[Vehicle], now_ms: float) -> SensorSnapshot:
        zones = {d: self.detection_zone(d) for d in Direction}
        snapshot: SensorSnapshot = {d: SensorReading() for d in Direction}

        for v in vehicles:
            direction = Direction(v.origin)
            if not zones[direction].contains(v.x, v.y):
                continue
            reading = snapshot[direction]
            reading.detected.append(v.id)
            if v.is_waiting:
                reading.cars_waiting += 1
                started = now_ms - v.total_wait_ms
                if reading.first_wait_start_ms is None or started < reading.first_wait_start_ms:
                    reading.first_wait_start_ms = started

        for reading in snapshot.values():
            if reading.cars_waiting > 0 and reading.first_wait_start_ms is not None:
                reading.wait_time_ms = now_ms - reading.first_wait_start_ms
        return snapshot
