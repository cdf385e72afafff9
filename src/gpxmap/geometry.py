# gpxmap/geometry.py
"""
Planar geometry primitives for gpxmap.

Coordinates here are *projected* planar units: raw longitude/latitude scaled
by a fixed distance factor (see `project`). No spherical math is done in this
module; the scale is only meant to give the drawing a usable size.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass, field
from typing import Union

# Raw geographic degrees -> planar drawing units
DISTANCE_FACTOR = 10000
COORDINATE_PRECISION = 2

Timestamp = Union[_dt.datetime, float]


@dataclass(eq=False)
class Point:
    """
    A single timestamped planar sample.

    `speed` is derived and mutable; it starts at 0 and is overwritten by the
    speed deriver and by simplification collapse.
    """
    x: float
    y: float
    timestamp: Timestamp
    speed: float = 0.0


@dataclass
class Track:
    id: str
    points: list[Point] = field(default_factory=list)


def project(value: float, *, factor: float = DISTANCE_FACTOR,
            precision: int = COORDINATE_PRECISION) -> float:
    """Scale a raw geographic coordinate into planar units."""
    return round(float(value) * factor, precision)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def perpendicular_distance(p: Point, a: Point, b: Point) -> float:
    """
    Distance from `p` to the infinite line through `a` and `b`.

    Callers must guard the coincident case (`a` and `b` at the same place);
    this function raises ZeroDivisionError there rather than guessing.
    """
    normal_length = math.hypot(b.x - a.x, b.y - a.y)
    cross = (p.x - a.x) * (b.y - a.y) - (p.y - a.y) * (b.x - a.x)
    return abs(cross) / normal_length


def elapsed_seconds(start: Timestamp, end: Timestamp) -> float:
    """Seconds from `start` to `end`; negative when the clock went backwards."""
    delta = end - start
    if isinstance(delta, _dt.timedelta):
        return delta.total_seconds()
    return float(delta)
