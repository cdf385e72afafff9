# gpxmap/normalize/bounds.py
"""
Running min/max bounds over coordinates and speeds.

Bounds are immutable values threaded through the pipeline: every `observe`
or `merge` returns a new Bounds. Each field is a min/max reduction whose
identity is "unset" (None), so folds may run in any order and give the same
result.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Iterable, Optional

from gpxmap.errors import UnsetBoundsError
from gpxmap.geometry import Point


def _lower(current: Optional[float], value: Optional[float]) -> Optional[float]:
    if value is None:
        return current
    if current is None or value < current:
        return value
    return current


def _upper(current: Optional[float], value: Optional[float]) -> Optional[float]:
    if value is None:
        return current
    if current is None or value > current:
        return value
    return current


@dataclass(frozen=True)
class Bounds:
    min_x: Optional[float] = None
    max_x: Optional[float] = None
    min_y: Optional[float] = None
    max_y: Optional[float] = None
    min_speed: Optional[float] = None
    max_speed: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @property
    def has_frame(self) -> bool:
        return None not in (self.min_x, self.max_x, self.min_y, self.max_y)

    def require_frame(self) -> "Bounds":
        """Return self, or raise if any coordinate field is still unset."""
        if not self.has_frame:
            raise UnsetBoundsError(
                "Coordinate bounds are unset; observe at least one point before normalizing "
                f"(got {self})"
            )
        return self

    @property
    def width(self) -> float:
        self.require_frame()
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        self.require_frame()
        return self.max_y - self.min_y

    def observe(self, point: Point) -> "Bounds":
        return observe(self, point)

    def merge(self, other: "Bounds") -> "Bounds":
        return merge(self, other)


EMPTY = Bounds()


def observe(bounds: Bounds, point: Point) -> Bounds:
    """Grow `bounds` to cover one point's coordinates and speed."""
    return Bounds(
        min_x=_lower(bounds.min_x, point.x),
        max_x=_upper(bounds.max_x, point.x),
        min_y=_lower(bounds.min_y, point.y),
        max_y=_upper(bounds.max_y, point.y),
        min_speed=_lower(bounds.min_speed, point.speed),
        max_speed=_upper(bounds.max_speed, point.speed),
    )


def merge(a: Bounds, b: Bounds) -> Bounds:
    """Field-wise union of two bounds."""
    return Bounds(
        min_x=_lower(a.min_x, b.min_x),
        max_x=_upper(a.max_x, b.max_x),
        min_y=_lower(a.min_y, b.min_y),
        max_y=_upper(a.max_y, b.max_y),
        min_speed=_lower(a.min_speed, b.min_speed),
        max_speed=_upper(a.max_speed, b.max_speed),
    )


def bounds_of(points: Iterable[Point], start: Bounds = EMPTY) -> Bounds:
    """Fold `observe` over `points`, starting from `start`."""
    bounds = start
    for p in points:
        bounds = observe(bounds, p)
    return bounds


def merge_all(items: Iterable[Bounds]) -> Bounds:
    out = EMPTY
    for b in items:
        out = merge(out, b)
    return out


def speed_only(bounds: Bounds) -> Bounds:
    """Drop the coordinate fields, keeping only the speed range."""
    return replace(EMPTY, min_speed=bounds.min_speed, max_speed=bounds.max_speed)


def frame_only(bounds: Bounds) -> Bounds:
    """Drop the speed fields, keeping only the coordinate extent."""
    return replace(bounds, min_speed=None, max_speed=None)
