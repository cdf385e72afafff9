# gpxmap/analyze/simplify.py
"""
Ramer-Douglas-Peucker polyline simplification for gpxmap.

The shape decision and the speed aggregation are kept apart:

  - `rdp_simplify` decides which points survive and *reports* the speed each
    collapsed stretch would hand to its last point. It mutates nothing.
  - `apply_aggregated_speeds` writes those speeds onto the kept points.
  - `simplify` does both, which is what the map pipeline uses.

Aggregated speeds depend on processing order: a left stretch is always
finished before the right stretch that shares its junction point, and the
right stretch averages over the junction's already-aggregated speed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Sequence

from gpxmap.geometry import Point, perpendicular_distance

DEFAULT_EPSILON = 0.5


@dataclass(frozen=True)
class SimplifyResult:
    """
    Retained points plus the speed overwrites a collapse would perform.

    `aggregated_speeds` maps a position in `points` to the mean speed of the
    stretch that collapsed onto that point.
    """
    points: list[Point]
    aggregated_speeds: dict[int, float] = field(default_factory=dict)


def _farthest_point(points: Sequence[Point], start: int, end: int) -> tuple[Optional[int], float]:
    """
    Index and distance of the interior point farthest from the chord start->end.

    Returns (None, 0.0) when no interior point lies off the chord, including
    when the chord endpoints coincide and the distance is undefined.
    """
    a, b = points[start], points[end]
    if math.hypot(b.x - a.x, b.y - a.y) == 0:
        return None, 0.0

    index: Optional[int] = None
    dmax = 0.0
    for i in range(start + 1, end):
        d = perpendicular_distance(points[i], a, b)
        if d > dmax:
            index = i
            dmax = d
    return index, dmax


def rdp_simplify(points: Sequence[Point], epsilon: float = DEFAULT_EPSILON) -> SimplifyResult:
    """
    Simplify `points` to within `epsilon` without touching any point.

    Uses an explicit work list instead of recursion so long tracks do not hit
    the interpreter's recursion limit.
    """
    if epsilon < 0:
        raise ValueError(f"epsilon must be >= 0, got {epsilon}")

    pts = list(points)
    if len(pts) <= 2:
        return SimplifyResult(points=pts)

    overlay: dict[int, float] = {}   # source index -> aggregated speed
    keep = {0, len(pts) - 1}
    work = [(0, len(pts) - 1)]

    while work:
        start, end = work.pop()
        if end - start < 2:
            continue

        index, dmax = _farthest_point(pts, start, end)
        if index is not None and dmax >= epsilon:
            keep.add(index)
            # LIFO: the left half is fully processed before the right one
            work.append((index, end))
            work.append((start, index))
            continue

        total = sum(overlay.get(i, pts[i].speed) for i in range(start, end + 1))
        overlay[end] = total / (end - start + 1)

    order = sorted(keep)
    position = {src: pos for pos, src in enumerate(order)}
    return SimplifyResult(
        points=[pts[i] for i in order],
        aggregated_speeds={position[i]: speed for i, speed in overlay.items()},
    )


def apply_aggregated_speeds(result: SimplifyResult) -> list[Point]:
    """Write the aggregated speeds onto the retained points and return them."""
    for pos, speed in result.aggregated_speeds.items():
        result.points[pos].speed = speed
    return result.points


def simplify(points: Sequence[Point], epsilon: float = DEFAULT_EPSILON) -> list[Point]:
    """Simplify `points` and apply the collapse speed averaging."""
    return apply_aggregated_speeds(rdp_simplify(points, epsilon))
