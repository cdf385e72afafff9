# gpxmap/analyze/speed.py
"""
Speed derivation on planar tracks
"""

from __future__ import annotations

from typing import Sequence

from gpxmap.geometry import Point, distance, elapsed_seconds

# Planar units per second -> drawing speed units
SPEED_FACTOR = 100


def compute_speed(points: Sequence[Point], speed_factor: float = SPEED_FACTOR) -> None:
    """
    Overwrite `speed` on every point but the first from the previous point.

    A pair with zero or negative elapsed time (duplicate timestamps, clock
    skew) is skipped: the point keeps whatever speed it already had.
    """
    for prev, curr in zip(points, points[1:]):
        elapsed = elapsed_seconds(prev.timestamp, curr.timestamp)
        if elapsed <= 0:
            continue
        curr.speed = distance(prev, curr) / elapsed * speed_factor
