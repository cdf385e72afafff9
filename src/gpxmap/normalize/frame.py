# gpxmap/normalize/frame.py
"""
Place every track of a batch into one shared drawing frame.

The frame origin is the batch's minimum x/y, and y is flipped so that it
grows downward (SVG convention): the northernmost point ends up at y == 0.
"""

from __future__ import annotations

from typing import Sequence

from gpxmap.geometry import Point, Track
from gpxmap.normalize.bounds import Bounds, bounds_of, frame_only, merge_all


def normalize(points: Sequence[Point], frame_bounds: Bounds) -> None:
    """Translate `points` in place so the frame minimum sits at the origin."""
    frame_bounds.require_frame()
    min_x, min_y = frame_bounds.min_x, frame_bounds.min_y
    for p in points:
        p.x = p.x - min_x
        p.y = p.y - min_y


def flip_vertical(points: Sequence[Point], frame_max_y: float) -> None:
    for p in points:
        p.y = frame_max_y - p.y


def normalize_tracks(tracks: Sequence[Track], frame_bounds: Bounds) -> Bounds:
    """
    Translate and flip all tracks using the batch-wide `frame_bounds`.

    The flip axis is the largest y over *all* tracks after translation, so
    tracks keep their relative placement. Returns the normalized frame,
    coordinates only: speeds are not final at this stage.
    """
    frame_bounds.require_frame()
    for track in tracks:
        normalize(track.points, frame_bounds)

    max_y = max((p.y for t in tracks for p in t.points), default=0.0)
    for track in tracks:
        flip_vertical(track.points, max_y)

    return frame_only(merge_all(bounds_of(t.points) for t in tracks))
