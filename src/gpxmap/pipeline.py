# gpxmap/pipeline.py
"""
gpxmap map pipeline

Stages, per batch of tracks:

  1. build     raw (x, y, timestamp) samples -> projected Track
  2. simplify  Ramer-Douglas-Peucker, per track
  3. frame     per-track bounds, merged into one frame
  4. normalize translate + flip every track into the frame
  5. speed     recompute speeds on normalized coordinates
  6. limits    speed bounds across every track in the batch
  7. segments  one colored line per consecutive point pair

Stages 1-3 are independent per track. Stage 4 onwards needs the merged
frame, so the batch is a barrier between them.

A malformed track is excluded from the batch and reported in
`MapResult.failures`; the remaining tracks are still drawn.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol, Sequence

from gpxmap.analyze.simplify import simplify
from gpxmap.analyze.speed import compute_speed
from gpxmap.config import MapSettings
from gpxmap.errors import InvalidTrackError, TrackError
from gpxmap.formats.gpx import parse_gpx_time
from gpxmap.geometry import Point, Track, project
from gpxmap.normalize.bounds import EMPTY, Bounds, bounds_of, merge_all, speed_only
from gpxmap.normalize.frame import normalize_tracks
from gpxmap.util.logging import log
from gpxmap.visualize.colors import ColorSample, color_for

Sample = tuple[Any, Any, Any]


class SegmentRenderer(Protocol):
    def canvas(self, width: float, height: float) -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float, *,
             stroke: str, stroke_width: float, stroke_opacity: float) -> None: ...


@dataclass(frozen=True)
class Segment:
    track_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    color: ColorSample
    width: float
    opacity: float


@dataclass(frozen=True)
class TrackFailure:
    track_id: str
    error: TrackError


@dataclass
class MapResult:
    tracks: list[Track]
    frame: Bounds = EMPTY
    speed: Bounds = EMPTY
    segments: list[Segment] = field(default_factory=list)
    failures: list[TrackFailure] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0


# ---------------------------
# Track construction
# ---------------------------
def _timestamp(value: Any) -> Optional[_dt.datetime]:
    if isinstance(value, _dt.datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=_dt.timezone.utc)
        return value
    if isinstance(value, str):
        return parse_gpx_time(value)
    return None


def build_track(track_id: str, samples: Iterable[Sample],
                settings: MapSettings = MapSettings()) -> Track:
    """
    Turn raw (x, y, timestamp) samples into a projected Track.

    Raises InvalidTrackError on the first sample with a missing or unparseable
    coordinate (NaN and infinity included) or timestamp. No attempt is made
    to repair a corrupt track.
    """
    points: list[Point] = []
    for i, sample in enumerate(samples):
        try:
            x, y, ts = sample
        except (TypeError, ValueError) as e:
            raise InvalidTrackError(f"{track_id}: sample #{i} is not an (x, y, timestamp) triple") from e
        if x is None or y is None:
            raise InvalidTrackError(f"{track_id}: sample #{i} is missing a coordinate")
        if ts is None:
            raise InvalidTrackError(f"{track_id}: sample #{i} is missing a timestamp")
        try:
            px = project(x, factor=settings.distance_factor, precision=settings.coordinate_precision)
            py = project(y, factor=settings.distance_factor, precision=settings.coordinate_precision)
        except (TypeError, ValueError) as e:
            raise InvalidTrackError(f"{track_id}: sample #{i} has a non-numeric coordinate ({x!r}, {y!r})") from e
        if not (math.isfinite(px) and math.isfinite(py)):
            raise InvalidTrackError(f"{track_id}: sample #{i} has a non-finite coordinate ({x!r}, {y!r})")
        when = _timestamp(ts)
        if when is None:
            raise InvalidTrackError(f"{track_id}: sample #{i} has an unparseable timestamp {ts!r}")
        points.append(Point(x=px, y=py, timestamp=when))
    return Track(id=track_id, points=points)


# ---------------------------
# Segment emission
# ---------------------------
def track_segments(track: Track, speed_bounds: Bounds, *, width: float, opacity: float,
                   margin: float = 0.0, precision: int = 2) -> list[Segment]:
    """
    One segment per consecutive point pair, colored by the second point's speed.
    """
    lo = speed_bounds.min_speed if speed_bounds.min_speed is not None else 0.0
    hi = speed_bounds.max_speed if speed_bounds.max_speed is not None else lo
    out: list[Segment] = []
    for prev, curr in zip(track.points, track.points[1:]):
        out.append(Segment(
            track_id=track.id,
            x1=round(prev.x, precision) + margin,
            y1=round(prev.y, precision) + margin,
            x2=round(curr.x, precision) + margin,
            y2=round(curr.y, precision) + margin,
            color=color_for(lo, hi, curr.speed),
            width=width,
            opacity=opacity,
        ))
    return out


# ---------------------------
# Batch
# ---------------------------
def run_batch(batch: Iterable[tuple[str, Iterable[Sample]]],
              settings: MapSettings = MapSettings()) -> MapResult:
    """
    Run every stage over a batch of (track_id, samples) pairs.
    """
    tracks: list[Track] = []
    failures: list[TrackFailure] = []

    log("Simplifying tracks")
    for track_id, samples in batch:
        try:
            track = build_track(track_id, samples, settings)
        except TrackError as e:
            log(f"Skipping {track_id}: {e}", indent=1)
            failures.append(TrackFailure(track_id=track_id, error=e))
            continue
        raw_count = len(track.points)
        track.points = simplify(track.points, settings.epsilon)
        log(f"{track_id}: {raw_count} -> {len(track.points)} point(s)", indent=1)
        tracks.append(track)

    return finish_batch(tracks, settings, failures=failures)


def finish_batch(tracks: Sequence[Track], settings: MapSettings = MapSettings(), *,
                 failures: Optional[list[TrackFailure]] = None) -> MapResult:
    """
    Stages 3-7 on already simplified tracks.
    """
    result = MapResult(tracks=list(tracks), failures=list(failures or []))

    log("Computing drawing limits")
    frame = merge_all(bounds_of(t.points) for t in tracks)
    if not frame.has_frame:
        log("Nothing to draw: no track has any point")
        result.width = result.height = 2 * settings.margin
        return result

    log("Normalizing")
    result.frame = normalize_tracks(tracks, frame)

    log("Computing speed limits")
    for track in tracks:
        compute_speed(track.points, settings.speed_factor)
    result.speed = speed_only(merge_all(bounds_of(t.points) for t in tracks))

    result.width = round(result.frame.width, settings.coordinate_precision) + 2 * settings.margin
    result.height = round(result.frame.height, settings.coordinate_precision) + 2 * settings.margin

    # Overlapping tracks must not saturate the canvas
    opacity = 1.0 / len(tracks)
    for track in tracks:
        result.segments.extend(track_segments(
            track, result.speed,
            width=settings.stroke_width,
            opacity=opacity,
            margin=settings.margin,
            precision=settings.coordinate_precision,
        ))
    return result


def render(result: MapResult, renderer: SegmentRenderer) -> None:
    """Hand the canvas and every segment, in order, to `renderer`."""
    log("Rendering")
    renderer.canvas(result.width, result.height)
    for seg in result.segments:
        renderer.line(
            seg.x1, seg.y1, seg.x2, seg.y2,
            stroke=seg.color.to_css(),
            stroke_width=seg.width,
            stroke_opacity=seg.opacity,
        )
