# gpxmap/analyze/track.py
"""
Track statistics for gpxmap (real-world units, from raw lat/lon)
"""

from __future__ import annotations

from typing import Sequence

from haversine import haversine, Unit

from gpxmap.formats.gpx import TrackPoint


def compute_step_metrics(points: Sequence[TrackPoint]):
    """Return per-segment dt (s), distance (m), speed (m/s)."""
    dts = []
    ds = []
    vs = []

    for p0, p1 in zip(points, points[1:]):
        dt_s = (p1.time - p0.time).total_seconds()
        if dt_s <= 0:
            continue

        d_m = haversine((p0.lat, p0.lon), (p1.lat, p1.lon), unit=Unit.METERS)
        v = d_m / dt_s

        dts.append(dt_s)
        ds.append(d_m)
        vs.append(v)

    return dts, ds, vs


def analyze_track(points: Sequence[TrackPoint]) -> dict:
    if len(points) < 2:
        return {"points": len(points), "segments": 0}

    dts, ds, vs = compute_step_metrics(points)

    return {
        "points": len(points),
        "segments": len(vs),
        "distance_m": sum(ds),
        "duration_s": sum(dts),
        "avg_speed_mps": (sum(ds) / sum(dts)) if sum(dts) else 0.0,
        "max_speed_mps": max(vs) if vs else 0.0,
    }


def format_report(name: str, stats: dict, *, tsv: bool) -> str:
    if tsv:
        return (
            f"{name}\t"
            f"{stats.get('points', 0)}\t"
            f"{stats.get('segments', 0)}\t"
            f"{stats.get('distance_m', 0.0):.2f}\t"
            f"{stats.get('duration_s', 0.0):.1f}\t"
            f"{stats.get('avg_speed_mps', 0.0):.3f}\t"
            f"{stats.get('max_speed_mps', 0.0):.3f}"
        )
    return "\n".join([
        f"{name}",
        f"  points        : {stats.get('points', 0)}",
        f"  segments      : {stats.get('segments', 0)}",
        f"  distance (m)  : {stats.get('distance_m', 0.0):.2f}",
        f"  duration (s)  : {stats.get('duration_s', 0.0):.1f}",
        f"  avg speed m/s : {stats.get('avg_speed_mps', 0.0):.3f}",
        f"  max speed m/s : {stats.get('max_speed_mps', 0.0):.3f}",
    ])


TSV_HEADER = "file\tpoints\tsegments\tdistance_m\tduration_s\tavg_speed_mps\tmax_speed_mps"
