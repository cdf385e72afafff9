# gpxmap/formats/gpx.py
"""
GPX helpers for gpxmap

This module is intentionally format-focused:
- GPX namespace handling (1.0, 1.1, or none at all)
- safely reading ElementTree
- extracting ordered track samples and timestamps

Key design principle:
  Keep orchestration (file enumeration, batching, rendering) out of here;
  this module only turns XML into plain samples.
"""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
from xml.etree import ElementTree as ET

from gpxmap.errors import InvalidGpxError

# A raw sample as found in the file: (lon, lat, time text); parts may be missing
RawSample = tuple[Optional[str], Optional[str], Optional[str]]


def _local(tag: str) -> str:
    """
    Strip the namespace from an ElementTree tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    and GPX files in the wild use the 1.0 URI, the 1.1 URI, or none.
    """
    return tag.rsplit("}", 1)[-1]


def parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    # GPX times commonly use Z for UTC.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Ensure tz-aware; if naive, assume UTC (conservative for GPX sources)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError (wrapping ET.ParseError), OSError
    """
    try:
        return ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"{path}: not well-formed XML ({e})") from e


def track_name(tree: ET.ElementTree) -> Optional[str]:
    """Return the first <trk><name> in the document, if any."""
    for trk in tree.getroot().iter():
        if _local(trk.tag) != "trk":
            continue
        for child in trk:
            if _local(child.tag) == "name" and (child.text or "").strip():
                return child.text.strip()
    return None


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lon: float
    time: _dt.datetime
    ele: Optional[float] = None


def iter_track_samples(tree: ET.ElementTree) -> Iterator[RawSample]:
    """
    Yield (lon, lat, time text) for every <trkpt>, in document order.

    Nothing is validated here; missing attributes or a missing <time> come
    out as None so the caller decides what a malformed sample means.
    """
    for trkpt in tree.getroot().iter():
        if _local(trkpt.tag) != "trkpt":
            continue
        time_text = None
        for child in trkpt:
            if _local(child.tag) == "time":
                time_text = (child.text or "").strip() or None
                break
        yield (trkpt.get("lon"), trkpt.get("lat"), time_text)


def extract_trackpoints(tree: ET.ElementTree) -> list[TrackPoint]:
    """
    Extract ordered, fully validated trackpoints from a GPX tree.

    Raises InvalidGpxError on the first point with a missing or unparseable
    coordinate or timestamp: a corrupt track is rejected as a whole.
    """
    pts: list[TrackPoint] = []

    for trkpt in tree.getroot().iter():
        if _local(trkpt.tag) != "trkpt":
            continue
        n = len(pts)
        try:
            lat = float(trkpt.get("lat"))
            lon = float(trkpt.get("lon"))
        except (TypeError, ValueError) as e:
            raise InvalidGpxError(f"trkpt #{n}: missing or invalid lat/lon") from e

        time = None
        ele = None
        for child in trkpt:
            name = _local(child.tag)
            if name == "time":
                time = parse_gpx_time(child.text or "")
            elif name == "ele" and (child.text or "").strip():
                try:
                    ele = float(child.text)
                except ValueError:
                    ele = None   # elevation is informational only
        if time is None:
            raise InvalidGpxError(f"trkpt #{n}: missing or invalid <time>")

        pts.append(TrackPoint(lat=lat, lon=lon, time=time, ele=ele))

    return pts
