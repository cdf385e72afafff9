import datetime as dt
from pathlib import Path

import pytest

from gpxmap.geometry import Point

T0 = dt.datetime(2025, 6, 1, 8, 0, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def make_points():
    """Build Points from (x, y[, seconds[, speed]]) tuples; seconds default to the index."""
    def _make(coords):
        pts = []
        for i, c in enumerate(coords):
            x, y = c[0], c[1]
            seconds = c[2] if len(c) > 2 else i
            speed = c[3] if len(c) > 3 else 0.0
            pts.append(Point(x=x, y=y, timestamp=T0 + dt.timedelta(seconds=seconds), speed=speed))
        return pts
    return _make
