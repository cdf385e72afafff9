import datetime as dt
from pathlib import Path

import pytest

from gpxmap.errors import InvalidGpxError
from gpxmap.formats.gpx import (
    extract_trackpoints,
    iter_track_samples,
    parse_gpx_time,
    read_gpx,
    track_name,
)


def write(tmp_path: Path, body: str, *, ns: str = ' xmlns="http://www.topografix.com/GPX/1/1"') -> Path:
    p = tmp_path / "t.gpx"
    p.write_text(f'<?xml version="1.0"?><gpx version="1.1"{ns}><trk><trkseg>{body}</trkseg></trk></gpx>',
                 encoding="utf-8")
    return p


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2026-01-02T21:14:44Z", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44.500Z", dt.datetime(2026, 1, 2, 21, 14, 44, 500000, tzinfo=dt.timezone.utc)),
        ("2026-01-02T23:14:44+02:00", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("2026-01-02T21:14:44", dt.datetime(2026, 1, 2, 21, 14, 44, tzinfo=dt.timezone.utc)),
        ("", None),
        ("not a time", None),
    ],
)
def test_parse_gpx_time(text, expected):
    assert parse_gpx_time(text) == expected


def test_sample_file(sample_gpx_path):
    tree = read_gpx(sample_gpx_path)
    pts = extract_trackpoints(tree)

    assert len(pts) == 6
    assert (pts[0].lat, pts[0].lon) == (46.0, 7.0)
    assert pts[0].ele == 500.0
    assert pts[-1].ele is None
    assert pts[-1].time == dt.datetime(2025, 6, 1, 8, 4, 30, tzinfo=dt.timezone.utc)
    assert track_name(tree) == "Morning walk"


def test_samples_are_raw_and_in_file_order(sample_gpx_path):
    samples = list(iter_track_samples(read_gpx(sample_gpx_path)))
    assert samples[0] == ("7.0000", "46.0000", "2025-06-01T08:00:00Z")
    assert [s[2] for s in samples] == sorted(s[2] for s in samples)


@pytest.mark.parametrize("ns", ["", ' xmlns="http://www.topografix.com/GPX/1/0"'])
def test_namespace_agnostic(tmp_path, ns):
    p = write(tmp_path, '<trkpt lat="1" lon="2"><time>2025-01-01T00:00:00Z</time></trkpt>', ns=ns)
    assert [(tp.lat, tp.lon) for tp in extract_trackpoints(read_gpx(p))] == [(1.0, 2.0)]


def test_missing_time_is_reported_raw_and_rejected(tmp_path):
    p = write(tmp_path, '<trkpt lat="1" lon="2"></trkpt>')
    tree = read_gpx(p)
    assert list(iter_track_samples(tree)) == [("2", "1", None)]
    with pytest.raises(InvalidGpxError, match="time"):
        extract_trackpoints(tree)


def test_missing_coordinate_rejected(tmp_path):
    p = write(tmp_path, '<trkpt lat="1"><time>2025-01-01T00:00:00Z</time></trkpt>')
    with pytest.raises(InvalidGpxError, match="lat/lon"):
        extract_trackpoints(read_gpx(p))


def test_not_xml(tmp_path):
    p = tmp_path / "broken.gpx"
    p.write_text("<gpx><trk>", encoding="utf-8")
    with pytest.raises(InvalidGpxError):
        read_gpx(p)
