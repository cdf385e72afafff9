import datetime as dt

import pytest

from gpxmap.config import MapSettings
from gpxmap.errors import InvalidTrackError
from gpxmap.pipeline import build_track, render, run_batch

SETTINGS = MapSettings(epsilon=0.5, distance_factor=1, speed_factor=1, margin=0, stroke_width=3)


def iso(seconds: int) -> str:
    t = dt.datetime(2025, 6, 1, 8, 0, 0, tzinfo=dt.timezone.utc) + dt.timedelta(seconds=seconds)
    return t.isoformat().replace("+00:00", "Z")


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def canvas(self, width, height):
        self.calls.append(("canvas", width, height))

    def line(self, x1, y1, x2, y2, *, stroke, stroke_width, stroke_opacity):
        self.calls.append(("line", x1, y1, x2, y2, stroke, stroke_width, stroke_opacity))


def test_build_track_projects_and_parses():
    track = build_track("t", [("7.0001", "46.5", "2025-06-01T08:00:00Z")], MapSettings())
    (p,) = track.points
    assert (p.x, p.y) == (70001.0, 465000.0)
    assert p.timestamp == dt.datetime(2025, 6, 1, 8, 0, tzinfo=dt.timezone.utc)
    assert p.speed == 0.0


def test_build_track_accepts_naive_datetime():
    track = build_track("t", [(1, 2, dt.datetime(2025, 1, 1))], SETTINGS)
    assert track.points[0].timestamp.tzinfo is dt.timezone.utc


@pytest.mark.parametrize(
    "sample",
    [
        (None, 1, "2025-06-01T08:00:00Z"),
        (1, None, "2025-06-01T08:00:00Z"),
        (1, 1, None),
        (1, 1, "yesterday"),
        ("east", 1, "2025-06-01T08:00:00Z"),
        (1, 1),
        ("nan", 1, "2025-06-01T08:00:00Z"),
        (1, "inf", "2025-06-01T08:00:00Z"),
        (float("-inf"), 1, "2025-06-01T08:00:00Z"),
    ],
)
def test_build_track_rejects_malformed_sample(sample):
    with pytest.raises(InvalidTrackError, match="bad: sample #1"):
        build_track("bad", [(0, 0, iso(0)), sample], SETTINGS)


def test_collinear_track_end_to_end():
    # 5 collinear points, 10 units apart, at varying time steps
    samples = [(0, 0, iso(0)), (10, 0, iso(1)), (20, 0, iso(3)), (30, 0, iso(4)), (40, 0, iso(8))]
    result = run_batch([("line", samples)], MapSettings(epsilon=1, distance_factor=1, speed_factor=1, margin=0))

    (track,) = result.tracks
    assert [(p.x, p.y) for p in track.points] == [(0, 0), (40, 0)]
    # speed recomputed on the normalized, simplified track: 40 units in 8 s
    assert track.points[-1].speed == pytest.approx(5.0)
    assert len(result.segments) == 1
    assert result.segments[0].color.as_tuple() == (255, 0, 0)
    assert result.segments[0].opacity == 1.0


def test_two_tracks_share_frame_and_split_opacity():
    west = [(0, 0, iso(0)), (10, 5, iso(10))]
    east = [(100, 50, iso(0)), (120, 80, iso(10))]
    result = run_batch([("west", west), ("east", east)], SETTINGS)

    assert (result.frame.min_x, result.frame.min_y) == (0, 0)
    assert (result.frame.width, result.frame.height) == (120, 80)
    assert (result.width, result.height) == (120, 80)
    for track in result.tracks:
        assert all(p.x >= 0 and p.y >= 0 for p in track.points)
    assert [s.track_id for s in result.segments] == ["west", "east"]
    assert all(s.opacity == 0.5 for s in result.segments)


def test_speed_colors_use_batch_wide_limits():
    slow = [(0, 0, iso(0)), (1, 0, iso(10))]
    fast = [(0, 10, iso(0)), (100, 10, iso(10))]
    result = run_batch([("slow", slow), ("fast", fast)], SETTINGS)

    assert result.speed.min_speed == 0.0
    assert result.speed.max_speed == pytest.approx(10.0)
    by_track = {s.track_id: s.color.as_tuple() for s in result.segments}
    assert by_track["fast"] == (255, 0, 0)
    assert by_track["slow"] == (0, 10, 255)


def test_malformed_track_is_excluded_and_reported():
    good = [(0, 0, iso(0)), (5, 5, iso(10))]
    bad = [(0, 0, iso(0)), (None, 1, iso(5))]
    result = run_batch([("good", good), ("bad", bad)], SETTINGS)

    assert [t.id for t in result.tracks] == ["good"]
    assert [f.track_id for f in result.failures] == ["bad"]
    assert isinstance(result.failures[0].error, InvalidTrackError)
    assert len(result.segments) == 1
    assert result.segments[0].opacity == 1.0


@pytest.mark.parametrize("samples, segments", [([], 0), ([(3, 4, "2025-06-01T08:00:00Z")], 0)])
def test_empty_or_singleton_track(samples, segments):
    result = run_batch([("t", samples)], MapSettings(margin=5))
    assert len(result.segments) == segments
    assert result.width == result.height == 10


def test_duplicate_timestamps_do_not_fail():
    samples = [(0, 0, iso(0)), (5, 0, iso(0)), (5, 5, iso(0))]
    result = run_batch([("t", samples)], SETTINGS)
    assert len(result.segments) == 2
    assert all(s.color.as_tuple() == (0, 0, 255) for s in result.segments)


def test_margin_offsets_segments_and_canvas():
    samples = [(0, 0, iso(0)), (10, 0, iso(1))]
    result = run_batch([("t", samples)], MapSettings(distance_factor=1, margin=5))
    seg = result.segments[0]
    assert (seg.x1, seg.y1, seg.x2, seg.y2) == (5, 5, 15, 5)
    assert (result.width, result.height) == (20, 10)


def test_render_preserves_call_order():
    samples = [(0, 0, iso(0)), (10, 0, iso(1)), (10, 10, iso(3)), (0, 10, iso(4))]
    result = run_batch([("t", samples)], SETTINGS)
    renderer = RecordingRenderer()

    render(result, renderer)

    assert renderer.calls[0] == ("canvas", 10, 10)
    lines = renderer.calls[1:]
    assert [c[1:5] for c in lines] == [(s.x1, s.y1, s.x2, s.y2) for s in result.segments]
    assert all(c[5].startswith("rgb(") and c[6] == 3 and c[7] == 1.0 for c in lines)


def test_non_finite_track_first_in_batch_does_not_poison_frame():
    bad = [("nan", 0, iso(0)), (3, 1, iso(1))]
    good = [(0, 0, iso(0)), (10, 5, iso(10))]
    result = run_batch([("bad", bad), ("good", good)], SETTINGS)

    assert [f.track_id for f in result.failures] == ["bad"]
    assert [t.id for t in result.tracks] == ["good"]
    assert [(p.x, p.y) for p in result.tracks[0].points] == [(0, 5), (10, 0)]
    assert (result.width, result.height) == (10, 5)


def test_frame_holds_no_stale_speeds():
    samples = [(0, 0, iso(0)), (10, 0, iso(10))]
    result = run_batch([("t", samples)], SETTINGS)

    assert result.frame.min_speed is None and result.frame.max_speed is None
    assert result.speed.max_speed == pytest.approx(1.0)
