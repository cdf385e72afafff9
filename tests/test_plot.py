import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from gpxmap.config import MapSettings  # noqa: E402
from gpxmap.pipeline import run_batch  # noqa: E402
from gpxmap.visualize.plot import plot_segments  # noqa: E402


def test_plot_segments_draws_every_segment():
    samples = [(0, 0, "2025-06-01T08:00:00Z"), (10, 0, "2025-06-01T08:00:10Z"), (10, 10, "2025-06-01T08:00:12Z")]
    result = run_batch([("t", samples)], MapSettings(distance_factor=1))

    fig = plot_segments(result, show=False)
    try:
        ax = fig.axes[0]
        (collection,) = ax.collections
        assert len(collection.get_segments()) == len(result.segments) == 2
        assert ax.get_ylim() == (result.height, 0)
    finally:
        plt.close(fig)
