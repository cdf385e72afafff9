# gpxmap/visualize/plot.py
"""
Plotting routines for gpxmap
"""

from __future__ import annotations

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from gpxmap.pipeline import MapResult


def plot_segments(result: MapResult, *, show: bool = True):
    """
    Preview the speed-colored segments of a finished batch.

    Coordinates are already in the flipped drawing frame, so the y axis is
    inverted to match the SVG output.
    """
    fig, ax = plt.subplots(figsize=(8, 6))

    lines = [((s.x1, s.y1), (s.x2, s.y2)) for s in result.segments]
    colors = [(*s.color.to_rgb_float(), s.opacity) for s in result.segments]
    widths = [s.width for s in result.segments]
    ax.add_collection(LineCollection(lines, colors=colors, linewidths=widths))

    ax.set_xlim(0, result.width)
    ax.set_ylim(result.height, 0)
    ax.set_aspect("equal")
    ax.set_title(f"{len(result.tracks)} track(s) coloured by speed")

    if show:
        plt.show()
    return fig
