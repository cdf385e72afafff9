# gpxmap/visualize/colors.py
"""
Speed -> color ramp (blue, cyan, yellow, red as speed increases)
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class ColorSample:
    r: int
    g: int
    b: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_css(self) -> str:
        return f"rgb({self.r},{self.g},{self.b})"

    def to_rgb_float(self) -> tuple[float, float, float]:
        """Channels scaled to 0..1, as matplotlib expects."""
        return (self.r / 255, self.g / 255, self.b / 255)


def _channel(value: float) -> int:
    """Round half away from zero and clamp to a 0..255 channel."""
    rounded = int(math.copysign(math.floor(abs(value) + 0.5), value))
    return max(0, min(255, rounded))


def speed_percent(min_speed: float, max_speed: float, speed: float) -> float:
    """Position of `speed` within [min_speed, max_speed], clamped to [0, 1]."""
    if max_speed == min_speed:
        return 0.0
    percent = (speed - min_speed) / (max_speed - min_speed)
    return max(0.0, min(1.0, percent))


def color_for(min_speed: float, max_speed: float, speed: float) -> ColorSample:
    p = speed_percent(min_speed, max_speed, speed)
    if p < 0.25:
        return ColorSample(0, _channel(255 * p * 4), 255)
    if p < 0.5:
        return ColorSample(0, 255, _channel(255 * (0.5 - p) * 4))
    if p < 0.75:
        return ColorSample(_channel(255 * (p - 0.5) * 4), 255, 0)
    return ColorSample(255, _channel(255 * (1 - p) * 4), 0)
