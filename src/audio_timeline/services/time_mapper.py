"""Pixel <-> audio time transforms.

The mapper knows nothing about zoom: a zoomed-in view simply passes a
viewport width wider than the physical display.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _clip(value: float, upper: float) -> float:
    return float(np.clip(value, 0.0, max(0.0, upper)))


def time_to_pixel(t: float, duration: float, viewport_width: float) -> float:
    """Map a time in [0, duration] to an x position in [0, viewport_width]."""
    if duration <= 0 or viewport_width <= 0:
        return 0.0
    return (_clip(t, duration) / duration) * viewport_width


def pixel_to_time(x: float, duration: float, viewport_width: float) -> float:
    """Map an x position in [0, viewport_width] to a time in [0, duration]."""
    if duration <= 0 or viewport_width <= 0:
        return 0.0
    return (_clip(x, viewport_width) / viewport_width) * duration


@dataclass
class TimelineMapper:
    """The two transforms bound to the current asset duration and canvas width."""
    duration: float = 0.0
    viewport_width: float = 800.0

    def time_to_pixel(self, t: float) -> float:
        return time_to_pixel(t, self.duration, self.viewport_width)

    def pixel_to_time(self, x: float) -> float:
        return pixel_to_time(x, self.duration, self.viewport_width)

    def clamp_pixel(self, x: float) -> float:
        return _clip(x, self.viewport_width)
