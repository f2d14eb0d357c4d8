from __future__ import annotations

import logging
import math

from audio_timeline.domain.errors import InvalidArgument
from audio_timeline.domain.viewport_state import ViewportState
from audio_timeline.services import events
from audio_timeline.services.events import EventBus

log = logging.getLogger(__name__)

ZOOM_STEP = 1.2
MIN_ZOOM = 1.0


class ZoomManager:
    """Multiplicative zoom with a 1:1 floor; publishes the effective width."""

    def __init__(
        self,
        bus: EventBus | None = None,
        viewport_width: int = 800,
        step: float = ZOOM_STEP,
    ):
        if not viewport_width > 0:
            raise InvalidArgument("Viewport width must be positive.")
        self._bus = bus or EventBus()
        self._step = step
        self._viewport = ViewportState(zoom_level=MIN_ZOOM, viewport_width_pixels=viewport_width)

    @property
    def zoom_level(self) -> float:
        return self._viewport.zoom_level

    @property
    def viewport_width(self) -> int:
        return self._viewport.viewport_width_pixels

    @property
    def effective_width(self) -> float:
        return self._viewport.effective_width

    def zoom_in(self) -> float:
        return self._apply(self._viewport.zoom_level * self._step)

    def zoom_out(self) -> float:
        return self._apply(self._viewport.zoom_level / self._step)

    def set_zoom_level(self, zoom_level: float) -> float:
        if not (math.isfinite(zoom_level) and zoom_level > 0):
            log.warning("Zoom level %s rejected", zoom_level)
            raise InvalidArgument(f"Zoom level must be a finite positive number, got {zoom_level}.")
        return self._apply(zoom_level)

    def reset(self) -> float:
        return self._apply(MIN_ZOOM)

    def set_viewport_width(self, width: int) -> None:
        """Physical display width changed (window resize)."""
        if not width > 0:
            raise InvalidArgument(f"Viewport width must be positive, got {width}.")
        self._viewport.viewport_width_pixels = int(width)
        self._notify()

    def _apply(self, zoom_level: float) -> float:
        self._viewport.zoom_level = max(MIN_ZOOM, float(zoom_level))
        log.debug("Zoom level %.3f (width %.1fpx)", self.zoom_level, self.effective_width)
        self._notify()
        return self._viewport.zoom_level

    def _notify(self) -> None:
        self._bus.emit(
            events.ZOOM_CHANGED,
            zoom_level=self._viewport.zoom_level,
            effective_width=self._viewport.effective_width,
        )
