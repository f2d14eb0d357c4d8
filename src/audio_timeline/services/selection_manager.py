from __future__ import annotations

import logging

from audio_timeline.domain.selection_range import SelectionRange
from audio_timeline.services.time_mapper import TimelineMapper

log = logging.getLogger(__name__)


class SelectionManager:
    """Turns a pixel-space drag gesture into a time range via the mapper."""

    def __init__(self, mapper: TimelineMapper):
        self._mapper = mapper
        self._dragging = False
        self._anchor_x = 0.0
        self._current_x = 0.0
        self._selection: SelectionRange | None = None

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def selection(self) -> SelectionRange | None:
        return self._selection

    @property
    def preview(self) -> SelectionRange | None:
        """Live range while a drag is in progress, else None."""
        if not self._dragging:
            return None
        return self._to_range(self._anchor_x, self._current_x)

    def begin_drag(self, pixel_x: float) -> None:
        self._dragging = True
        self._anchor_x = self._mapper.clamp_pixel(pixel_x)
        self._current_x = self._anchor_x

    def update_drag(self, pixel_x: float) -> SelectionRange | None:
        if not self._dragging:
            return None
        self._current_x = self._mapper.clamp_pixel(pixel_x)
        return self.preview

    def end_drag(self, pixel_x: float) -> SelectionRange:
        if not self._dragging:
            log.debug("Drag finished without a start; anchoring at release point")
            self._anchor_x = self._mapper.clamp_pixel(pixel_x)
        self._dragging = False
        self._current_x = self._mapper.clamp_pixel(pixel_x)
        self._selection = self._to_range(self._anchor_x, self._current_x)
        log.info(
            "Selection %.2fs - %.2fs",
            self._selection.start_seconds,
            self._selection.end_seconds,
        )
        return self._selection

    def set_selection(self, selection: SelectionRange | None) -> None:
        self._selection = selection

    def clear(self) -> None:
        self._dragging = False
        self._selection = None

    def _to_range(self, a: float, b: float) -> SelectionRange:
        start_x, end_x = min(a, b), max(a, b)
        return SelectionRange(
            self._mapper.pixel_to_time(start_x),
            self._mapper.pixel_to_time(end_x),
        )
