from __future__ import annotations

import logging
from typing import Any, Callable

from audio_timeline.config import default_config
from audio_timeline.domain.audio_asset import AudioAsset, WaveformEnvelope
from audio_timeline.domain.errors import AudioTimelineError, NoAssetLoaded, OutOfRange
from audio_timeline.domain.playback_state import PlaybackState, PlaybackStatus
from audio_timeline.domain.selection_range import SelectionRange
from audio_timeline.services import events
from audio_timeline.services.audio_engine import AudioOutput
from audio_timeline.services.decoder import decode, reduce
from audio_timeline.services.events import EventBus, Subscription
from audio_timeline.services.playback_clock import PlaybackClock
from audio_timeline.services.selection_manager import SelectionManager
from audio_timeline.services.time_mapper import TimelineMapper
from audio_timeline.services.zoom_manager import ZoomManager

log = logging.getLogger(__name__)


class TimelineSession:
    """
    One loaded asset with its playback clock, selection and zoom.

    All methods are meant to be called from a single thread. Errors raised by
    the commands are published on the `error` event before propagating.
    """

    def __init__(
        self,
        output: AudioOutput,
        config: dict[str, Any] | None = None,
        now: Callable[[], float] | None = None,
    ):
        self.config = {**default_config(), **(config or {})}
        self.bus = EventBus()
        self._zoom = ZoomManager(
            self.bus,
            viewport_width=self.config["viewport_width"],
            step=self.config["zoom_step"],
        )
        self._mapper = TimelineMapper(duration=0.0, viewport_width=self._zoom.effective_width)
        self._selection = SelectionManager(self._mapper)
        self._clock = PlaybackClock(
            output,
            now=now,
            bus=self.bus,
            time_update_interval=self.config["time_update_interval_ms"] / 1000.0,
        )
        self._asset: AudioAsset | None = None
        self._envelopes: dict[tuple[int, int], WaveformEnvelope] = {}
        self._load_requests = 0
        self._loaded_token = 0

        self.bus.subscribe(events.ZOOM_CHANGED, self._on_zoom_changed)
        self.bus.subscribe(events.TIME_UPDATE, self._on_time_update)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def asset(self) -> AudioAsset | None:
        return self._asset

    @property
    def duration(self) -> float:
        return self._asset.duration_seconds if self._asset is not None else 0.0

    def load_from_bytes(self, data: bytes, source: str | None = None) -> AudioAsset:
        token = self.begin_load()
        try:
            asset = decode(data, source=source)
        except AudioTimelineError as exc:
            self.fail_load(token, exc)
            raise
        self.complete_load(token, asset)
        return asset

    def begin_load(self) -> int:
        """Reserve a token for a decode that will finish later."""
        self._load_requests += 1
        return self._load_requests

    def complete_load(self, token: int, asset: AudioAsset) -> bool:
        """Install a decoded asset unless a newer one is already loaded."""
        if token < self._loaded_token:
            log.info("Discarding stale decode #%d (asset #%d is newer)", token, self._loaded_token)
            return False

        self._loaded_token = token
        self._asset = asset
        self._envelopes.clear()
        self._clock.load(asset)
        self._mapper.duration = asset.duration_seconds
        self._selection.clear()
        log.info(
            "Loaded %s: %.2fs, %d channel(s) at %d Hz",
            asset.source or "audio", asset.duration_seconds, asset.channel_count, asset.sample_rate,
        )
        self.bus.emit(events.SELECTION_CHANGED, selection=None)
        self.bus.emit(events.LOADED, asset=asset)
        return True

    def fail_load(self, token: int, error: AudioTimelineError) -> None:
        """Report a failed load; the current asset, if any, stays loaded."""
        log.warning("Load #%d failed: %s", token, error)
        self._report(error)

    def get_envelope(
        self,
        resolution: int | None = None,
        channel_index: int | None = None,
    ) -> WaveformEnvelope:
        clamp = resolution is None
        if resolution is None:
            resolution = self.config["envelope_resolution"]
        if channel_index is None:
            channel_index = self.config["reduction_channel"]
        if clamp and self._asset is not None:
            # the configured default yields one block per frame on very short assets
            resolution = min(resolution, self._asset.frame_count)
        key = (resolution, channel_index)
        if key not in self._envelopes:
            self._envelopes[key] = self._guard(self._reduce, resolution, channel_index)
        return self._envelopes[key]

    def _reduce(self, resolution: int, channel_index: int) -> WaveformEnvelope:
        if self._asset is None:
            raise NoAssetLoaded("No audio loaded.")
        return reduce(self._asset, resolution, channel_index)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    @property
    def status(self) -> PlaybackStatus:
        return self._clock.status

    @property
    def playback_state(self) -> PlaybackState:
        return self._clock.state

    def play(self) -> None:
        self._guard(self._clock.play)

    def pause(self) -> None:
        self._guard(self._clock.pause)

    def stop(self) -> None:
        self._guard(self._clock.stop)

    def seek(self, t: float) -> None:
        self._guard(self._clock.seek, t)

    def set_playback_rate(self, rate: float) -> None:
        self._guard(self._clock.set_playback_rate, rate)

    def get_elapsed(self) -> float:
        return self._clock.elapsed()

    def tick(self) -> None:
        self._clock.tick()

    def cursor_pixel(self) -> float:
        """Playback position on the zoomed canvas."""
        return self._mapper.time_to_pixel(self._clock.elapsed())

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selection(self) -> SelectionRange | None:
        return self._selection.selection

    def begin_drag(self, pixel_x: float) -> None:
        self._selection.begin_drag(pixel_x)

    def update_drag(self, pixel_x: float) -> SelectionRange | None:
        return self._selection.update_drag(pixel_x)

    def end_drag(self, pixel_x: float) -> SelectionRange:
        selection = self._selection.end_drag(pixel_x)
        self.bus.emit(events.SELECTION_CHANGED, selection=selection)
        return selection

    def set_selection(self, start_seconds: float, end_seconds: float) -> SelectionRange:
        self._guard(self._check_selection, start_seconds, end_seconds)
        selection = SelectionRange(start_seconds, end_seconds)
        self._selection.set_selection(selection)
        self.bus.emit(events.SELECTION_CHANGED, selection=selection)
        return selection

    def _check_selection(self, start_seconds: float, end_seconds: float) -> None:
        if self._asset is None:
            raise NoAssetLoaded("No audio loaded.")
        if not 0 <= start_seconds <= end_seconds <= self.duration:
            raise OutOfRange(
                f"Selection {start_seconds}s - {end_seconds}s is not an ordered range "
                f"within [0, {self.duration}]s."
            )

    def clear_selection(self) -> None:
        self._selection.clear()
        self.bus.emit(events.SELECTION_CHANGED, selection=None)

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------

    @property
    def zoom_level(self) -> float:
        return self._zoom.zoom_level

    @property
    def effective_width(self) -> float:
        return self._zoom.effective_width

    def zoom_in(self) -> float:
        return self._zoom.zoom_in()

    def zoom_out(self) -> float:
        return self._zoom.zoom_out()

    def set_zoom_level(self, zoom_level: float) -> float:
        return self._guard(self._zoom.set_zoom_level, zoom_level)

    def set_viewport_width(self, width: int) -> None:
        self._guard(self._zoom.set_viewport_width, width)

    def time_to_pixel(self, t: float) -> float:
        return self._mapper.time_to_pixel(t)

    def pixel_to_time(self, x: float) -> float:
        return self._mapper.pixel_to_time(x)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on_loaded(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.LOADED, handler)

    def on_time_update(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.TIME_UPDATE, handler)

    def on_cursor_moved(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.CURSOR_MOVED, handler)

    def on_selection_changed(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.SELECTION_CHANGED, handler)

    def on_state_changed(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.STATE_CHANGED, handler)

    def on_zoom_changed(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.ZOOM_CHANGED, handler)

    def on_error(self, handler: Callable[..., Any]) -> Subscription:
        return self.bus.subscribe(events.ERROR, handler)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _guard(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except AudioTimelineError as exc:
            self._report(exc)
            raise

    def _report(self, error: AudioTimelineError) -> None:
        self.bus.emit(events.ERROR, error=error)

    def _on_zoom_changed(self, zoom_level: float, effective_width: float) -> None:
        self._mapper.viewport_width = effective_width

    def _on_time_update(self, seconds: float) -> None:
        self.bus.emit(
            events.CURSOR_MOVED,
            seconds=seconds,
            pixel_x=self._mapper.time_to_pixel(seconds),
        )
