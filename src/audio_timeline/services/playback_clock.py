from __future__ import annotations

import dataclasses
import logging
import math
import time
from typing import Callable

from audio_timeline.domain.audio_asset import AudioAsset
from audio_timeline.domain.errors import AudioTimelineError, InvalidArgument, NoAssetLoaded, OutOfRange
from audio_timeline.domain.playback_state import PlaybackState, PlaybackStatus
from audio_timeline.services import events
from audio_timeline.services.audio_engine import AudioOutput
from audio_timeline.services.events import EventBus

log = logging.getLogger(__name__)


class PlaybackClock:
    """
    Play/pause/seek/rate state machine for a single audio asset.

    Elapsed audio time is derived from an injected monotonic clock rather
    than from the output device:

        elapsed = pause_offset + (now - reference_start) * rate

    Every rate change re-anchors pause_offset and reference_start, so time
    already played is never rescaled by a later rate.
    """

    def __init__(
        self,
        output: AudioOutput,
        now: Callable[[], float] | None = None,
        bus: EventBus | None = None,
        time_update_interval: float = 0.1,
    ):
        self._output = output
        self._now = now or time.monotonic
        self._bus = bus or EventBus()
        self._interval = time_update_interval
        self._state = PlaybackState()
        self._asset: AudioAsset | None = None
        # Bumped on every output start/stop so late completions are ignored.
        self._generation = 0
        self._last_time_update: float | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def asset(self) -> AudioAsset | None:
        return self._asset

    @property
    def duration(self) -> float:
        return self._asset.duration_seconds if self._asset is not None else 0.0

    @property
    def status(self) -> PlaybackStatus:
        return self._state.status

    @property
    def playback_rate(self) -> float:
        return self._state.playback_rate

    @property
    def state(self) -> PlaybackState:
        """Snapshot copy; mutating it does not affect the clock."""
        return dataclasses.replace(self._state)

    def elapsed(self) -> float:
        state = self._state
        if not state.is_playing:
            return state.pause_offset_seconds
        position = state.pause_offset_seconds + (
            self._now() - state.reference_start_time
        ) * state.playback_rate
        return min(max(position, 0.0), self.duration)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load(self, asset: AudioAsset | None) -> None:
        """Replace the asset; playback is stopped and rewound."""
        self.stop()
        self._asset = asset

    def play(self) -> None:
        if self._state.is_playing:
            log.debug("Play requested while already playing")
            return
        if self._asset is None:
            log.warning("Play requested with no audio loaded")
            raise NoAssetLoaded("Load audio before starting playback.")

        if self._state.pause_offset_seconds >= self.duration:
            self._state.pause_offset_seconds = 0.0

        self._start_output()
        self._state.status = PlaybackStatus.PLAYING
        log.info("Playback started at offset %.2fs", self._state.pause_offset_seconds)
        self._bus.emit(events.STATE_CHANGED, status=PlaybackStatus.PLAYING)

    def pause(self) -> None:
        if not self._state.is_playing:
            log.debug("Pause requested while not playing")
            return
        self._state.pause_offset_seconds = self.elapsed()
        self._stop_output()
        self._state.status = PlaybackStatus.PAUSED
        log.info("Playback paused at %.2fs", self._state.pause_offset_seconds)
        self._bus.emit(events.STATE_CHANGED, status=PlaybackStatus.PAUSED)

    def stop(self) -> None:
        self._stop_output()
        self._state.pause_offset_seconds = 0.0
        self._state.status = PlaybackStatus.STOPPED
        log.info("Playback stopped")
        self._bus.emit(events.STATE_CHANGED, status=PlaybackStatus.STOPPED)

    def seek(self, t: float) -> None:
        if self._asset is None:
            raise NoAssetLoaded("Load audio before seeking.")
        if not 0 <= t <= self.duration:
            log.warning("Seek to %.2fs rejected (duration %.2fs)", t, self.duration)
            raise OutOfRange(f"Seek time {t}s is outside [0, {self.duration}]s.")

        self._state.pause_offset_seconds = float(t)
        if self._state.is_playing:
            self._stop_output()
            try:
                self._start_output()
            except AudioTimelineError:
                self._state.status = PlaybackStatus.PAUSED
                log.warning("Output restart failed after seek; paused at %.2fs", t)
                self._bus.emit(events.STATE_CHANGED, status=PlaybackStatus.PAUSED)
                raise
            log.debug("Seeked to %.2fs while playing; output restarted", t)
        else:
            log.info("Seeked to %.2fs", t)

    def set_playback_rate(self, rate: float) -> None:
        if not (math.isfinite(rate) and rate > 0):
            log.warning("Playback rate %s rejected", rate)
            raise InvalidArgument(f"Playback rate must be a finite number greater than 0, got {rate}.")

        if self._state.is_playing:
            self._state.pause_offset_seconds = self.elapsed()
            self._state.reference_start_time = self._now()
            self._output.set_rate(rate)
        self._state.playback_rate = float(rate)
        log.info("Playback rate set to %.2f", rate)

    def tick(self) -> None:
        """Host timer hook: publishes time updates and detects end of media."""
        if not self._state.is_playing:
            return
        position = self.elapsed()
        if position >= self.duration:
            log.info("Playback reached the end of the audio")
            self.stop()
            return
        now = self._now()
        if self._last_time_update is None or now - self._last_time_update >= self._interval:
            self._last_time_update = now
            self._bus.emit(events.TIME_UPDATE, seconds=position)

    # ------------------------------------------------------------------
    # Output handling
    # ------------------------------------------------------------------

    def _start_output(self) -> None:
        self._generation += 1
        generation = self._generation
        self._output.start(
            self._asset,
            self._state.pause_offset_seconds,
            self._state.playback_rate,
            lambda: self._on_output_complete(generation),
        )
        self._state.reference_start_time = self._now()
        self._last_time_update = None

    def _stop_output(self) -> None:
        self._generation += 1
        self._output.stop()

    def _on_output_complete(self, generation: int) -> None:
        if generation != self._generation or not self._state.is_playing:
            log.debug("Ignoring completion from a superseded output start")
            return
        log.info("Playback ended naturally")
        self.stop()
