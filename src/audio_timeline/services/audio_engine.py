from __future__ import annotations

import logging
from typing import Callable, Protocol

import numpy as np
import sounddevice as sd

from audio_timeline.domain.audio_asset import AudioAsset
from audio_timeline.domain.errors import AudioOutputError

log = logging.getLogger(__name__)


class AudioOutput(Protocol):
    """Sink the playback clock drives. Implementations must not block."""

    def start(
        self,
        asset: AudioAsset,
        offset_seconds: float,
        rate: float,
        on_complete: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def set_rate(self, rate: float) -> None: ...


class SoundDeviceOutput:
    """
    Streams an AudioAsset through a sounddevice OutputStream.

    The read position advances by `rate` source frames per output frame, so a
    rate change applies from the next audio block on. Natural end of media is
    reported through `dispatch`, which receives a zero-argument callable from
    the audio thread and must queue it onto the thread that owns the playback
    clock. The stream is closed there too, never inside PortAudio's own
    finished callback.
    """

    def __init__(self, dispatch: Callable[[Callable[[], None]], None]):
        self._dispatch = dispatch
        self._stream: sd.OutputStream | None = None
        self._rate = 1.0

    def is_active(self) -> bool:
        return self._stream is not None and self._stream.active

    def set_rate(self, rate: float) -> None:
        self._rate = float(rate)

    def start(
        self,
        asset: AudioAsset,
        offset_seconds: float,
        rate: float,
        on_complete: Callable[[], None],
    ) -> None:
        self.stop()

        audio = asset.frames()
        # completion always comes from the stream, even for an offset at the end
        start_frame = int(np.clip(round(offset_seconds * asset.sample_rate), 0, audio.shape[0] - 1))

        self._rate = float(rate)
        position = [float(start_frame)]
        total = audio.shape[0]

        def callback(outdata, frames, time_info, status):
            if status:
                log.debug("Output stream status: %s", status)
            idx = (position[0] + np.arange(frames) * self._rate).astype(np.int64)
            available = int(np.count_nonzero(idx < total))
            outdata[:available] = audio[idx[:available]]
            outdata[available:] = 0
            position[0] += frames * self._rate
            if available < frames:
                raise sd.CallbackStop()

        holder: list[sd.OutputStream] = []

        def finished_main() -> None:
            # stop() detaches the stream first, so a finish we caused is ignored
            if holder and self._stream is holder[0]:
                self._stream = None
                holder[0].close()
                on_complete()

        def finished_audio_thread() -> None:
            self._dispatch(finished_main)

        try:
            stream = sd.OutputStream(
                samplerate=asset.sample_rate,
                channels=asset.channel_count,
                dtype="float32",
                callback=callback,
                finished_callback=finished_audio_thread,
            )
            holder.append(stream)
            self._stream = stream
            stream.start()
        except sd.PortAudioError as exc:
            self._stream = None
            log.warning("Could not open output stream: %s", exc)
            raise AudioOutputError(str(exc)) from exc
        log.debug("Output stream started at frame %d (rate %.2f)", start_frame, self._rate)

    def stop(self) -> None:
        stream = self._stream
        if stream is None:
            return
        self._stream = None
        stream.stop()
        stream.close()
