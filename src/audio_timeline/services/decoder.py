from __future__ import annotations

import io
import logging

import numpy as np
import soundfile as sf

from audio_timeline.domain.audio_asset import AudioAsset, WaveformEnvelope
from audio_timeline.domain.errors import DecodeError, InvalidArgument

log = logging.getLogger(__name__)


def decode(data: bytes, source: str | None = None) -> AudioAsset:
    """Decode an in-memory audio container into per-channel float samples.

    Any format libsndfile understands (WAV, FLAC, OGG, AIFF, ...) is accepted.
    Raises DecodeError for empty, truncated or unrecognized buffers.
    """
    if not data:
        raise DecodeError("Audio buffer is empty.")

    try:
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except (RuntimeError, TypeError, ValueError) as exc:
        # soundfile reports malformed containers as LibsndfileError (a RuntimeError)
        log.warning("Could not decode %s: %s", source or "audio buffer", exc)
        raise DecodeError(f"Unsupported or malformed audio data: {exc}") from exc

    if samples.shape[0] == 0:
        raise DecodeError("Audio data contains no frames.")

    channels = tuple(np.ascontiguousarray(samples[:, ch]) for ch in range(samples.shape[1]))
    asset = AudioAsset(sample_rate=int(sample_rate), channels=channels, source=source)
    log.debug(
        "Decoded %d frames x %d channels at %d Hz (%.2fs)",
        asset.frame_count, asset.channel_count, asset.sample_rate, asset.duration_seconds,
    )
    return asset


def reduce(asset: AudioAsset, resolution: int, channel_index: int = 0) -> WaveformEnvelope:
    """Compress one channel into `resolution` mean absolute amplitudes.

    The channel is split into `resolution` blocks of frame_count // resolution
    samples; tail samples that do not fill a block are dropped.
    """
    if resolution <= 0:
        raise InvalidArgument(f"Resolution must be positive, got {resolution}.")
    if resolution > asset.frame_count:
        raise InvalidArgument(
            f"Resolution {resolution} exceeds the asset's {asset.frame_count} frames."
        )
    if not 0 <= channel_index < asset.channel_count:
        raise InvalidArgument(
            f"Channel {channel_index} out of range for {asset.channel_count}-channel audio."
        )

    block_size = asset.frame_count // resolution
    samples = asset.channel(channel_index)[: block_size * resolution]
    magnitudes = np.abs(samples).reshape(resolution, block_size).mean(axis=1)
    return WaveformEnvelope(
        resolution=resolution,
        magnitudes=magnitudes,
        channel_index=channel_index,
    )
