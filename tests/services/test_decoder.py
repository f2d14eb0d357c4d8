import numpy as np
import pytest

from audio_timeline.domain.audio_asset import AudioAsset
from audio_timeline.domain.errors import DecodeError, InvalidArgument
from audio_timeline.services.decoder import decode, reduce


def test_decode_wav_bytes(wav_bytes_factory):
    data = wav_bytes_factory(duration_seconds=0.5, sample_rate=8000, channels=2)

    asset = decode(data, source="clip.wav")

    assert asset.sample_rate == 8000
    assert asset.channel_count == 2
    assert asset.frame_count == 4000
    assert asset.duration_seconds == pytest.approx(0.5)
    assert asset.source == "clip.wav"
    assert np.allclose(asset.channel(1), 0.25)


def test_decode_rejects_empty_and_garbage():
    with pytest.raises(DecodeError):
        decode(b"")

    with pytest.raises(DecodeError):
        decode(b"definitely not audio" * 20)


def test_reduce_produces_requested_resolution(asset_factory):
    asset = asset_factory(duration_seconds=1.0, sample_rate=8000)

    envelope = reduce(asset, 100)

    assert envelope.resolution == 100
    assert len(envelope.magnitudes) == 100
    assert np.all(envelope.magnitudes >= 0)


def test_reduce_means_absolute_values_and_drops_tail():
    # 7 frames at resolution 3 -> blocks of 2, last frame dropped
    samples = np.array([-1.0, 1.0, 0.5, -0.5, 0.0, 0.2, 9.0], dtype=np.float32)
    asset = AudioAsset(sample_rate=7, channels=(samples,))

    envelope = reduce(asset, 3)

    assert np.allclose(envelope.magnitudes, [1.0, 0.5, 0.1])


def test_reduce_selects_channel(asset_factory):
    asset = asset_factory(duration_seconds=0.1, sample_rate=8000, channels=2)

    left = reduce(asset, 10, channel_index=0)
    right = reduce(asset, 10, channel_index=1)

    assert right.channel_index == 1
    assert np.allclose(right.magnitudes, left.magnitudes * 2, rtol=1e-5)


def test_reduce_rejects_invalid_arguments():
    asset = AudioAsset(sample_rate=10, channels=(np.ones(10),))

    with pytest.raises(InvalidArgument):
        reduce(asset, 0)

    # more blocks than frames would need a block size of zero
    with pytest.raises(InvalidArgument):
        reduce(asset, 11)

    with pytest.raises(InvalidArgument):
        reduce(asset, 5, channel_index=1)

    assert reduce(asset, 10).resolution == 10
