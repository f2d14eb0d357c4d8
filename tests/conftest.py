import io
import os

import numpy as np
import pytest
import soundfile as sf

from audio_timeline.domain.audio_asset import AudioAsset

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeClock:
    """Monotonic time source advanced by hand."""

    def __init__(self, start: float = 100.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeOutput:
    """Audio sink that records calls instead of producing sound."""

    def __init__(self):
        self.starts: list[tuple[float, float]] = []
        self.stops = 0
        self.rates: list[float] = []
        self.on_complete = None

    def start(self, asset, offset_seconds, rate, on_complete):
        self.starts.append((offset_seconds, rate))
        self.on_complete = on_complete

    def stop(self):
        self.stops += 1

    def set_rate(self, rate):
        self.rates.append(rate)

    def finish(self):
        """Simulate the device reaching the end of the buffer."""
        self.on_complete()


def make_asset(duration_seconds: float = 10.0, sample_rate: int = 44100, channels: int = 1) -> AudioAsset:
    frames = int(duration_seconds * sample_rate)
    t = np.arange(frames, dtype=np.float32) / sample_rate
    tone = 0.5 * np.sin(2 * np.pi * 440.0 * t).astype(np.float32)
    return AudioAsset(sample_rate=sample_rate, channels=tuple(tone * (ch + 1) / channels for ch in range(channels)))


def make_wav_bytes(duration_seconds: float = 1.0, sample_rate: int = 8000, channels: int = 1) -> bytes:
    frames = int(duration_seconds * sample_rate)
    data = np.full((frames, channels), 0.25, dtype=np.float32)
    buffer = io.BytesIO()
    sf.write(buffer, data, sample_rate, format="WAV", subtype="FLOAT")
    return buffer.getvalue()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def output():
    return FakeOutput()


@pytest.fixture
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def asset_factory():
    return make_asset


@pytest.fixture
def wav_bytes_factory():
    return make_wav_bytes
