from dataclasses import dataclass, field
from pathlib import Path
import numpy as np


@dataclass(frozen=True, eq=False)
class AudioAsset:
    """
    Core domain entity representing decoded audio.
    Holds sample_rate and one float32 sample array per channel. The arrays
    are made read-only on construction; the asset never changes once decoded.
    """
    sample_rate: int
    channels: tuple[np.ndarray, ...]
    source: str | Path | None = None

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError("Sample rate must be greater than zero.")
        if not self.channels:
            raise ValueError("An audio asset needs at least one channel.")

        frozen: list[np.ndarray] = []
        for channel in self.channels:
            arr = np.array(channel, dtype=np.float32).flatten()
            arr.setflags(write=False)
            frozen.append(arr)

        lengths = {len(arr) for arr in frozen}
        if len(lengths) != 1:
            raise ValueError("All channels must have the same number of frames.")

        object.__setattr__(self, "channels", tuple(frozen))

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0])

    @property
    def duration_seconds(self) -> float:
        """Return the duration of the asset in seconds."""
        return self.frame_count / self.sample_rate

    def channel(self, index: int) -> np.ndarray:
        return self.channels[index]

    def frames(self) -> np.ndarray:
        """Return samples interleaved as a (frames, channels) array."""
        return np.stack(self.channels, axis=1)


@dataclass(frozen=True, eq=False)
class WaveformEnvelope:
    """Fixed-length mean-absolute-amplitude summary of one channel."""
    resolution: int
    magnitudes: np.ndarray = field(repr=False)
    channel_index: int = 0

    def __post_init__(self) -> None:
        arr = np.array(self.magnitudes, dtype=np.float32).flatten()
        if len(arr) != self.resolution:
            raise ValueError("Envelope length must equal its resolution.")
        arr.setflags(write=False)
        object.__setattr__(self, "magnitudes", arr)

    def __len__(self) -> int:
        return self.resolution

    @property
    def peak(self) -> float:
        if self.resolution == 0:
            return 0.0
        return float(np.max(self.magnitudes))
