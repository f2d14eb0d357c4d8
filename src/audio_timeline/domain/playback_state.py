from dataclasses import dataclass
from enum import Enum


class PlaybackStatus(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class PlaybackState:
    """
    Transport state owned by the playback clock.

    reference_start_time is the monotonic reading at which playback was last
    anchored; pause_offset_seconds is the audio position at that anchor (and
    the frozen position while not playing).
    """
    status: PlaybackStatus = PlaybackStatus.STOPPED
    pause_offset_seconds: float = 0.0
    playback_rate: float = 1.0
    reference_start_time: float = 0.0

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING
