from audio_timeline.domain.playback_state import PlaybackStatus
from audio_timeline.services.session import TimelineSession


class TogglePlayback:
    """Use case for a single play/pause control."""

    def __init__(self, session: TimelineSession):
        self.session = session

    def execute(self) -> PlaybackStatus:
        if self.session.status is PlaybackStatus.PLAYING:
            self.session.pause()
        else:
            self.session.play()
        return self.session.status
