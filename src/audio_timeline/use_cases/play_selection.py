from audio_timeline.domain.errors import OutOfRange
from audio_timeline.services.session import TimelineSession


class PlaySelection:
    """Use case for starting playback at the beginning of the active selection."""

    def __init__(self, session: TimelineSession):
        self.session = session

    def execute(self) -> None:
        selection = self.session.selection
        if selection is None:
            raise OutOfRange("There is no selection to play.")
        self.session.seek(selection.start_seconds)
        self.session.play()
