"""Background worker thread for reading and decoding audio."""

from __future__ import annotations

from PySide6.QtCore import QThread, Signal

from audio_timeline.domain.errors import AudioTimelineError
from audio_timeline.services.byte_source import read_source_bytes
from audio_timeline.services.decoder import decode


class LoadAudioWorker(QThread):
    """Reads and decodes one source off the main thread."""

    result = Signal(int, bool, str, object)  # (token, ok, message, asset_or_error)

    def __init__(self, token: int, source: str, timeout: float):
        super().__init__()
        self._token = token
        self._source = source
        self._timeout = timeout

    def run(self):
        try:
            data = read_source_bytes(self._source, self._timeout)
            asset = decode(data, self._source)
            self.result.emit(self._token, True, f"Loaded {self._source}", asset)
        except AudioTimelineError as e:
            self.result.emit(self._token, False, str(e), e)
