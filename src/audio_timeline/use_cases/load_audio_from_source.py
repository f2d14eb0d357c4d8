import asyncio
from pathlib import Path

from audio_timeline.domain.audio_asset import AudioAsset
from audio_timeline.domain.errors import AudioTimelineError
from audio_timeline.services.byte_source import read_source_bytes
from audio_timeline.services.decoder import decode
from audio_timeline.services.session import TimelineSession


class LoadAudioFromSource:
    """
    Use case for loading audio from a URL or local path into a session.
    Reading and decoding run in worker threads; when several loads overlap,
    the most recently requested one that succeeds is the one kept.
    """

    def __init__(self, session: TimelineSession, timeout: float | None = None):
        self.session = session
        self.timeout = timeout or session.config["fetch_timeout_seconds"]

    async def execute(self, source: str | Path) -> AudioAsset | None:
        """
        Load and decode `source`.

        Returns:
            AudioAsset | None: The decoded asset, or None when a newer load
            finished first and this result was discarded.
        """
        token = self.session.begin_load()
        try:
            data = await asyncio.to_thread(read_source_bytes, source, self.timeout)
            asset = await asyncio.to_thread(decode, data, str(source))
        except AudioTimelineError as exc:
            self.session.fail_load(token, exc)
            raise

        if not self.session.complete_load(token, asset):
            return None
        return asset
