class AudioTimelineError(Exception):
    """Base class for every error the timeline core reports."""


class DecodeError(AudioTimelineError):
    """The byte buffer is not a recognized or parseable audio container."""


class TransportError(AudioTimelineError):
    """The byte source could not be read (missing file, network failure, non-2xx)."""


class NoAssetLoaded(AudioTimelineError):
    """A playback command was issued before any audio was decoded."""


class OutOfRange(AudioTimelineError, ValueError):
    """A time value falls outside [0, duration]."""


class InvalidArgument(AudioTimelineError, ValueError):
    """A rate, zoom level, resolution or index is not acceptable."""


class AudioOutputError(AudioTimelineError):
    """The audio device refused to open or start a stream."""
