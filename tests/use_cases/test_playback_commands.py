import pytest

from audio_timeline.domain.errors import OutOfRange
from audio_timeline.domain.playback_state import PlaybackStatus
from audio_timeline.services.session import TimelineSession
from audio_timeline.use_cases.play_selection import PlaySelection
from audio_timeline.use_cases.toggle_playback import TogglePlayback


@pytest.fixture
def session(output, clock, asset_factory):
    session = TimelineSession(output, now=clock)
    session.complete_load(session.begin_load(), asset_factory(duration_seconds=10.0))
    return session


def test_toggle_playback_alternates_play_and_pause(session, clock):
    toggle = TogglePlayback(session)

    assert toggle.execute() is PlaybackStatus.PLAYING
    clock.advance(1.5)
    assert toggle.execute() is PlaybackStatus.PAUSED
    assert session.get_elapsed() == pytest.approx(1.5)
    assert toggle.execute() is PlaybackStatus.PLAYING


def test_play_selection_starts_at_selection_start(session, output):
    session.set_selection(4.0, 6.0)

    PlaySelection(session).execute()

    assert session.status is PlaybackStatus.PLAYING
    assert output.starts[-1][0] == pytest.approx(4.0)


def test_play_selection_without_selection_fails(session):
    with pytest.raises(OutOfRange):
        PlaySelection(session).execute()

    assert session.status is PlaybackStatus.STOPPED
