import pytest

from audio_timeline.domain.errors import AudioOutputError, InvalidArgument, NoAssetLoaded, OutOfRange
from audio_timeline.domain.playback_state import PlaybackStatus
from audio_timeline.services import events
from audio_timeline.services.events import EventBus
from audio_timeline.services.playback_clock import PlaybackClock


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def player(output, clock, bus, asset_factory):
    player = PlaybackClock(output, now=clock, bus=bus, time_update_interval=0.1)
    player.load(asset_factory(duration_seconds=10.0))
    return player


def test_play_without_asset_fails(output, clock):
    player = PlaybackClock(output, now=clock)

    with pytest.raises(NoAssetLoaded):
        player.play()

    assert player.status is PlaybackStatus.STOPPED
    assert output.starts == []


def test_play_pause_resume_tracks_elapsed_time(player, clock, output):
    player.play()
    clock.advance(3.0)
    assert player.elapsed() == pytest.approx(3.0)

    player.pause()
    clock.advance(5.0)
    assert player.status is PlaybackStatus.PAUSED
    assert player.elapsed() == pytest.approx(3.0)

    player.play()
    clock.advance(1.0)
    assert player.elapsed() == pytest.approx(4.0)
    # resumed output starts where the pause left off
    assert output.starts[-1][0] == pytest.approx(3.0)


def test_second_play_is_a_no_op(player, clock, output):
    player.play()
    clock.advance(2.0)
    before = player.state

    player.play()

    assert player.state == before
    assert player.elapsed() == pytest.approx(2.0)
    assert len(output.starts) == 1


def test_pause_when_not_playing_is_a_no_op(player, output):
    player.pause()

    assert player.status is PlaybackStatus.STOPPED
    assert output.stops == 0


def test_stop_rewinds_from_any_state(player, clock):
    player.play()
    clock.advance(4.0)
    player.pause()

    player.stop()

    assert player.status is PlaybackStatus.STOPPED
    assert player.elapsed() == 0.0


def test_elapsed_is_monotonic_and_clamped(player, clock):
    player.play()
    readings = []
    for _ in range(15):
        clock.advance(1.0)
        readings.append(player.elapsed())

    assert readings == sorted(readings)
    assert max(readings) == pytest.approx(10.0)


def test_seek_out_of_range_leaves_offset_unchanged(player):
    player.seek(4.0)

    with pytest.raises(OutOfRange):
        player.seek(-1)
    with pytest.raises(OutOfRange):
        player.seek(11.0)
    with pytest.raises(OutOfRange):
        player.seek(float("nan"))

    assert player.state.pause_offset_seconds == pytest.approx(4.0)


def test_seek_while_paused_does_not_start_output(player, output):
    player.seek(6.0)

    assert player.status is PlaybackStatus.STOPPED
    assert output.starts == []
    assert player.elapsed() == pytest.approx(6.0)


def test_seek_while_playing_restarts_output(player, clock, output):
    player.play()
    clock.advance(1.0)

    player.seek(7.0)
    clock.advance(0.5)

    assert player.status is PlaybackStatus.PLAYING
    assert output.starts[-1][0] == pytest.approx(7.0)
    assert player.elapsed() == pytest.approx(7.5)


def test_stale_completion_after_seek_is_ignored(player, output):
    player.play()
    stale_complete = output.on_complete

    player.seek(2.0)
    stale_complete()

    assert player.status is PlaybackStatus.PLAYING


def test_output_completion_stops_playback(player, output):
    player.play()

    output.finish()

    assert player.status is PlaybackStatus.STOPPED
    assert player.elapsed() == 0.0


def test_invalid_playback_rate_is_rejected(player):
    with pytest.raises(InvalidArgument):
        player.set_playback_rate(0)
    with pytest.raises(InvalidArgument):
        player.set_playback_rate(-2.0)
    with pytest.raises(InvalidArgument):
        player.set_playback_rate(float("nan"))
    with pytest.raises(InvalidArgument):
        player.set_playback_rate(float("inf"))

    assert player.playback_rate == 1.0


def test_rate_change_does_not_rescale_time_already_played(player, clock, output):
    player.play()
    clock.advance(2.0)

    player.set_playback_rate(2.0)
    clock.advance(1.0)

    # 2s at 1x plus 1s at 2x
    assert player.elapsed() == pytest.approx(4.0)
    assert output.rates == [2.0]


def test_rate_applies_from_next_play_when_paused(player, clock, output):
    player.set_playback_rate(0.5)
    player.play()
    clock.advance(4.0)

    assert output.starts[-1][1] == 0.5
    assert player.elapsed() == pytest.approx(2.0)


def test_tick_emits_time_updates_at_bounded_interval(output, clock, bus, asset_factory):
    player = PlaybackClock(output, now=clock, bus=bus, time_update_interval=0.25)
    player.load(asset_factory(duration_seconds=10.0))
    updates = []
    bus.subscribe(events.TIME_UPDATE, lambda seconds: updates.append(seconds))
    player.play()

    for _ in range(10):
        clock.advance(0.125)
        player.tick()

    assert len(updates) == 5
    assert updates == sorted(updates)


def test_tick_does_nothing_while_stopped(player, bus):
    updates = []
    bus.subscribe(events.TIME_UPDATE, lambda seconds: updates.append(seconds))

    player.tick()

    assert updates == []


def test_state_changes_are_published(player, clock, bus):
    statuses = []
    bus.subscribe(events.STATE_CHANGED, lambda status: statuses.append(status))

    player.play()
    player.pause()
    player.stop()

    assert statuses == [PlaybackStatus.PLAYING, PlaybackStatus.PAUSED, PlaybackStatus.STOPPED]


def test_state_snapshot_cannot_mutate_clock(player):
    snapshot = player.state
    snapshot.pause_offset_seconds = 5.0

    assert player.elapsed() == 0.0


def test_end_to_end_play_pause_seek_natural_stop(player, clock):
    player.play()
    clock.advance(3.0)
    assert player.elapsed() == pytest.approx(3.0)

    player.pause()
    assert player.elapsed() == pytest.approx(3.0)

    player.seek(8.0)
    player.play()
    clock.advance(3.0)
    player.tick()

    assert player.status is PlaybackStatus.STOPPED


def test_nan_rate_while_playing_keeps_elapsed_finite(player, clock):
    player.play()
    clock.advance(1.0)

    with pytest.raises(InvalidArgument):
        player.set_playback_rate(float("nan"))
    clock.advance(1.0)

    assert player.elapsed() == pytest.approx(2.0)


class RestartFailingOutput:
    """Sink whose second start fails, like a device that vanished mid-play."""

    def __init__(self):
        self.starts = 0

    def start(self, asset, offset_seconds, rate, on_complete):
        self.starts += 1
        if self.starts > 1:
            raise AudioOutputError("device unavailable")

    def stop(self):
        pass

    def set_rate(self, rate):
        pass


def test_failed_restart_on_seek_pauses_at_target(clock, bus, asset_factory):
    player = PlaybackClock(RestartFailingOutput(), now=clock, bus=bus)
    player.load(asset_factory(duration_seconds=10.0))
    statuses = []
    bus.subscribe(events.STATE_CHANGED, lambda status: statuses.append(status))
    player.play()
    clock.advance(5.0)

    with pytest.raises(AudioOutputError):
        player.seek(1.0)
    clock.advance(2.0)

    assert player.status is PlaybackStatus.PAUSED
    assert player.elapsed() == pytest.approx(1.0)
    assert statuses[-1] is PlaybackStatus.PAUSED
