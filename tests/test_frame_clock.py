import pytest

from tilecomp.frame_clock import FrameClock

INTERVAL = 16_666_667
LAST = 5_000_000_000


def _clock():
    clock = FrameClock(INTERVAL)
    clock.presented(LAST)
    return clock


def test_without_refresh_interval_returns_now():
    clock = FrameClock(None)
    clock.presented(LAST)
    assert clock.next_presentation_time(LAST + 123) == LAST + 123


def test_without_presentation_returns_now():
    clock = FrameClock(INTERVAL)
    assert clock.next_presentation_time(LAST + 7) == LAST + 7


def test_zero_presentation_time_is_ignored():
    clock = FrameClock(INTERVAL)
    clock.presented(0)
    assert clock.last_presentation_time is None
    assert clock.next_presentation_time(42) == 42


def test_shortly_after_presentation_predicts_next_vblank():
    clock = _clock()
    assert clock.next_presentation_time(LAST + 5) == LAST + INTERVAL


@pytest.mark.parametrize("offset", [1, INTERVAL - 1, INTERVAL, INTERVAL * 3 + 17, INTERVAL * 50])
def test_prediction_is_on_the_vblank_grid_and_within_one_interval(offset):
    clock = _clock()
    now = LAST + offset
    result = clock.next_presentation_time(now)
    assert result > now
    assert result - now <= INTERVAL
    assert (result - LAST) % INTERVAL == 0


@pytest.mark.parametrize("offset", [0, 1, INTERVAL // 2, INTERVAL * 4])
def test_early_vblank_predicts_after_last_presentation(offset):
    clock = _clock()
    result = clock.next_presentation_time(LAST - offset)
    assert result > LAST
    assert (result - LAST) % INTERVAL == 0


def test_latest_presentation_wins():
    clock = _clock()
    clock.presented(LAST + 3)
    assert clock.last_presentation_time == LAST + 3
    assert clock.next_presentation_time(LAST + 4) == LAST + 3 + INTERVAL


@pytest.mark.parametrize("interval", [0, -5, 1_000_000_000, 2_000_000_000])
def test_invalid_refresh_interval_raises(interval):
    with pytest.raises(ValueError):
        FrameClock(interval)


def test_refresh_interval_is_kept():
    assert FrameClock(INTERVAL).refresh_interval == INTERVAL
    assert FrameClock(None).refresh_interval is None