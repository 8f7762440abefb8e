import pytest

from tilecomp.animation import (
    Animation,
    animation_slowdown,
    ease_out_cubic,
    get_monotonic_time,
    set_animation_slowdown,
)


@pytest.fixture(autouse=True)
def _restore_slowdown():
    previous = animation_slowdown()
    yield
    set_animation_slowdown(previous)


def test_ease_out_cubic_endpoints():
    assert ease_out_cubic(0.0) == 0.0
    assert ease_out_cubic(1.0) == 1.0


def test_ease_out_cubic_midpoint():
    assert ease_out_cubic(0.5) == pytest.approx(0.875)


def test_ease_out_cubic_is_increasing():
    xs = [i / 20 for i in range(21)]
    ys = [ease_out_cubic(x) for x in xs]
    assert ys == sorted(ys)
    assert all(y >= x for x, y in zip(xs, ys))


def test_value_at_start_is_from_value():
    anim = Animation(2.0, 5.0, 1000, now=100)
    assert anim.value() == 2.0
    assert not anim.is_done()


def test_value_at_end_is_to_value():
    anim = Animation(2.0, 5.0, 1000, now=100)
    anim.set_current_time(1100)
    assert anim.is_done()
    assert anim.value() == 5.0


def test_not_done_just_before_end():
    anim = Animation(0.0, 1.0, 1000, now=100)
    anim.set_current_time(1099)
    assert not anim.is_done()
    assert 0.0 < anim.value() < 1.0


def test_value_clamped_before_start_and_after_end():
    anim = Animation(1.0, 0.0, 1000, now=500)
    anim.set_current_time(0)
    assert anim.value() == 1.0
    anim.set_current_time(10_000)
    assert anim.value() == 0.0


def test_zero_duration_is_immediately_done():
    anim = Animation(3.0, 7.0, 0, now=10)
    assert anim.is_done()
    assert anim.value() == 7.0


def test_slowdown_stretches_duration():
    set_animation_slowdown(2.0)
    assert animation_slowdown() == 2.0
    anim = Animation(0.0, 1.0, 1000, now=0)
    anim.set_current_time(1000)
    assert not anim.is_done()
    anim.set_current_time(2000)
    assert anim.is_done()


def test_default_start_time_uses_monotonic_clock():
    before = get_monotonic_time()
    anim = Animation(0.0, 1.0, 1000)
    after = get_monotonic_time()
    assert before <= anim.start_time <= after
    assert anim.current_time == anim.start_time