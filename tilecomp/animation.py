"""Eased numeric animations driven by a monotonic clock.

All times and durations are integer nanoseconds.
"""

from __future__ import annotations

import time

_slowdown = 1.0


def get_monotonic_time() -> int:
    """Return the current monotonic time in nanoseconds."""
    return time.monotonic_ns()


def set_animation_slowdown(factor: float) -> None:
    """Set the factor that every new animation's duration is multiplied by."""
    global _slowdown
    _slowdown = float(factor)


def animation_slowdown() -> float:
    """Return the current animation slowdown factor."""
    return _slowdown


def ease_out_cubic(x: float) -> float:
    """Cubic ease-out curve mapping [0, 1] onto [0, 1]."""
    return (x - 1.0) ** 3 + 1.0


class Animation:
    """An animation from one value to another over a duration."""

    def __init__(
        self,
        from_value: float,
        to_value: float,
        duration: int,
        now: int | None = None,
    ) -> None:
        if now is None:
            now = get_monotonic_time()
        self.from_value = float(from_value)
        self.to_value = float(to_value)
        self.duration = int(duration * _slowdown)
        self.start_time = now
        self.current_time = now

    def __repr__(self) -> str:
        return (
            f"Animation(from_value={self.from_value}, to_value={self.to_value}, "
            f"duration={self.duration}, start_time={self.start_time}, "
            f"current_time={self.current_time})"
        )

    def set_current_time(self, time: int) -> None:
        """Move the animation to the given point in time."""
        self.current_time = time

    def is_done(self) -> bool:
        """Whether the animation has reached its end."""
        return self.current_time >= self.start_time + self.duration

    def value(self) -> float:
        """The eased value at the current time."""
        if self.duration <= 0:
            x = 1.0
        else:
            passed = self.current_time - self.start_time
            x = min(max(passed / self.duration, 0.0), 1.0)
        return ease_out_cubic(x) * (self.to_value - self.from_value) + self.from_value