"""Prediction of the next display presentation time."""

from __future__ import annotations

import logging

from tilecomp.animation import get_monotonic_time

_log = logging.getLogger(__name__)

_SECOND_NS = 1_000_000_000


class FrameClock:
    """Tracks presentation times to predict the next vblank.

    Times and the refresh interval are integer nanoseconds.
    """

    def __init__(self, refresh_interval: int | None) -> None:
        if refresh_interval is not None and not 0 < refresh_interval < _SECOND_NS:
            raise ValueError(
                "refresh interval must be positive and shorter than one second"
            )
        self.refresh_interval = refresh_interval
        self.last_presentation_time: int | None = None

    def __repr__(self) -> str:
        return (
            f"FrameClock(refresh_interval={self.refresh_interval}, "
            f"last_presentation_time={self.last_presentation_time})"
        )

    def presented(self, presentation_time: int) -> None:
        """Record that a frame was presented at the given time."""
        if presentation_time == 0:
            return
        self.last_presentation_time = presentation_time

    def next_presentation_time(self, now: int | None = None) -> int:
        """Predict when the next frame will be presented."""
        if now is None:
            now = get_monotonic_time()

        interval = self.refresh_interval
        last = self.last_presentation_time
        if interval is None or last is None:
            return now

        if now <= last:
            # Got an early vblank.
            orig_now = now
            now += interval
            if now < last:
                _log.error(
                    "got a 2+ early VBlank, %d ns until presentation "
                    "(now=%d, last_presentation_time=%d)",
                    last - now,
                    orig_now,
                    last,
                )
                now = last + interval

        since_last = now - last
        to_next = (since_last // interval + 1) * interval
        return last + to_next