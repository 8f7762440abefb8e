"""The sliding notification shown when the config fails to load or is created."""

from __future__ import annotations

import enum
import math
import os

from tilecomp.animation import Animation

MILLISECOND = 1_000_000
SECOND = 1_000_000_000

TEXT = (
    "Failed to parse the config file. "
    "Please run <span face='monospace' bgcolor='#000000'>tilecomp validate</span> "
    "to see the errors."
)
PADDING = 8
FONT = "sans 14px"
BORDER = 4

SLIDE_DURATION = 250 * MILLISECOND
ERROR_SHOWN_DURATION = 4 * SECOND
# Longer because it comes with a monitor modeset and the hotkey overlay
# diverting the attention.
CREATED_SHOWN_DURATION = 8 * SECOND

ERROR_BORDER_COLOR = (1.0, 0.3, 0.3)
CREATED_BORDER_COLOR = (0.5, 1.0, 0.5)


def padded_size(
    text_width: int, text_height: int, padding: int, scale: int
) -> tuple[int, int]:
    """Size of a box around text of the given size.

    ``padding`` is in logical pixels and is multiplied by ``scale``; the result
    is rounded up to a multiple of ``scale``.
    """
    pad = padding * scale
    width = text_width + pad * 2
    height = text_height + pad * 2
    width = (width + scale - 1) // scale * scale
    height = (height + scale - 1) // scale * scale
    return width, height


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _quote_path(path: os.PathLike[str] | str) -> str:
    text = os.fspath(path).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class NotificationPhase(enum.Enum):
    """Where the notification is in its show/hide cycle."""

    HIDDEN = "hidden"
    SHOWING = "showing"
    SHOWN = "shown"
    HIDING = "hiding"


class ConfigErrorNotification:
    """A notification about a config error or a freshly created config file."""

    def __init__(self) -> None:
        self.phase = NotificationPhase.HIDDEN
        self._animation: Animation | None = None
        self._deadline: int | None = None
        # When set, this is a "created config" notification instead of an error.
        self.created_path: os.PathLike[str] | str | None = None

    def show_created(self, created_path: os.PathLike[str] | str | None) -> None:
        """Show the notification about a newly created config file."""
        self.created_path = created_path
        self._start(NotificationPhase.SHOWING, Animation(0.0, 1.0, SLIDE_DURATION))

    def show(self) -> None:
        """Show the config error notification, restarting it if already visible."""
        self.created_path = None
        self._start(NotificationPhase.SHOWING, Animation(0.0, 1.0, SLIDE_DURATION))

    def hide(self) -> None:
        """Start hiding the notification unless it is already hidden."""
        if self.phase is NotificationPhase.HIDDEN:
            return
        self._start(NotificationPhase.HIDING, Animation(1.0, 0.0, SLIDE_DURATION))

    def _start(self, phase: NotificationPhase, animation: Animation) -> None:
        self.phase = phase
        self._animation = animation
        self._deadline = None

    def advance_animations(self, target_presentation_time: int) -> None:
        """Advance the state to the given presentation time."""
        phase = self.phase
        if phase is NotificationPhase.HIDDEN:
            return
        if phase is NotificationPhase.SHOWN:
            if target_presentation_time >= self._deadline:
                self.hide()
            return

        anim = self._animation
        anim.set_current_time(target_presentation_time)
        if not anim.is_done():
            return
        if phase is NotificationPhase.SHOWING:
            duration = (
                CREATED_SHOWN_DURATION
                if self.created_path is not None
                else ERROR_SHOWN_DURATION
            )
            self.phase = NotificationPhase.SHOWN
            self._animation = None
            self._deadline = target_presentation_time + duration
        else:
            self.phase = NotificationPhase.HIDDEN
            self._animation = None

    def are_animations_ongoing(self) -> bool:
        """Whether the notification is visible and needs redraws."""
        return self.phase is not NotificationPhase.HIDDEN

    def message(self) -> str:
        """Pango markup of the text to show."""
        if self.created_path is None:
            return TEXT
        return (
            "Created a default config file at "
            "<span face='monospace' bgcolor='#000000'>"
            f"{_quote_path(self.created_path)}</span>"
        )

    def border_color(self) -> tuple[float, float, float]:
        """RGB colour of the border."""
        if self.created_path is None:
            return ERROR_BORDER_COLOR
        return CREATED_BORDER_COLOR

    def position(
        self, output_width: int, buffer_width: int, buffer_height: int, scale: int
    ) -> tuple[int, int] | None:
        """Top-left corner of the notification on the output, or None when hidden."""
        if self.phase is NotificationPhase.HIDDEN:
            return None

        x = max(output_width // 2 - buffer_width // 2, 0)
        if self.phase is NotificationPhase.SHOWN:
            y = PADDING * 2 * scale
        else:
            y_range = buffer_height + PADDING * 2 * scale
            y = _round_half_away(-buffer_height + self._animation.value() * y_range)
        return x, y