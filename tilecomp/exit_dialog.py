"""The dialog asking for confirmation before quitting the compositor."""

from __future__ import annotations

TEXT = (
    "Are you sure you want to exit tilecomp?\n\n"
    "Press <span face='mono' bgcolor='#2C2C2C'> Enter </span> to confirm."
)
PADDING = 16
FONT = "sans 14px"
BORDER = 8
BORDER_COLOR = (1.0, 0.3, 0.3)


class ExitConfirmDialog:
    """Open/closed state and placement of the exit confirmation dialog."""

    def __init__(self) -> None:
        self._is_open = False

    @property
    def is_open(self) -> bool:
        """Whether the dialog is currently shown."""
        return self._is_open

    def show(self) -> bool:
        """Open the dialog; return True if it was closed before."""
        if self._is_open:
            return False
        self._is_open = True
        return True

    def hide(self) -> bool:
        """Close the dialog; return True if it was open before."""
        if not self._is_open:
            return False
        self._is_open = False
        return True

    def position(
        self,
        output_width: int,
        output_height: int,
        buffer_width: int,
        buffer_height: int,
    ) -> tuple[int, int] | None:
        """Top-left corner centring the dialog on the output, or None when closed."""
        if not self._is_open:
            return None
        x = max(output_width // 2 - buffer_width // 2, 0)
        y = max(output_height // 2 - buffer_height // 2, 0)
        return x, y