"""Monitor state as reported by the display configuration interface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

_LAPTOP_PREFIXES = ("eDP-", "LVDS", "DSI-")


@dataclass
class Monitor:
    """A physical monitor: (connector, vendor, product, serial) and its state."""

    names: tuple[str, str, str, str]
    modes: list[Any] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class LogicalMonitor:
    """A region of the global space shown on one or more monitors."""

    x: int = 0
    y: int = 0
    scale: float = 1.0
    transform: int = 0
    is_primary: bool = False
    monitors: list[tuple[str, str, str, str]] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)


def is_laptop_panel(connector: str) -> bool:
    """Whether the connector name looks like a built-in laptop panel."""
    return len(connector) >= 4 and connector[:4] in _LAPTOP_PREFIXES


def build_monitor(connector: str) -> Monitor:
    """Describe the monitor on the given connector."""
    builtin = is_laptop_panel(connector)
    properties: dict[str, Any] = {}
    if builtin:
        properties["display-name"] = "Built-in display"
    properties["is-builtin"] = builtin
    # The connector name doubles as the serial, which session restore needs.
    return Monitor(names=(connector, "", "", connector), properties=properties)


def current_state(
    connectors: Iterable[str],
) -> tuple[int, list[Monitor], list[LogicalMonitor], dict[str, Any]]:
    """The (serial, monitors, logical monitors, properties) state.

    Built-in monitors come first, then the rest by connector name.
    """
    monitors = [build_monitor(connector) for connector in connectors]
    monitors.sort(key=lambda m: ("display-name" not in m.properties, m.names[0]))
    logical = [LogicalMonitor(monitors=[monitor.names]) for monitor in monitors]
    return 0, monitors, logical, {}