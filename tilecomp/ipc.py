"""Messages exchanged with the compositor over its IPC socket, as JSON."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any

SOCKET_PATH_ENV = "TILECOMP_SOCKET"
"""Name of the environment variable holding the IPC socket path."""

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


def _check_int(value: Any, name: str, maximum: int | None = None) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer")
    if value < 0 or (maximum is not None and value > maximum):
        raise ValueError(f"{name} is out of range")
    return value


def _check_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    return value


def _field(data: dict, key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    return data[key]


class Request(enum.Enum):
    """Request from a client to the compositor."""

    OUTPUTS = "Outputs"
    """Request information about connected outputs."""


@dataclass(frozen=True)
class Mode:
    """An output mode."""

    width: int
    height: int
    refresh_rate: int
    """Refresh rate in millihertz."""

    def to_dict(self) -> dict[str, int]:
        """JSON-ready form of the mode."""
        return {
            "width": self.width,
            "height": self.height,
            "refresh_rate": self.refresh_rate,
        }

    @staticmethod
    def from_dict(data: Any) -> Mode:
        """Build a mode from its JSON form."""
        if not isinstance(data, dict):
            raise ValueError("mode must be an object")
        return Mode(
            width=_check_int(_field(data, "width"), "width", _U16_MAX),
            height=_check_int(_field(data, "height"), "height", _U16_MAX),
            refresh_rate=_check_int(
                _field(data, "refresh_rate"), "refresh_rate", _U32_MAX
            ),
        )


@dataclass
class Output:
    """A connected output."""

    name: str
    make: str
    model: str
    physical_size: tuple[int, int] | None = None
    """Physical width and height in millimetres, if known."""
    modes: list[Mode] = field(default_factory=list)
    current_mode: int | None = None
    """Index of the current mode in ``modes``; None if the output is disabled."""

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form of the output."""
        return {
            "name": self.name,
            "make": self.make,
            "model": self.model,
            "physical_size": (
                None if self.physical_size is None else list(self.physical_size)
            ),
            "modes": [mode.to_dict() for mode in self.modes],
            "current_mode": self.current_mode,
        }

    @staticmethod
    def from_dict(data: Any) -> Output:
        """Build an output from its JSON form."""
        if not isinstance(data, dict):
            raise ValueError("output must be an object")

        size = _field(data, "physical_size")
        if size is not None:
            if not isinstance(size, (list, tuple)) or len(size) != 2:
                raise ValueError("physical_size must be a pair")
            size = (
                _check_int(size[0], "physical width", _U32_MAX),
                _check_int(size[1], "physical height", _U32_MAX),
            )

        modes = _field(data, "modes")
        if not isinstance(modes, list):
            raise ValueError("modes must be a list")

        current = _field(data, "current_mode")
        if current is not None:
            current = _check_int(current, "current_mode")

        return Output(
            name=_check_str(_field(data, "name"), "name"),
            make=_check_str(_field(data, "make"), "make"),
            model=_check_str(_field(data, "model"), "model"),
            physical_size=size,
            modes=[Mode.from_dict(mode) for mode in modes],
            current_mode=current,
        )


@dataclass
class Response:
    """Response from the compositor: connected outputs by connector name."""

    outputs: dict[str, Output] = field(default_factory=dict)


def encode_request(request: Request) -> str:
    """Serialise a request to JSON."""
    return json.dumps(Request(request).value)


def decode_request(text: str | bytes) -> Request:
    """Parse a request from JSON."""
    value = json.loads(text)
    if not isinstance(value, str):
        raise ValueError("request must be a string")
    try:
        return Request(value)
    except ValueError as err:
        raise ValueError(f"unknown request {value!r}") from err


def encode_response(response: Response) -> str:
    """Serialise a response to JSON."""
    outputs = {name: output.to_dict() for name, output in response.outputs.items()}
    return json.dumps({"Outputs": outputs})


def decode_response(text: str | bytes) -> Response:
    """Parse a response from JSON."""
    value = json.loads(text)
    if not isinstance(value, dict) or list(value) != ["Outputs"]:
        raise ValueError("unknown response")
    outputs = value["Outputs"]
    if not isinstance(outputs, dict):
        raise ValueError("outputs must be an object")
    return Response({name: Output.from_dict(data) for name, data in outputs.items()})