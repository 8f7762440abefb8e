"""The compositor configuration: data model and decoding from KDL."""

from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, ClassVar

from tilecomp.kdl import KdlError, KdlNode, parse_document
from tilecomp.keys import Key

_log = logging.getLogger(__name__)

DEFAULT_SCREENSHOT_PATH = "~/Pictures/Screenshots/Screenshot from %Y-%m-%d %H-%M-%S.png"

_I32 = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_F64 = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)


class ConfigError(KdlError):
    """Raised when a configuration cannot be read or decoded."""


def _parse_i32(text: str) -> int:
    if not _I32.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not -(2**31) <= value < 2**31:
        raise ValueError(f"integer {text!r} is out of range")
    return value


def _parse_u16(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if value > 0xFFFF:
        raise ValueError(f"integer {text!r} is out of range")
    return value


def _parse_f64(text: str) -> float:
    if not _F64.fullmatch(text):
        raise ValueError(f"invalid float {text!r}")
    return float(text)


class CenterFocusedColumn(enum.Enum):
    """When to center the focused column."""

    NEVER = "never"
    """Focusing a column will not center the column."""
    ALWAYS = "always"
    """The focused column will always be centered."""
    ON_OVERFLOW = "on-overflow"
    """Center a column if it does not fit on screen with the previously focused one."""


class TrackLayout(enum.Enum):
    """Whether keyboard layout changes are global or per window."""

    GLOBAL = "global"
    WINDOW = "window"


class AccelProfile(enum.Enum):
    """Pointer acceleration profile."""

    ADAPTIVE = "adaptive"
    FLAT = "flat"

    @staticmethod
    def parse(text: str) -> AccelProfile:
        """Parse ``"adaptive"`` or ``"flat"``."""
        try:
            return AccelProfile(text)
        except ValueError:
            raise ValueError(
                'invalid accel profile, can be "adaptive" or "flat"'
            ) from None


class TapButtonMap(enum.Enum):
    """Mapping of one-, two- and three-finger taps to buttons."""

    LEFT_RIGHT_MIDDLE = "left-right-middle"
    LEFT_MIDDLE_RIGHT = "left-middle-right"

    @staticmethod
    def parse(text: str) -> TapButtonMap:
        """Parse ``"left-right-middle"`` or ``"left-middle-right"``."""
        try:
            return TapButtonMap(text)
        except ValueError:
            raise ValueError(
                'invalid tap button map, can be "left-right-middle" or '
                '"left-middle-right"'
            ) from None


class Transform(enum.Enum):
    """Output transform, which goes counter-clockwise."""

    NORMAL = "normal"
    ROTATE_90 = "90"
    ROTATE_180 = "180"
    ROTATE_270 = "270"
    FLIPPED = "flipped"
    FLIPPED_90 = "flipped-90"
    FLIPPED_180 = "flipped-180"
    FLIPPED_270 = "flipped-270"

    @staticmethod
    def parse(text: str) -> Transform:
        """Parse a transform name such as ``"flipped-90"``."""
        try:
            return Transform(text)
        except ValueError:
            raise ValueError(
                'invalid transform, can be "90", "180", "270", '
                '"flipped", "flipped-90", "flipped-180" or "flipped-270"'
            ) from None


class LayoutAction(enum.Enum):
    """Direction of a keyboard layout switch."""

    NEXT = "next"
    PREV = "prev"


@dataclass(frozen=True)
class Position:
    """Position of an output in the global space."""

    x: int
    y: int


@dataclass(frozen=True)
class Mode:
    """An output mode: size and optional refresh rate in hertz."""

    width: int
    height: int
    refresh: float | None = None

    @staticmethod
    def parse(text: str) -> Mode:
        """Parse ``"<width>x<height>"`` with an optional ``"@<refresh>"``."""
        width, sep, rest = text.partition("x")
        if not sep:
            raise ValueError("no 'x' separator found")
        height, sep, refresh = rest.partition("@")
        try:
            width_value = _parse_u16(width)
        except ValueError as err:
            raise ValueError(f"error parsing width: {err}") from err
        try:
            height_value = _parse_u16(height)
        except ValueError as err:
            raise ValueError(f"error parsing height: {err}") from err
        refresh_value = None
        if sep:
            try:
                refresh_value = _parse_f64(refresh)
            except ValueError as err:
                raise ValueError(f"error parsing refresh rate: {err}") from err
        return Mode(width_value, height_value, refresh_value)


@dataclass(frozen=True)
class Color:
    """An RGBA colour with 8-bit channels."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def to_premultiplied(self) -> tuple[float, float, float, float]:
        """Channels in [0, 1] with colour multiplied by alpha."""
        r, g, b, a = (channel / 255.0 for channel in (self.r, self.g, self.b, self.a))
        return (r * a, g * a, b * a, a)


@dataclass(frozen=True)
class FocusRing:
    """A ring drawn around windows."""

    off: bool = False
    width: int = 4
    active_color: Color = Color(127, 200, 255, 255)
    inactive_color: Color = Color(80, 80, 80, 255)


def default_border() -> FocusRing:
    """The border used when the layout does not configure one."""
    return FocusRing(
        off=True,
        width=4,
        active_color=Color(255, 200, 127, 255),
        inactive_color=Color(80, 80, 80, 255),
    )


@dataclass(frozen=True)
class PresetWidth:
    """A column width: a proportion of the output or a fixed size."""

    PROPORTION: ClassVar[str] = "proportion"
    FIXED: ClassVar[str] = "fixed"

    kind: str
    value: float | int


@dataclass
class DefaultColumnWidth:
    """Widths given to new columns; empty lets windows choose."""

    widths: list[PresetWidth] = field(default_factory=list)


@dataclass(frozen=True)
class Struts:
    """Space reserved at the output edges."""

    left: int = 0
    right: int = 0
    top: int = 0
    bottom: int = 0


@dataclass
class Layout:
    """Layout settings."""

    focus_ring: FocusRing = field(default_factory=FocusRing)
    border: FocusRing = field(default_factory=FocusRing)
    preset_column_widths: list[PresetWidth] = field(default_factory=list)
    default_column_width: DefaultColumnWidth | None = None
    center_focused_column: CenterFocusedColumn = CenterFocusedColumn.NEVER
    gaps: int = 0
    struts: Struts = field(default_factory=Struts)


@dataclass
class SpawnAtStartup:
    """A command run when the compositor starts."""

    command: list[str] = field(default_factory=list)


@dataclass
class Xkb:
    """Keyboard layout settings."""

    rules: str = ""
    model: str = ""
    layout: str | None = None
    variant: str = ""
    options: str | None = None

    def to_xkb_config(self) -> dict[str, str | None]:
        """Settings for building a keymap; the layout defaults to ``"us"``."""
        return {
            "rules": self.rules,
            "model": self.model,
            "layout": self.layout if self.layout is not None else "us",
            "variant": self.variant,
            "options": self.options,
        }


@dataclass
class Keyboard:
    """Keyboard settings."""

    xkb: Xkb = field(default_factory=Xkb)
    repeat_delay: int = 0
    repeat_rate: int = 0
    track_layout: TrackLayout = TrackLayout.GLOBAL


@dataclass
class Touchpad:
    """Touchpad settings."""

    tap: bool = False
    dwt: bool = False
    natural_scroll: bool = False
    accel_speed: float = 0.0
    accel_profile: AccelProfile | None = None
    tap_button_map: TapButtonMap | None = None


@dataclass
class Mouse:
    """Mouse settings."""

    natural_scroll: bool = False
    accel_speed: float = 0.0
    accel_profile: AccelProfile | None = None


@dataclass
class Tablet:
    """Tablet settings."""

    map_to_output: str | None = None


@dataclass
class Input:
    """Input device settings."""

    keyboard: Keyboard = field(default_factory=Keyboard)
    touchpad: Touchpad = field(default_factory=Touchpad)
    mouse: Mouse = field(default_factory=Mouse)
    tablet: Tablet = field(default_factory=Tablet)
    disable_power_key_handling: bool = False


@dataclass
class Output:
    """Settings of one output, matched by connector name."""

    name: str = ""
    off: bool = False
    scale: float = 1.0
    transform: Transform = Transform.NORMAL
    position: Position | None = None
    mode: Mode | None = None


@dataclass
class Cursor:
    """Cursor theme settings."""

    xcursor_theme: str = "default"
    xcursor_size: int = 24


@dataclass(frozen=True)
class HotkeyOverlay:
    """Hotkey overlay settings."""

    skip_at_startup: bool = False


@dataclass(frozen=True)
class SizeChange:
    """A change of a window or column size."""

    SET_FIXED: ClassVar[str] = "set-fixed"
    SET_PROPORTION: ClassVar[str] = "set-proportion"
    ADJUST_FIXED: ClassVar[str] = "adjust-fixed"
    ADJUST_PROPORTION: ClassVar[str] = "adjust-proportion"

    kind: str
    value: float | int

    @staticmethod
    def parse(text: str) -> SizeChange:
        """Parse ``"10"``, ``"+10"``, ``"-10"``, ``"10%"``, ``"+10%"`` and the like."""
        value, sep, rest = text.partition("%")
        if sep:
            if rest:
                raise ValueError("trailing characters after '%' are not allowed")
            if not value:
                raise ValueError("value is missing")
            try:
                number = _parse_f64(value)
            except ValueError as err:
                raise ValueError(f"error parsing value: {err}") from err
            adjust = value[0] in "+-"
            kind = SizeChange.ADJUST_PROPORTION if adjust else SizeChange.SET_PROPORTION
            return SizeChange(kind, number)

        if not text:
            raise ValueError("value is missing")
        try:
            number = _parse_i32(text)
        except ValueError as err:
            raise ValueError(f"error parsing value: {err}") from err
        kind = SizeChange.ADJUST_FIXED if text[0] in "+-" else SizeChange.SET_FIXED
        return SizeChange(kind, number)


_NO_ARGUMENT_ACTIONS = frozenset(
    {
        "quit",
        "suspend",
        "power-off-monitors",
        "toggle-debug-tint",
        "screenshot",
        "screenshot-screen",
        "screenshot-window",
        "close-window",
        "fullscreen-window",
        "focus-column-left",
        "focus-column-right",
        "focus-column-first",
        "focus-column-last",
        "focus-window-down",
        "focus-window-up",
        "focus-window-or-workspace-down",
        "focus-window-or-workspace-up",
        "move-column-left",
        "move-column-right",
        "move-column-to-first",
        "move-column-to-last",
        "move-window-down",
        "move-window-up",
        "move-window-down-or-to-workspace-down",
        "move-window-up-or-to-workspace-up",
        "consume-or-expel-window-left",
        "consume-or-expel-window-right",
        "consume-window-into-column",
        "expel-window-from-column",
        "center-column",
        "focus-workspace-down",
        "focus-workspace-up",
        "move-window-to-workspace-down",
        "move-window-to-workspace-up",
        "move-column-to-workspace-down",
        "move-column-to-workspace-up",
        "move-workspace-down",
        "move-workspace-up",
        "focus-monitor-left",
        "focus-monitor-right",
        "focus-monitor-down",
        "focus-monitor-up",
        "move-window-to-monitor-left",
        "move-window-to-monitor-right",
        "move-window-to-monitor-down",
        "move-window-to-monitor-up",
        "move-column-to-monitor-left",
        "move-column-to-monitor-right",
        "move-column-to-monitor-down",
        "move-column-to-monitor-up",
        "switch-preset-column-width",
        "maximize-column",
        "show-hotkey-overlay",
        "move-workspace-to-monitor-left",
        "move-workspace-to-monitor-right",
        "move-workspace-to-monitor-down",
        "move-workspace-to-monitor-up",
    }
)
# Actions that exist at run time but cannot be written in a config file.
_INTERNAL_ACTIONS = frozenset({"change-vt", "confirm-screenshot", "cancel-screenshot"})
_ARGUMENT_ACTIONS = frozenset(
    {
        "spawn",
        "focus-workspace",
        "move-window-to-workspace",
        "move-column-to-workspace",
        "set-window-height",
        "set-column-width",
        "switch-layout",
    }
)
ACTION_NAMES = _NO_ARGUMENT_ACTIONS | _INTERNAL_ACTIONS | _ARGUMENT_ACTIONS


@dataclass(frozen=True)
class Action:
    """A bound action, named as in the config, with its argument if it takes one.

    ``spawn`` takes a tuple of strings; workspace actions take an index;
    size actions take a :class:`SizeChange`; ``switch-layout`` takes a
    :class:`LayoutAction`; ``change-vt`` takes a terminal number.
    """

    name: str
    argument: Any = None

    def __post_init__(self) -> None:
        if self.name not in ACTION_NAMES:
            raise ValueError(f"unknown action {self.name!r}")


@dataclass
class Bind:
    """A key binding and the actions it triggers."""

    key: Key
    actions: list[Action] = field(default_factory=list)


@dataclass
class DebugConfig:
    """Debugging switches."""

    animation_slowdown: float = 1.0
    dbus_interfaces_in_non_session_instances: bool = False
    wait_for_frame_completion_before_queueing: bool = False
    enable_color_transformations_capability: bool = False
    enable_overlay_planes: bool = False
    disable_cursor_plane: bool = False
    render_drm_device: Path | None = None


@dataclass
class Config:
    """The whole configuration."""

    input: Input = field(default_factory=Input)
    outputs: list[Output] = field(default_factory=list)
    spawn_at_startup: list[SpawnAtStartup] = field(default_factory=list)
    layout: Layout = field(default_factory=Layout)
    prefer_no_csd: bool = False
    cursor: Cursor = field(default_factory=Cursor)
    screenshot_path: str | None = DEFAULT_SCREENSHOT_PATH
    hotkey_overlay: HotkeyOverlay = field(default_factory=HotkeyOverlay)
    binds: list[Bind] = field(default_factory=list)
    debug: DebugConfig = field(default_factory=DebugConfig)

    @staticmethod
    def parse(text: str, filename: str = "config.kdl") -> Config:
        """Decode a configuration from KDL text."""
        try:
            return _decode_config(parse_document(text, filename))
        except ConfigError:
            raise
        except KdlError as err:
            raise ConfigError(err.message, err.filename, err.line, err.column) from err

    @staticmethod
    def load(path: os.PathLike[str] | str) -> Config:
        """Read and decode the configuration file at ``path``."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            raise ConfigError(
                f"error loading config: error reading {str(path)!r}: {err}"
            ) from err
        config = Config.parse(text, "config.kdl")
        _log.debug("loaded config from %s", path)
        return config


# -- decoding ----------------------------------------------------------------

Converter = Callable[[Any], Any]


def _fail(node: KdlNode, message: str) -> ConfigError:
    return ConfigError(message, node.filename, node.line or None)


def _no_extra(
    node: KdlNode,
    *,
    max_args: int = 0,
    props: frozenset[str] = frozenset(),
    allow_children: bool = False,
) -> None:
    if len(node.arguments) > max_args:
        raise _fail(node, f"unexpected argument in `{node.name}`")
    extra = sorted(set(node.properties) - props)
    if extra:
        raise _fail(node, f"unexpected property `{extra[0]}` in `{node.name}`")
    if node.children and not allow_children:
        raise _fail(node, f"unexpected children in `{node.name}`")


def _convert(node: KdlNode, value: Any, convert: Converter) -> Any:
    try:
        return convert(value)
    except ConfigError:
        raise
    except ValueError as err:
        raise _fail(node, f"invalid value in `{node.name}`: {err}") from err


def _single(node: KdlNode, convert: Converter) -> Any:
    _no_extra(node, max_args=1)
    if not node.arguments:
        raise _fail(node, f"`{node.name}` needs an argument")
    return _convert(node, node.arguments[0], convert)


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("expected a string")
    return value


def _integer(low: int, high: int) -> Converter:
    def convert(value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("expected an integer")
        if not low <= value <= high:
            raise ValueError(f"{value} is out of range {low}..={high}")
        return value

    return convert


_U8 = _integer(0, 0xFF)
_U16 = _integer(0, 0xFFFF)
_I32 = _integer(-(2**31), 2**31 - 1)


def _float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("expected a number")
    return float(value)


def _parsed(parser: Callable[[str], Any]) -> Converter:
    return lambda value: parser(_string(value))


def _scalar(enum_cls: type[enum.Enum]) -> Converter:
    def convert(value: Any) -> Any:
        text = _string(value)
        try:
            return enum_cls(text)
        except ValueError:
            names = ", ".join(f'"{member.value}"' for member in enum_cls)
            raise ValueError(f"expected one of {names}") from None

    return convert


def _optional(convert: Converter) -> Converter:
    return lambda value: None if value is None else convert(value)


class _Reader:
    """Reads the children of a node, remembering which names were asked for."""

    def __init__(
        self, node: KdlNode, *, max_args: int = 0, props: frozenset[str] = frozenset()
    ) -> None:
        _no_extra(node, max_args=max_args, props=props, allow_children=True)
        self.node = node
        self._known: set[str] = set()

    def child(self, name: str) -> KdlNode | None:
        self._known.add(name)
        return self.node.child(name)

    def children(self, name: str) -> list[KdlNode]:
        self._known.add(name)
        return self.node.children_named(name)

    def flag(self, name: str) -> bool:
        node = self.child(name)
        if node is None:
            return False
        _no_extra(node)
        return True

    def value(self, name: str, convert: Converter, default: Any = None) -> Any:
        node = self.child(name)
        return default if node is None else _single(node, convert)

    def decode(
        self, name: str, decoder: Callable[[KdlNode], Any], default: Any
    ) -> Any:
        node = self.child(name)
        return default if node is None else decoder(node)

    def finish(self) -> None:
        for node in self.node.children:
            if node.name not in self._known:
                raise _fail(node, f"unexpected node `{node.name}`")


def _decode_color(node: KdlNode) -> Color:
    _no_extra(node, max_args=4)
    if len(node.arguments) != 4:
        raise _fail(node, f"`{node.name}` needs four arguments: r g b a")
    r, g, b, a = (_convert(node, value, _U8) for value in node.arguments)
    return Color(r, g, b, a)


def _decode_focus_ring(node: KdlNode) -> FocusRing:
    reader = _Reader(node)
    ring = FocusRing(
        off=reader.flag("off"),
        width=reader.value("width", _U16, 4),
        active_color=reader.decode(
            "active-color", _decode_color, Color(127, 200, 255, 255)
        ),
        inactive_color=reader.decode(
            "inactive-color", _decode_color, Color(80, 80, 80, 255)
        ),
    )
    reader.finish()
    return ring


def _decode_preset_width(node: KdlNode) -> PresetWidth:
    if node.name == PresetWidth.PROPORTION:
        return PresetWidth(PresetWidth.PROPORTION, _single(node, _float))
    if node.name == PresetWidth.FIXED:
        return PresetWidth(PresetWidth.FIXED, _single(node, _I32))
    raise _fail(node, f"unexpected node `{node.name}`, expected `proportion` or `fixed`")


def _decode_preset_widths(node: KdlNode) -> list[PresetWidth]:
    _no_extra(node, allow_children=True)
    return [_decode_preset_width(child) for child in node.children]


def _decode_default_column_width(node: KdlNode) -> DefaultColumnWidth:
    return DefaultColumnWidth(_decode_preset_widths(node))


def _decode_struts(node: KdlNode) -> Struts:
    reader = _Reader(node)
    struts = Struts(
        left=reader.value("left", _U16, 0),
        right=reader.value("right", _U16, 0),
        top=reader.value("top", _U16, 0),
        bottom=reader.value("bottom", _U16, 0),
    )
    reader.finish()
    return struts


def _decode_layout(node: KdlNode) -> Layout:
    reader = _Reader(node)
    layout = Layout(
        focus_ring=reader.decode("focus-ring", _decode_focus_ring, FocusRing()),
        border=reader.decode("border", _decode_focus_ring, default_border()),
        preset_column_widths=reader.decode(
            "preset-column-widths", _decode_preset_widths, []
        ),
        default_column_width=reader.decode(
            "default-column-width", _decode_default_column_width, None
        ),
        center_focused_column=reader.value(
            "center-focused-column",
            _scalar(CenterFocusedColumn),
            CenterFocusedColumn.NEVER,
        ),
        gaps=reader.value("gaps", _U16, 16),
        struts=reader.decode("struts", _decode_struts, Struts()),
    )
    reader.finish()
    return layout


def _decode_xkb(node: KdlNode) -> Xkb:
    reader = _Reader(node)
    xkb = Xkb(
        rules=reader.value("rules", _string, ""),
        model=reader.value("model", _string, ""),
        layout=reader.value("layout", _optional(_string)),
        variant=reader.value("variant", _string, ""),
        options=reader.value("options", _optional(_string)),
    )
    reader.finish()
    return xkb


def _decode_keyboard(node: KdlNode) -> Keyboard:
    reader = _Reader(node)
    keyboard = Keyboard(
        xkb=reader.decode("xkb", _decode_xkb, Xkb()),
        repeat_delay=reader.value("repeat-delay", _U16, 600),
        repeat_rate=reader.value("repeat-rate", _U8, 25),
        track_layout=reader.value(
            "track-layout", _scalar(TrackLayout), TrackLayout.GLOBAL
        ),
    )
    reader.finish()
    return keyboard


def _decode_touchpad(node: KdlNode) -> Touchpad:
    reader = _Reader(node)
    touchpad = Touchpad(
        tap=reader.flag("tap"),
        dwt=reader.flag("dwt"),
        natural_scroll=reader.flag("natural-scroll"),
        accel_speed=reader.value("accel-speed", _float, 0.0),
        accel_profile=reader.value(
            "accel-profile", _optional(_parsed(AccelProfile.parse))
        ),
        tap_button_map=reader.value(
            "tap-button-map", _optional(_parsed(TapButtonMap.parse))
        ),
    )
    reader.finish()
    return touchpad


def _decode_mouse(node: KdlNode) -> Mouse:
    reader = _Reader(node)
    mouse = Mouse(
        natural_scroll=reader.flag("natural-scroll"),
        accel_speed=reader.value("accel-speed", _float, 0.0),
        accel_profile=reader.value(
            "accel-profile", _optional(_parsed(AccelProfile.parse))
        ),
    )
    reader.finish()
    return mouse


def _decode_tablet(node: KdlNode) -> Tablet:
    reader = _Reader(node)
    tablet = Tablet(map_to_output=reader.value("map-to-output", _optional(_string)))
    reader.finish()
    return tablet


def _decode_input(node: KdlNode) -> Input:
    reader = _Reader(node)
    result = Input(
        keyboard=reader.decode("keyboard", _decode_keyboard, Keyboard()),
        touchpad=reader.decode("touchpad", _decode_touchpad, Touchpad()),
        mouse=reader.decode("mouse", _decode_mouse, Mouse()),
        tablet=reader.decode("tablet", _decode_tablet, Tablet()),
        disable_power_key_handling=reader.flag("disable-power-key-handling"),
    )
    reader.finish()
    return result


def _decode_position(node: KdlNode) -> Position:
    _no_extra(node, props=frozenset({"x", "y"}))
    for name in ("x", "y"):
        if name not in node.properties:
            raise _fail(node, f"property `{name}` is required in `{node.name}`")
    return Position(
        _convert(node, node.properties["x"], _I32),
        _convert(node, node.properties["y"], _I32),
    )


def _decode_output(node: KdlNode) -> Output:
    reader = _Reader(node, max_args=1)
    if not node.arguments:
        raise _fail(node, "`output` needs the connector name as an argument")
    output = Output(
        name=_convert(node, node.arguments[0], _string),
        off=reader.flag("off"),
        scale=reader.value("scale", _float, 1.0),
        transform=reader.value(
            "transform", _parsed(Transform.parse), Transform.NORMAL
        ),
        position=reader.decode("position", _decode_position, None),
        mode=reader.value("mode", _optional(_parsed(Mode.parse))),
    )
    reader.finish()
    return output


def _decode_spawn(node: KdlNode) -> SpawnAtStartup:
    _no_extra(node, max_args=len(node.arguments))
    return SpawnAtStartup([_convert(node, value, _string) for value in node.arguments])


def _decode_cursor(node: KdlNode) -> Cursor:
    reader = _Reader(node)
    cursor = Cursor(
        xcursor_theme=reader.value("xcursor-theme", _string, "default"),
        xcursor_size=reader.value("xcursor-size", _U8, 24),
    )
    reader.finish()
    return cursor


def _decode_hotkey_overlay(node: KdlNode) -> HotkeyOverlay:
    reader = _Reader(node)
    overlay = HotkeyOverlay(skip_at_startup=reader.flag("skip-at-startup"))
    reader.finish()
    return overlay


_ACTION_ARGUMENTS: dict[str, Converter] = {
    "focus-workspace": _U8,
    "move-window-to-workspace": _U8,
    "move-column-to-workspace": _U8,
    "set-window-height": _parsed(SizeChange.parse),
    "set-column-width": _parsed(SizeChange.parse),
    "switch-layout": _scalar(LayoutAction),
}


def _decode_action(node: KdlNode) -> Action:
    name = node.name
    if name == "spawn":
        _no_extra(node, max_args=len(node.arguments))
        return Action(
            "spawn", tuple(_convert(node, value, _string) for value in node.arguments)
        )
    if name in _NO_ARGUMENT_ACTIONS:
        _no_extra(node)
        return Action(name)
    convert = _ACTION_ARGUMENTS.get(name)
    if convert is None:
        raise _fail(node, f"unexpected node `{name}`")
    return Action(name, _single(node, convert))


def _decode_bind(node: KdlNode) -> Bind:
    _no_extra(node, allow_children=True)
    try:
        key = Key.parse(node.name)
    except ValueError as err:
        raise _fail(node, str(err)) from err
    return Bind(key, [_decode_action(child) for child in node.children])


def _decode_binds(node: KdlNode) -> list[Bind]:
    _no_extra(node, allow_children=True)
    return [_decode_bind(child) for child in node.children]


def _decode_debug(node: KdlNode) -> DebugConfig:
    reader = _Reader(node)
    device = reader.value("render-drm-device", _optional(_string))
    debug = DebugConfig(
        animation_slowdown=reader.value("animation-slowdown", _float, 1.0),
        dbus_interfaces_in_non_session_instances=reader.flag(
            "dbus-interfaces-in-non-session-instances"
        ),
        wait_for_frame_completion_before_queueing=reader.flag(
            "wait-for-frame-completion-before-queueing"
        ),
        enable_color_transformations_capability=reader.flag(
            "enable-color-transformations-capability"
        ),
        enable_overlay_planes=reader.flag("enable-overlay-planes"),
        disable_cursor_plane=reader.flag("disable-cursor-plane"),
        render_drm_device=None if device is None else Path(device),
    )
    reader.finish()
    return debug


def _decode_config(root: KdlNode) -> Config:
    reader = _Reader(root)
    config = Config(
        input=reader.decode("input", _decode_input, Input()),
        outputs=[_decode_output(node) for node in reader.children("output")],
        spawn_at_startup=[
            _decode_spawn(node) for node in reader.children("spawn-at-startup")
        ],
        layout=reader.decode("layout", _decode_layout, Layout()),
        prefer_no_csd=reader.flag("prefer-no-csd"),
        cursor=reader.decode("cursor", _decode_cursor, Cursor()),
        screenshot_path=reader.value(
            "screenshot-path", _optional(_string), DEFAULT_SCREENSHOT_PATH
        ),
        hotkey_overlay=reader.decode(
            "hotkey-overlay", _decode_hotkey_overlay, HotkeyOverlay()
        ),
        binds=reader.decode("binds", _decode_binds, []),
        debug=reader.decode("debug", _decode_debug, DebugConfig()),
    )
    reader.finish()
    return config