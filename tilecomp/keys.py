"""Key combinations used for key bindings, and keysym name lookup."""

from __future__ import annotations

import enum
import string
from collections import defaultdict
from dataclasses import dataclass


class Modifiers(enum.IntFlag):
    """Modifier keys of a binding."""

    CTRL = 1
    SHIFT = 2
    ALT = 4
    SUPER = 8
    COMPOSITOR = 16


def _ascii_lower(text: str) -> str:
    return "".join(char.lower() if char.isascii() else char for char in text)


_MODIFIER_NAMES = {
    "mod": Modifiers.COMPOSITOR,
    "ctrl": Modifiers.CTRL,
    "control": Modifiers.CTRL,
    "shift": Modifiers.SHIFT,
    "alt": Modifiers.ALT,
    "super": Modifiers.SUPER,
    "win": Modifiers.SUPER,
}

_PUNCTUATION = {
    "space": " ",
    "exclam": "!",
    "quotedbl": '"',
    "numbersign": "#",
    "dollar": "$",
    "percent": "%",
    "ampersand": "&",
    "apostrophe": "'",
    "quoteright": "'",
    "parenleft": "(",
    "parenright": ")",
    "asterisk": "*",
    "plus": "+",
    "comma": ",",
    "minus": "-",
    "period": ".",
    "slash": "/",
    "colon": ":",
    "semicolon": ";",
    "less": "<",
    "equal": "=",
    "greater": ">",
    "question": "?",
    "at": "@",
    "bracketleft": "[",
    "backslash": "\\",
    "bracketright": "]",
    "asciicircum": "^",
    "underscore": "_",
    "grave": "`",
    "quoteleft": "`",
    "braceleft": "{",
    "bar": "|",
    "braceright": "}",
    "asciitilde": "~",
}

_SPECIAL = {
    "BackSpace": 0xFF08,
    "Tab": 0xFF09,
    "Linefeed": 0xFF0A,
    "Clear": 0xFF0B,
    "Return": 0xFF0D,
    "Pause": 0xFF13,
    "Scroll_Lock": 0xFF14,
    "Sys_Req": 0xFF15,
    "Escape": 0xFF1B,
    "Home": 0xFF50,
    "Left": 0xFF51,
    "Up": 0xFF52,
    "Right": 0xFF53,
    "Down": 0xFF54,
    "Prior": 0xFF55,
    "Page_Up": 0xFF55,
    "Next": 0xFF56,
    "Page_Down": 0xFF56,
    "End": 0xFF57,
    "Begin": 0xFF58,
    "Select": 0xFF60,
    "Print": 0xFF61,
    "Execute": 0xFF62,
    "Insert": 0xFF63,
    "Undo": 0xFF65,
    "Redo": 0xFF66,
    "Menu": 0xFF67,
    "Find": 0xFF68,
    "Cancel": 0xFF69,
    "Help": 0xFF6A,
    "Break": 0xFF6B,
    "Num_Lock": 0xFF7F,
    "KP_Space": 0xFF80,
    "KP_Tab": 0xFF89,
    "KP_Enter": 0xFF8D,
    "KP_Home": 0xFF95,
    "KP_Left": 0xFF96,
    "KP_Up": 0xFF97,
    "KP_Right": 0xFF98,
    "KP_Down": 0xFF99,
    "KP_Prior": 0xFF9A,
    "KP_Page_Up": 0xFF9A,
    "KP_Next": 0xFF9B,
    "KP_Page_Down": 0xFF9B,
    "KP_End": 0xFF9C,
    "KP_Begin": 0xFF9D,
    "KP_Insert": 0xFF9E,
    "KP_Delete": 0xFF9F,
    "KP_Multiply": 0xFFAA,
    "KP_Add": 0xFFAB,
    "KP_Separator": 0xFFAC,
    "KP_Subtract": 0xFFAD,
    "KP_Decimal": 0xFFAE,
    "KP_Divide": 0xFFAF,
    "KP_Equal": 0xFFBD,
    "Shift_L": 0xFFE1,
    "Shift_R": 0xFFE2,
    "Control_L": 0xFFE3,
    "Control_R": 0xFFE4,
    "Caps_Lock": 0xFFE5,
    "Shift_Lock": 0xFFE6,
    "Meta_L": 0xFFE7,
    "Meta_R": 0xFFE8,
    "Alt_L": 0xFFE9,
    "Alt_R": 0xFFEA,
    "Super_L": 0xFFEB,
    "Super_R": 0xFFEC,
    "Hyper_L": 0xFFED,
    "Hyper_R": 0xFFEE,
    "ISO_Left_Tab": 0xFE20,
    "Delete": 0xFFFF,
    "XF86MonBrightnessUp": 0x1008FF02,
    "XF86MonBrightnessDown": 0x1008FF03,
    "XF86AudioLowerVolume": 0x1008FF11,
    "XF86AudioMute": 0x1008FF12,
    "XF86AudioRaiseVolume": 0x1008FF13,
    "XF86AudioPlay": 0x1008FF14,
    "XF86AudioStop": 0x1008FF15,
    "XF86AudioPrev": 0x1008FF16,
    "XF86AudioNext": 0x1008FF17,
    "XF86HomePage": 0x1008FF18,
    "XF86Mail": 0x1008FF19,
    "XF86Search": 0x1008FF1B,
    "XF86Calculator": 0x1008FF1D,
    "XF86PowerOff": 0x1008FF2A,
    "XF86Sleep": 0x1008FF2F,
    "XF86AudioPause": 0x1008FF31,
    "XF86Display": 0x1008FF59,
    "XF86Explorer": 0x1008FF5D,
    "XF86TouchpadToggle": 0x1008FFA9,
    "XF86AudioMicMute": 0x1008FFB2,
}


def _build_table() -> dict[str, int]:
    table: dict[str, int] = {}
    for char in string.ascii_letters + string.digits:
        table[char] = ord(char)
    for name, char in _PUNCTUATION.items():
        table[name] = ord(char)
    table.update(_SPECIAL)
    for number in range(1, 36):
        table[f"F{number}"] = 0xFFBE + number - 1
    for digit in range(10):
        table[f"KP_{digit}"] = 0xFFB0 + digit
    return table


_KEYSYMS = _build_table()
_BY_LOWER_NAME: dict[str, list[tuple[str, int]]] = defaultdict(list)
for _name, _sym in _KEYSYMS.items():
    _BY_LOWER_NAME[_ascii_lower(_name)].append((_name, _sym))


def _is_hex(text: str) -> bool:
    return bool(text) and all(char in string.hexdigits for char in text)


def keysym_from_name(name: str) -> int | None:
    """The keysym called ``name``, ignoring case; None if there is none.

    Among names differing only in case the lower-case one wins, so both
    ``"T"`` and ``"t"`` give the keysym of ``t``. Names of the form
    ``U<hex>`` give Unicode keysyms and ``0x<hex>`` give raw keysyms.
    """
    lowered = _ascii_lower(name)
    candidates = _BY_LOWER_NAME.get(lowered)
    if candidates:
        for candidate, sym in candidates:
            if candidate == lowered:
                return sym
        return candidates[0][1]

    if name[:1] in ("U", "u") and _is_hex(name[1:]):
        codepoint = int(name[1:], 16)
        if codepoint < 0x20 or 0x7E < codepoint < 0xA0 or codepoint > 0x10FFFF:
            return None
        if codepoint < 0x100:
            return codepoint
        return codepoint | 0x01000000

    if lowered.startswith("0x") and _is_hex(name[2:]):
        value = int(name[2:], 16)
        return value if value <= 0xFFFFFFFF else None

    return None


@dataclass(frozen=True)
class Key:
    """A key together with the modifiers that must be held."""

    keysym: int
    modifiers: Modifiers = Modifiers(0)

    @staticmethod
    def parse(text: str) -> Key:
        """Parse a combination such as ``"Mod+Shift+H"``."""
        *parts, key = text.split("+")
        modifiers = Modifiers(0)
        for part in parts:
            part = part.strip()
            modifier = _MODIFIER_NAMES.get(_ascii_lower(part))
            if modifier is None:
                raise ValueError(f"invalid modifier: {part}")
            modifiers |= modifier

        keysym = keysym_from_name(key)
        if keysym is None or keysym == 0:
            raise ValueError(f"invalid key: {key}")
        return Key(keysym, modifiers)