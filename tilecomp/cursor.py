"""Xcursor themes: file parsing, theme lookup and a cache of named cursors."""

from __future__ import annotations

import functools
import logging
import os
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Sequence

_log = logging.getLogger(__name__)

_MAGIC = b"Xcur"
_IMAGE_TYPE = 0xFFFD0002
_IMAGE_HEADER = struct.Struct("<9I")
_TOC_ENTRY = struct.Struct("<III")
_FILE_HEADER = struct.Struct("<III")
_MAX_DIMENSION = 0x7FFF

DEFAULT_CURSOR = "default"

# Alternative names to account for themes that do not follow the spec.
_ALT_NAMES: dict[str, tuple[str, ...]] = {
    DEFAULT_CURSOR: ("left_ptr", "arrow", "top_left_arrow", "left_arrow"),
}

_FALLBACK_SIZE = 32
_FALLBACK_DIMENSION = 64


class XCursorParseError(ValueError):
    """Raised when data is not a valid Xcursor file."""


@dataclass(frozen=True)
class CursorImage:
    """One image of an Xcursor file.

    ``pixels_rgba`` holds the pixels as stored in the file (little-endian
    ARGB words); ``pixels_argb`` holds them with the bytes of each pixel
    rotated so that the last byte comes first.
    """

    size: int
    width: int
    height: int
    xhot: int
    yhot: int
    delay: int
    pixels_rgba: bytes = field(repr=False)
    pixels_argb: bytes = field(repr=False)


def _rotate_pixels(pixels: bytes) -> bytes:
    out = bytearray(len(pixels))
    out[0::4] = pixels[3::4]
    out[1::4] = pixels[0::4]
    out[2::4] = pixels[1::4]
    out[3::4] = pixels[2::4]
    return bytes(out)


def _parse_image(data: bytes, position: int) -> CursorImage:
    try:
        (
            _header_size,
            chunk_type,
            nominal_size,
            _version,
            width,
            height,
            xhot,
            yhot,
            delay,
        ) = _IMAGE_HEADER.unpack_from(data, position)
    except struct.error as err:
        raise XCursorParseError("truncated image header") from err

    if chunk_type != _IMAGE_TYPE:
        raise XCursorParseError("table of contents points at a non-image chunk")
    if width > _MAX_DIMENSION or height > _MAX_DIMENSION:
        raise XCursorParseError("image is too large")
    if xhot > width or yhot > height:
        raise XCursorParseError("hotspot lies outside the image")

    start = position + _IMAGE_HEADER.size
    length = width * height * 4
    pixels = data[start : start + length]
    if len(pixels) != length:
        raise XCursorParseError("truncated image pixels")

    return CursorImage(
        size=nominal_size,
        width=width,
        height=height,
        xhot=xhot,
        yhot=yhot,
        delay=delay,
        pixels_rgba=pixels,
        pixels_argb=_rotate_pixels(pixels),
    )


def parse_xcursor(data: bytes) -> list[CursorImage]:
    """Parse the images out of the contents of an Xcursor file."""
    data = bytes(data)
    if data[:4] != _MAGIC:
        raise XCursorParseError("missing Xcursor magic")
    try:
        header_size, _version, ntoc = _FILE_HEADER.unpack_from(data, 4)
    except struct.error as err:
        raise XCursorParseError("truncated file header") from err
    if header_size < len(_MAGIC) + _FILE_HEADER.size:
        raise XCursorParseError("invalid header size")

    images = []
    for entry in range(ntoc):
        try:
            chunk_type, _subtype, position = _TOC_ENTRY.unpack_from(
                data, header_size + entry * _TOC_ENTRY.size
            )
        except struct.error as err:
            raise XCursorParseError("truncated table of contents") from err
        if chunk_type == _IMAGE_TYPE:
            images.append(_parse_image(data, position))
    return images


def select_images(images: Sequence[CursorImage], size: int) -> list[CursorImage]:
    """Pick the frames whose nominal size is closest to ``size``."""
    if not images:
        raise ValueError("cursor file holds no images")
    best = min(images, key=lambda image: abs(size - image.size))
    return [
        image
        for image in images
        if image.width == best.width and image.height == best.height
    ]


class XCursor:
    """A possibly animated cursor made of one or more frames."""

    def __init__(self, images: Iterable[CursorImage]) -> None:
        self.images = list(images)
        if not self.images:
            raise ValueError("a cursor needs at least one image")
        self.animation_duration = sum(image.delay for image in self.images)

    def __repr__(self) -> str:
        return (
            f"XCursor(frames={len(self.images)}, "
            f"animation_duration={self.animation_duration})"
        )

    @property
    def frames(self) -> list[CursorImage]:
        """All frames of the cursor."""
        return self.images

    def frame(self, millis: int) -> tuple[int, CursorImage]:
        """The frame index and image to show at ``millis``; time wraps around."""
        if self.animation_duration == 0:
            return 0, self.images[0]

        millis %= self.animation_duration
        for index, image in enumerate(self.images):
            if millis < image.delay:
                return index, image
            millis -= image.delay
        return 0, self.images[0]

    def is_animated_cursor(self) -> bool:
        """Whether the cursor has more than one frame."""
        return len(self.images) > 1

    @staticmethod
    def hotspot(image: CursorImage) -> tuple[int, int]:
        """The hotspot of ``image`` in physical pixels."""
        return image.xhot, image.yhot


@functools.lru_cache(maxsize=None)
def _fallback_pixels() -> bytes:
    """A plain left-pointing arrow, stored as little-endian ARGB words."""
    dim = _FALLBACK_DIMENSION
    black = bytes((0, 0, 0, 255))
    white = bytes((255, 255, 255, 255))
    clear = bytes(4)
    out = bytearray()
    for y in range(dim):
        right_edge = 1 + (y - 1) * 2 // 3
        for x in range(dim):
            inside = 1 <= y <= 24 and 1 <= x <= right_edge
            if not inside:
                out += clear
            elif x in (1, right_edge) or y == 24:
                out += white
            else:
                out += black
    return bytes(out)


def fallback_cursor() -> XCursor:
    """A built-in default cursor used when no theme provides one."""
    pixels = _fallback_pixels()
    image = CursorImage(
        size=_FALLBACK_SIZE,
        width=_FALLBACK_DIMENSION,
        height=_FALLBACK_DIMENSION,
        xhot=1,
        yhot=1,
        delay=0,
        pixels_rgba=pixels,
        pixels_argb=b"",
    )
    return XCursor([image])


def _default_search_paths() -> list[Path]:
    env = os.environ.get("XCURSOR_PATH")
    if env:
        return [Path(part).expanduser() for part in env.split(":") if part]

    home = Path.home()
    data_home = Path(os.environ.get("XDG_DATA_HOME") or home / ".local" / "share")
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    paths = [data_home / "icons", home / ".icons"]
    paths += [Path(part) / "icons" for part in data_dirs.split(":") if part]
    paths += [
        Path("/usr/share/pixmaps"),
        home / ".cursors",
        Path("/usr/share/cursors/xorg-x11"),
        Path("/usr/X11R6/lib/X11/icons"),
    ]
    return paths


class CursorTheme:
    """Lookup of cursor files in an Xcursor theme and the themes it inherits."""

    def __init__(
        self, name: str, search_paths: Iterable[os.PathLike[str] | str] | None = None
    ) -> None:
        self.name = name
        if search_paths is None:
            self.search_paths = _default_search_paths()
        else:
            self.search_paths = [Path(path) for path in search_paths]

    def __repr__(self) -> str:
        return f"CursorTheme(name={self.name!r})"

    def load_icon(self, name: str) -> Path | None:
        """Path of the cursor file called ``name``, or None if there is none."""
        return self._find(self.name, name, set())

    def _find(self, theme: str, icon: str, visited: set[str]) -> Path | None:
        if theme in visited:
            return None
        visited.add(theme)

        for base in self.search_paths:
            candidate = base / theme / "cursors" / icon
            if candidate.is_file():
                return candidate

        for parent in self._inherits(theme):
            found = self._find(parent, icon, visited)
            if found is not None:
                return found
        return None

    def _inherits(self, theme: str) -> list[str]:
        for base in self.search_paths:
            index = base / theme / "index.theme"
            if not index.is_file():
                continue
            try:
                text = index.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            for line in text.splitlines():
                key, sep, value = line.partition("=")
                if sep and key.strip() == "Inherits":
                    names = value.replace(";", ",").split(",")
                    return [name.strip() for name in names if name.strip()]
            return []
        return []


class CursorManager:
    """The current cursor image and a cache of loaded named cursors.

    ``cursor_image`` is a cursor name for a named cursor, None when the
    cursor is hidden, and any other object for a client-provided surface.
    """

    def __init__(
        self,
        theme: str,
        size: int,
        search_paths: Iterable[os.PathLike[str] | str] | None = None,
    ) -> None:
        self._search_paths = None if search_paths is None else list(search_paths)
        self._ensure_env(theme, size)
        self.theme = CursorTheme(theme, self._search_paths)
        self.size = size
        self.cursor_image: Any = DEFAULT_CURSOR
        self._cache: dict[tuple[str, int], XCursor | None] = {}

    def reload(self, theme: str, size: int) -> None:
        """Switch to another theme or size, dropping all cached cursors."""
        self._ensure_env(theme, size)
        self.theme = CursorTheme(theme, self._search_paths)
        self.size = size
        self._cache.clear()

    def get_cursor_with_name(
        self, name: str, scale: int, alt_names: Iterable[str] | None = None
    ) -> XCursor | None:
        """The named cursor at the given scale, loaded once and then cached."""
        key = (name, scale)
        if key in self._cache:
            return self._cache[key]

        if alt_names is None:
            alt_names = _ALT_NAMES.get(name, ())
        size = self.size * scale

        cursor: XCursor | None = None
        error: Exception | None = None
        for candidate in (name, *alt_names):
            try:
                cursor = self._load_xcursor(candidate, size)
                break
            except (OSError, ValueError) as err:
                error = err

        if cursor is None:
            _log.warning("error loading xcursor %s@%d: %s", name, size, error)
            # The default cursor must always have a fallback.
            if name == DEFAULT_CURSOR:
                cursor = fallback_cursor()

        self._cache[key] = cursor
        return cursor

    def get_default_cursor(self, scale: int) -> XCursor:
        """The default cursor, which always exists thanks to the fallback."""
        cursor = self.get_cursor_with_name(DEFAULT_CURSOR, scale)
        assert cursor is not None
        return cursor

    def is_current_cursor_animated(self, scale: int) -> bool:
        """Whether the current cursor is a named cursor with several frames."""
        if not isinstance(self.cursor_image, str):
            return False
        cursor = self.get_cursor_with_name(self.cursor_image, scale)
        if cursor is None:
            cursor = self.get_default_cursor(scale)
        return cursor.is_animated_cursor()

    def set_cursor_image(self, cursor: Any) -> None:
        """Set the cursor image: a name, None for hidden, or a surface."""
        self.cursor_image = cursor

    def _load_xcursor(self, name: str, size: int) -> XCursor:
        path = self.theme.load_icon(name)
        if path is None:
            raise FileNotFoundError(f"no cursor icon named {name!r}")
        data = path.read_bytes()
        images = parse_xcursor(data)
        return XCursor(select_images(images, size))

    @staticmethod
    def _ensure_env(theme: str, size: int) -> None:
        os.environ["XCURSOR_THEME"] = theme
        os.environ["XCURSOR_SIZE"] = str(size)