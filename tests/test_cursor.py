import os
import struct

import pytest

from tilecomp.cursor import (
    CursorImage,
    CursorManager,
    CursorTheme,
    XCursor,
    XCursorParseError,
    fallback_cursor,
    parse_xcursor,
    select_images,
)

IMAGE_TYPE = 0xFFFD0002
COMMENT_TYPE = 0xFFFE0001


def image_chunk(size, width, height, xhot=0, yhot=0, delay=0, fill=b"\x01\x02\x03\x04"):
    header = struct.pack(
        "<9I", 36, IMAGE_TYPE, size, 1, width, height, xhot, yhot, delay
    )
    return header + fill * (width * height)


def xcursor_bytes(specs, extra_toc=()):
    entries = list(extra_toc) + [None] * len(specs)
    ntoc = len(entries)
    offset = 16 + 12 * ntoc
    toc = b"".join(struct.pack("<III", *entry) for entry in extra_toc)
    chunks = b""
    for spec in specs:
        chunk = image_chunk(**spec)
        toc += struct.pack("<III", IMAGE_TYPE, spec["size"], offset + len(chunks))
        chunks += chunk
    return b"Xcur" + struct.pack("<III", 16, 0x10000, ntoc) + toc + chunks


def make_image(size=24, width=2, height=2, delay=0):
    return CursorImage(size, width, height, 0, 0, delay, bytes(width * height * 4), b"")


def write_cursor(root, theme, name, specs):
    directory = root / theme / "cursors"
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_bytes(xcursor_bytes(specs))


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("XCURSOR_THEME", raising=False)
    monkeypatch.delenv("XCURSOR_SIZE", raising=False)


def test_parse_single_image_fields():
    data = xcursor_bytes([dict(size=24, width=3, height=2, xhot=1, yhot=2, delay=50)])
    (image,) = parse_xcursor(data)
    assert (image.size, image.width, image.height) == (24, 3, 2)
    assert (image.xhot, image.yhot, image.delay) == (1, 2, 50)
    assert image.pixels_rgba == b"\x01\x02\x03\x04" * 6


def test_parse_rotates_argb_pixels():
    data = xcursor_bytes([dict(size=24, width=2, height=2)])
    (image,) = parse_xcursor(data)
    assert image.pixels_argb == b"\x04\x01\x02\x03" * 4


def test_parse_skips_non_image_entries():
    data = xcursor_bytes(
        [dict(size=24, width=1, height=1), dict(size=32, width=1, height=1)],
        extra_toc=[(COMMENT_TYPE, 1, 0)],
    )
    images = parse_xcursor(data)
    assert [image.size for image in images] == [24, 32]


def test_parse_rejects_bad_magic():
    data = xcursor_bytes([dict(size=24, width=1, height=1)])
    with pytest.raises(XCursorParseError):
        parse_xcursor(b"Xbad" + data[4:])


def test_parse_rejects_truncated_pixels():
    data = xcursor_bytes([dict(size=24, width=4, height=4)])
    with pytest.raises(XCursorParseError):
        parse_xcursor(data[:-5])


def test_parse_rejects_truncated_header():
    with pytest.raises(XCursorParseError):
        parse_xcursor(b"Xcur\x10\x00")


def test_parse_rejects_hotspot_outside_image():
    data = xcursor_bytes([dict(size=24, width=2, height=2, xhot=5)])
    with pytest.raises(XCursorParseError):
        parse_xcursor(data)


def test_select_images_picks_closest_size_and_keeps_all_frames():
    small = [make_image(24, 24, 24, 10), make_image(24, 24, 24, 20)]
    large = [make_image(48, 48, 48, 10)]
    images = small + large
    assert select_images(images, 30) == small
    assert select_images(images, 40) == large


def test_select_images_empty_raises():
    with pytest.raises(ValueError):
        select_images([], 24)


def test_frame_wraps_around():
    images = [make_image(delay=10), make_image(delay=20), make_image(delay=30)]
    cursor = XCursor(images)
    assert cursor.animation_duration == sum(image.delay for image in images)
    for millis in (0, 5, 15, 35, 59):
        assert cursor.frame(millis) == cursor.frame(millis + cursor.animation_duration)


def test_frame_selects_by_delay():
    images = [make_image(delay=10), make_image(delay=20), make_image(delay=30)]
    cursor = XCursor(images)
    assert cursor.frame(0) == (0, images[0])
    assert cursor.frame(images[0].delay) == (1, images[1])
    last_start = images[0].delay + images[1].delay
    assert cursor.frame(last_start) == (2, images[2])


def test_frame_without_animation_is_first_image():
    images = [make_image(delay=0), make_image(delay=0)]
    cursor = XCursor(images)
    assert cursor.frame(1234) == (0, images[0])


def test_is_animated_cursor():
    assert XCursor([make_image(), make_image()]).is_animated_cursor()
    assert not XCursor([make_image()]).is_animated_cursor()


def test_hotspot_comes_from_image():
    data = xcursor_bytes([dict(size=24, width=4, height=4, xhot=3, yhot=2)])
    (image,) = parse_xcursor(data)
    assert XCursor.hotspot(image) == (3, 2)


def test_fallback_cursor_shape():
    cursor = fallback_cursor()
    assert not cursor.is_animated_cursor()
    (image,) = cursor.frames
    assert (image.width, image.height) == (64, 64)
    assert len(image.pixels_rgba) == image.width * image.height * 4
    assert cursor.animation_duration == 0


def test_theme_finds_icon(tmp_path):
    write_cursor(tmp_path, "mytheme", "default", [dict(size=24, width=1, height=1)])
    theme = CursorTheme("mytheme", [tmp_path])
    assert theme.load_icon("default") == tmp_path / "mytheme" / "cursors" / "default"
    assert theme.load_icon("missing") is None


def test_theme_follows_inherits(tmp_path):
    (tmp_path / "child").mkdir()
    (tmp_path / "child" / "index.theme").write_text(
        "[Icon Theme]\nName=child\nInherits=parent\n"
    )
    write_cursor(tmp_path, "parent", "text", [dict(size=24, width=1, height=1)])
    theme = CursorTheme("child", [tmp_path])
    assert theme.load_icon("text") == tmp_path / "parent" / "cursors" / "text"


def test_theme_inherit_cycle_terminates(tmp_path):
    for name, parent in (("a", "b"), ("b", "a")):
        (tmp_path / name).mkdir()
        (tmp_path / name / "index.theme").write_text(f"[Icon Theme]\nInherits={parent}\n")
    assert CursorTheme("a", [tmp_path]).load_icon("default") is None


def test_manager_sets_environment(tmp_path, clean_env):
    manager = CursorManager("mytheme", 32, [tmp_path])
    assert os.environ["XCURSOR_THEME"] == "mytheme"
    assert os.environ["XCURSOR_SIZE"] == "32"
    assert manager.get_default_cursor(1).frames == fallback_cursor().frames
    manager.reload("other", 16)
    assert os.environ["XCURSOR_THEME"] == "other"
    assert os.environ["XCURSOR_SIZE"] == "16"


def test_manager_loads_and_caches(tmp_path, clean_env):
    write_cursor(tmp_path, "t", "pointer", [dict(size=24, width=2, height=2)])
    manager = CursorManager("t", 24, [tmp_path])
    cursor = manager.get_cursor_with_name("pointer", 1)
    assert cursor.frames[0].width == 2
    assert manager.get_cursor_with_name("pointer", 1) is cursor


def test_manager_scale_selects_larger_images(tmp_path, clean_env):
    write_cursor(
        tmp_path,
        "t",
        "pointer",
        [dict(size=24, width=2, height=2), dict(size=48, width=4, height=4)],
    )
    manager = CursorManager("t", 24, [tmp_path])
    assert manager.get_cursor_with_name("pointer", 1).frames[0].size == 24
    assert manager.get_cursor_with_name("pointer", 2).frames[0].size == 48


def test_manager_missing_cursor_is_none(tmp_path, clean_env):
    manager = CursorManager("t", 24, [tmp_path])
    assert manager.get_cursor_with_name("pointer", 1) is None


def test_manager_default_falls_back(tmp_path, clean_env):
    manager = CursorManager("t", 24, [tmp_path])
    cursor = manager.get_default_cursor(1)
    assert cursor.frames == fallback_cursor().frames


def test_manager_uses_alt_names(tmp_path, clean_env):
    write_cursor(tmp_path, "t", "left_ptr", [dict(size=24, width=3, height=3)])
    manager = CursorManager("t", 24, [tmp_path])
    assert manager.get_default_cursor(1).frames[0].width == 3
    write_cursor(tmp_path, "t", "hand2", [dict(size=24, width=5, height=5)])
    cursor = manager.get_cursor_with_name("pointer", 1, ["hand1", "hand2"])
    assert cursor.frames[0].width == 5


def test_manager_reload_clears_cache(tmp_path, clean_env):
    write_cursor(tmp_path, "t", "pointer", [dict(size=24, width=2, height=2)])
    manager = CursorManager("t", 24, [tmp_path])
    first = manager.get_cursor_with_name("pointer", 1)
    manager.reload("t", 24)
    assert manager.get_cursor_with_name("pointer", 1) is not first
    assert manager.get_cursor_with_name("pointer", 1).frames == first.frames


def test_manager_animation_state(tmp_path, clean_env):
    write_cursor(
        tmp_path,
        "t",
        "wait",
        [
            dict(size=24, width=2, height=2, delay=40),
            dict(size=24, width=2, height=2, delay=40),
        ],
    )
    manager = CursorManager("t", 24, [tmp_path])
    manager.set_cursor_image("wait")
    assert manager.is_current_cursor_animated(1) is True
    manager.set_cursor_image(None)
    assert manager.is_current_cursor_animated(1) is False
    manager.set_cursor_image(object())
    assert manager.is_current_cursor_animated(1) is False
    manager.set_cursor_image("missing")
    assert manager.is_current_cursor_animated(1) is False