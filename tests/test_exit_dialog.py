import pytest

from tilecomp.exit_dialog import ExitConfirmDialog


def test_initially_closed():
    dialog = ExitConfirmDialog()
    assert dialog.is_open is False
    assert dialog.position(1920, 1080, 400, 200) is None


def test_show_reports_change_only_once():
    dialog = ExitConfirmDialog()
    assert dialog.show() is True
    assert dialog.is_open is True
    assert dialog.show() is False
    assert dialog.is_open is True


def test_hide_reports_change_only_once():
    dialog = ExitConfirmDialog()
    assert dialog.hide() is False
    dialog.show()
    assert dialog.hide() is True
    assert dialog.is_open is False
    assert dialog.hide() is False


@pytest.mark.parametrize(
    "output, buffer",
    [((1920, 1080), (400, 200)), ((1280, 800), (640, 100)), ((100, 100), (100, 100))],
)
def test_position_is_centered(output, buffer):
    dialog = ExitConfirmDialog()
    dialog.show()
    x, y = dialog.position(*output, *buffer)
    assert x * 2 + buffer[0] == output[0]
    assert y * 2 + buffer[1] == output[1]


def test_position_clamped_when_buffer_larger_than_output():
    dialog = ExitConfirmDialog()
    dialog.show()
    assert dialog.position(300, 200, 800, 600) == (0, 0)


def test_position_none_after_hide():
    dialog = ExitConfirmDialog()
    dialog.show()
    dialog.hide()
    assert dialog.position(1920, 1080, 400, 200) is None