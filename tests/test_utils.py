import pytest

from openrgb_sdk import run_with_keyboard_interrupt
from openrgb_sdk.exceptions import OpenRGBConnectionError


def test_library_error_exits_with_status_1(capsys):
    async def main():
        raise OpenRGBConnectionError("Could not connect")

    with pytest.raises(SystemExit) as exc_info:
        run_with_keyboard_interrupt(main)
    assert exc_info.value.code == 1
    assert "Could not connect" in capsys.readouterr().out


def test_keyboard_interrupt_exits_cleanly():
    async def main():
        raise KeyboardInterrupt

    with pytest.raises(SystemExit) as exc_info:
        run_with_keyboard_interrupt(main)
    assert exc_info.value.code == 0
