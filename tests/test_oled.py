from __future__ import annotations

import sys
import types

import pytest
from PIL import Image

from core.exceptions import DisplayError


class FakeSSD1306:
    def __init__(self, width, height, i2c, addr=0x3C) -> None:
        self.size = (width, height)
        self.addr = addr
        self.calls = []
        self.fail = False

    def _record(self, *call) -> None:
        if self.fail:
            raise OSError("I2C write failed")
        self.calls.append(call)

    def fill(self, color) -> None:
        self._record("fill", color)

    def show(self) -> None:
        self._record("show")

    def image(self, img) -> None:
        self._record("image", img.mode, img.size)

    def poweron(self) -> None:
        self._record("poweron")

    def poweroff(self) -> None:
        self._record("poweroff")


@pytest.fixture
def fake_oled_modules(monkeypatch):
    board = types.ModuleType("board")
    board.SCL, board.SDA = 3, 2
    busio = types.ModuleType("busio")
    busio.I2C = lambda scl, sda: ("i2c", scl, sda)
    ssd1306 = types.ModuleType("adafruit_ssd1306")
    ssd1306.SSD1306_I2C = FakeSSD1306
    monkeypatch.setitem(sys.modules, "board", board)
    monkeypatch.setitem(sys.modules, "busio", busio)
    monkeypatch.setitem(sys.modules, "adafruit_ssd1306", ssd1306)


def test_oled_send_converts_to_one_bit(fake_oled_modules) -> None:
    from output.oled import OLEDDisplay

    display = OLEDDisplay()
    display.init()
    display.send(Image.new("RGB", (960, 376), "white"))
    display.off()

    assert display._display.calls == [
        ("fill", 0),
        ("show",),
        ("poweron",),
        ("image", "1", (128, 64)),
        ("show",),
        ("poweroff",),
    ]


def test_oled_transport_failure_is_display_error(fake_oled_modules) -> None:
    from output.oled import OLEDDisplay

    display = OLEDDisplay()
    display._display.fail = True
    with pytest.raises(DisplayError):
        display.send(Image.new("RGB", (128, 64)))
    with pytest.raises(DisplayError):
        display.on()


def test_oled_init_failure_is_display_error(monkeypatch) -> None:
    from output.oled import OLEDDisplay

    monkeypatch.setitem(sys.modules, "board", None)
    with pytest.raises(DisplayError):
        OLEDDisplay()
