"""SSD1306 OLED display output (128x64, I2C address 0x3C).

Uses adafruit-circuitpython-ssd1306 for the transport. Frames are
scaled to the panel and converted to 1-bit before sending.
"""

import logging
from typing import Tuple

from PIL import Image

from core.exceptions import DisplayError
from output.display import Display

logger = logging.getLogger(__name__)


class OLEDDisplay(Display):
    """Drives an SSD1306 OLED via I2C."""

    def __init__(self, size: Tuple[int, int] = (128, 64), addr: int = 0x3C):
        self.size = size
        self.addr = addr
        try:
            # Only available on the Pi
            import board
            import busio
            import adafruit_ssd1306

            i2c = busio.I2C(board.SCL, board.SDA)
            self._display = adafruit_ssd1306.SSD1306_I2C(size[0], size[1], i2c, addr=addr)
        except Exception as exc:
            raise DisplayError(f"OLED init failed on I2C 0x{addr:02X}: {exc}") from exc
        logger.info("OLED ready on I2C 0x%02X", addr)

    def init(self) -> None:
        try:
            self._display.fill(0)
            self._display.show()
        except Exception as exc:
            raise DisplayError(f"OLED init failed: {exc}") from exc
        self.on()

    def send(self, image: Image.Image) -> None:
        frame = image.convert("L").resize(self.size).convert("1")
        try:
            self._display.image(frame)
            self._display.show()
        except Exception as exc:
            raise DisplayError(f"OLED send failed: {exc}") from exc

    def on(self) -> None:
        try:
            self._display.poweron()
        except Exception as exc:
            raise DisplayError(f"OLED power on failed: {exc}") from exc

    def off(self) -> None:
        try:
            self._display.poweroff()
        except Exception as exc:
            raise DisplayError(f"OLED power off failed: {exc}") from exc

    def close(self) -> None:
        self.off()
