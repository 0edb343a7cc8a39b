"""Pillow page renderer.

Draws one sensor page or the time page into an RGB image the size of the
display. Layout is deliberately simple: the page title on top, the value
large in the middle, an optional label at the bottom. Template metadata
can override colors, unit, value format, font and background image.

Recognised template metadata:
    unit        appended to the value ("°C")
    format      str.format spec applied to numeric values ("{:.0f}")
    color       value color, "#rrggbb" or a Pillow color name
    title_color title color
    bg          background color
    background  background image, relative to the config directory
    font        TrueType font file, relative to the font directory
    font_size   value font size in pixels
"""

import logging
import os
from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from core.exceptions import RenderError
from sources.date_time import date_time_value

logger = logging.getLogger(__name__)

DEFAULT_FONT = "DejaVuSans.ttf"
SYSTEM_FONT_DIRS = (
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/dejavu",
)

DEFAULT_THEME = {
    "bg": "#000000",
    "title_color": "#b0b0b0",
    "color": "#ffffff",
    "label_color": "#808080",
}


class PanelRenderer:
    """Renders pages for a display of the given size."""

    def __init__(
        self,
        size: Tuple[int, int],
        font_dir: str = "fonts",
        config_dir: str = "cfg",
        now: Callable[[], datetime] = datetime.now,
    ):
        self.size = size
        self.font_dir = font_dir
        self.config_dir = config_dir
        self._now = now
        self._fonts: Dict[Tuple[str, int], ImageFont.ImageFont] = {}
        self._backgrounds: Dict[str, Image.Image] = {}

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def font(self, size: int, name: Optional[str] = None):
        """Load a TrueType font, cached. Falls back to Pillow's default font."""
        name = name or DEFAULT_FONT
        cache_key = (name, size)
        if cache_key in self._fonts:
            return self._fonts[cache_key]

        font = None
        for directory in (self.font_dir,) + SYSTEM_FONT_DIRS:
            try:
                font = ImageFont.truetype(os.path.join(directory, name), size)
                break
            except (IOError, OSError):
                continue
        if font is None:
            logger.warning("Font %s not found, using default font", name)
            font = ImageFont.load_default()

        self._fonts[cache_key] = font
        return font

    def background(self, metadata: Mapping) -> Image.Image:
        bg_file = metadata.get("background")
        if not bg_file:
            return Image.new("RGB", self.size, metadata.get("bg", DEFAULT_THEME["bg"]))

        if bg_file not in self._backgrounds:
            path = bg_file if os.path.isabs(bg_file) else os.path.join(self.config_dir, bg_file)
            try:
                with Image.open(path) as img:
                    self._backgrounds[bg_file] = img.convert("RGB").resize(self.size)
            except (IOError, OSError) as exc:
                raise RenderError(f"Cannot load background image {path}: {exc}") from exc
        return self._backgrounds[bg_file].copy()

    # ------------------------------------------------------------------
    # Drawing helpers
    # ------------------------------------------------------------------

    def _draw_centered(self, draw, text: str, y: int, font, fill):
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        x = (self.size[0] - (right - left)) // 2
        draw.text((x, y), text, font=font, fill=fill)
        return bottom - top

    @staticmethod
    def format_value(value: str, metadata: Mapping) -> str:
        fmt = metadata.get("format")
        if fmt:
            try:
                value = fmt.format(float(value))
            except (TypeError, ValueError):
                pass
        unit = metadata.get("unit")
        return f"{value} {unit}" if unit else value

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def render_sensor_page(
        self, template, key: str, display_name: str, snapshot: Mapping[str, str], label: Optional[str] = None
    ) -> Image.Image:
        """Render a sensor page. Raises RenderError if the value is unavailable."""
        value = snapshot.get(key)
        if value is None:
            value = date_time_value(key, self._now())
        if value is None:
            raise RenderError(f"No value for sensor '{key}'")

        metadata = template.metadata
        height = self.size[1]
        img = self.background(metadata)
        draw = ImageDraw.Draw(img)

        title_font = self.font(max(height // 8, 8), metadata.get("font"))
        value_font = self.font(int(metadata.get("font_size", height // 3)), metadata.get("font"))
        label_font = self.font(max(height // 10, 8), metadata.get("font"))

        self._draw_centered(
            draw, display_name, height // 16, title_font, metadata.get("title_color", DEFAULT_THEME["title_color"])
        )

        text = self.format_value(value, metadata)
        left, top, right, bottom = draw.textbbox((0, 0), text, font=value_font)
        self._draw_centered(
            draw, text, (height - (bottom - top)) // 2, value_font, metadata.get("color", DEFAULT_THEME["color"])
        )

        if label:
            self._draw_centered(draw, label, height - height // 6, label_font, DEFAULT_THEME["label_color"])

        return img

    def render_time_page(self, label: str, font_size: Optional[int] = None) -> Image.Image:
        """Render the clock page: time large, date and label below."""
        now = self._now()
        height = self.size[1]
        img = Image.new("RGB", self.size, DEFAULT_THEME["bg"])
        draw = ImageDraw.Draw(img)

        time_font = self.font(font_size or height // 2)
        small_font = self.font(max(height // 10, 8))

        time_text = now.strftime("%H:%M")
        left, top, right, bottom = draw.textbbox((0, 0), time_text, font=time_font)
        y = (height - (bottom - top)) // 2 - height // 10
        self._draw_centered(draw, time_text, y, time_font, DEFAULT_THEME["color"])
        self._draw_centered(
            draw, now.strftime("%A, %B %d"), y + (bottom - top) + height // 16, small_font, DEFAULT_THEME["title_color"]
        )
        if label:
            self._draw_centered(draw, label, height // 16, small_font, DEFAULT_THEME["label_color"])

        return img
