"""Page cycling control loop.

Shows every page for its configured duration, re-rendering it once per
refresh interval so live values keep updating. The page list is rebuilt
from the latest sensor snapshot each time the cycle wraps around; an
empty rebuild keeps the previous pages.

The display schedule is checked on every tick. While the display is
scheduled off no frames are rendered and the loop only wakes up every
INACTIVE_SLEEP seconds. The page timer keeps running meanwhile, so pages
are skipped through while the display is dark.

Render failures skip a frame. Display failures end the loop.
"""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from core.exceptions import NoPagesError
from core.pages import Page, SensorPage, TimePage, build_pages
from core.schedule import is_display_active
from core.sensor_store import SensorStore
from core.templates import CompiledTemplate

logger = logging.getLogger(__name__)

DEFAULT_SENSOR_PAGE_TIME = 10.0
# Schedule re-check interval while the display is off
INACTIVE_SLEEP = 30.0


class PageCycleLoop:
    """Cycles the display through the pages built from the sensor store."""

    def __init__(
        self,
        store: SensorStore,
        templates: Sequence[CompiledTemplate],
        renderer,
        display,
        refresh: float,
        sensor_page_time: float = DEFAULT_SENSOR_PAGE_TIME,
        time_page_time: Optional[float] = None,
        time_page: Optional[str] = None,
        time_page_font_size: Optional[int] = None,
        sensor_page_label: Optional[str] = None,
        on_hour: Optional[int] = None,
        off_hour: Optional[int] = None,
        inactive_sleep: float = INACTIVE_SLEEP,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.templates = list(templates)
        self.renderer = renderer
        self.display = display
        self.refresh = refresh
        self.sensor_page_time = sensor_page_time
        self.time_page_time = time_page_time if time_page_time is not None else sensor_page_time
        self.time_page = time_page
        self.time_page_font_size = time_page_font_size
        self.sensor_page_label = sensor_page_label
        self.on_hour = on_hour
        self.off_hour = off_hour
        self.inactive_sleep = inactive_sleep
        self._clock = clock
        self._sleep = sleep
        self._now = now

        self.pages: List[Page] = []
        self.page_index = 0
        # The caller initialises the hardware before entering the loop
        self.display_on = True

    # ------------------------------------------------------------------
    # Page set
    # ------------------------------------------------------------------

    def build(self) -> List[Page]:
        return build_pages(self.templates, self.store.snapshot(), self.time_page)

    def build_initial(self) -> List[Page]:
        """Build the first page set. No pages at startup is fatal."""
        pages = self.build()
        if not pages:
            raise NoPagesError("No pages to display")
        self.pages = pages
        logger.info(
            "Sensor page mode: %d pages, cycling every %.1fs", len(pages), self.sensor_page_time
        )
        return pages

    def rebuild(self) -> List[Page]:
        """Rebuild the page set, keeping the old one if nothing matched."""
        pages = self.build()
        if pages:
            if len(pages) != len(self.pages):
                logger.info("Page set changed: %d -> %d pages", len(self.pages), len(pages))
            self.pages = pages
        else:
            logger.warning("Page rebuild produced no pages, keeping %d previous pages", len(self.pages))
        return self.pages

    def page_duration(self, page: Page) -> float:
        if isinstance(page, TimePage):
            return self.time_page_time
        return self.sensor_page_time

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    def _log_page(self, page: Page):
        if isinstance(page, SensorPage):
            logger.info(
                "Page %d/%d: sensor '%s' = %s",
                self.page_index + 1,
                len(self.pages),
                page.sensor_key,
                self.store.get(page.sensor_key),
            )
        else:
            logger.info("Page %d/%d: time (%s)", self.page_index + 1, len(self.pages), page.label)

    def render(self, page: Page):
        """Render one frame. Returns None if rendering failed."""
        if isinstance(page, SensorPage):
            snapshot = self.store.snapshot()
            try:
                return self.renderer.render_sensor_page(
                    page.template, page.sensor_key, page.display_name, snapshot, self.sensor_page_label
                )
            except Exception as exc:
                logger.error("Error rendering sensor page '%s': %s", page.sensor_key, exc)
                return None

        try:
            return self.renderer.render_time_page(page.label, self.time_page_font_size)
        except Exception as exc:
            logger.error("Error rendering time page '%s': %s", page.label, exc)
            return None

    def tick(self, page: Page):
        """One refresh of the current page, honoring the display schedule."""
        tick_start = self._clock()

        if not is_display_active(self._now(), self.on_hour, self.off_hour):
            if self.display_on:
                logger.info("Display schedule: switching display off")
                self.display.off()
                self.display_on = False
            self._sleep(self.inactive_sleep)
            return

        if not self.display_on:
            logger.info("Display schedule: switching display on")
            self.display.on()
            self.display_on = True

        image = self.render(page)
        if image is not None:
            self.display.send(image)

        elapsed = self._clock() - tick_start
        if self.refresh > elapsed:
            self._sleep(self.refresh - elapsed)

    def show_page(self, page: Page):
        """Keep refreshing `page` until its duration has elapsed."""
        self._log_page(page)
        duration = self.page_duration(page)
        page_start = self._clock()
        while True:
            self.tick(page)
            if self._clock() - page_start >= duration:
                break

    def step(self):
        """Show the current page and advance to the next one."""
        if not self.pages:
            self.build_initial()
        elif self.page_index == 0:
            self.rebuild()
        self.show_page(self.pages[self.page_index])
        self.page_index = (self.page_index + 1) % len(self.pages)

    def run(self):
        """Cycle pages forever. Only display errors (or a poisoned store) end it."""
        while True:
            self.step()
