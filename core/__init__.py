"""Core engine for the sensor panel.

Architecture:
    SensorSource    -- reads raw sensor values (/proc, /sys, text files)
    SensorPoller    -- refreshes a source in a background thread
    SensorStore     -- thread-shared key -> value map, one writer, many readers
    compile_templates / build_pages -- turn sensor keys into an ordered page list
    is_display_active -- time-of-day on/off schedule
    PageCycleLoop   -- renders and sends pages to the display
"""

from core.exceptions import (
    ConfigError,
    DisplayError,
    NoPagesError,
    PanelError,
    RenderError,
    StorePoisonedError,
)
from core.sensor_store import SensorStore, compile_filters, is_filtered
from core.sensor_source import SensorSource
from core.sensor_poller import SensorPoller, start_sensor_poller
from core.templates import CompiledTemplate, SensorTemplate, compile_templates, templates_from_panels
from core.pages import Page, SensorPage, TimePage, build_pages, resolve_display_name
from core.schedule import is_display_active
from core.cycle_loop import PageCycleLoop
from core.registry import SOURCE_REGISTRY, create_source, register_source

__all__ = [
    "ConfigError",
    "DisplayError",
    "NoPagesError",
    "PanelError",
    "RenderError",
    "StorePoisonedError",
    "SensorStore",
    "compile_filters",
    "is_filtered",
    "SensorSource",
    "SensorPoller",
    "start_sensor_poller",
    "CompiledTemplate",
    "SensorTemplate",
    "compile_templates",
    "templates_from_panels",
    "Page",
    "SensorPage",
    "TimePage",
    "build_pages",
    "resolve_display_name",
    "is_display_active",
    "PageCycleLoop",
    "SOURCE_REGISTRY",
    "create_source",
    "register_source",
]
