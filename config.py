"""Sensor Panel - Configuration

Defaults plus the YAML configuration loader. The YAML file describes the
panels (ordered lists of sensor templates), which panels are active, and
the page cycling setup:

    setup:
      refresh: 1.0
      sensor_page_time: 10.0
      time_page: "Clock"
      display_on_hour: 7
      display_off_hour: 23
    active_panels: [1]
    panels:
      - name: "CPU"
        sensors:
          - pattern: '^cpu_(\\d+)_usage$'
            name: "Core {1}"
            unit: "%"
    sensor_filter: ['^net_docker']
"""

import logging
import os
from dataclasses import dataclass, field
from re import Pattern
from typing import Any, Dict, List, Optional

import yaml

from core.cycle_loop import DEFAULT_SENSOR_PAGE_TIME, INACTIVE_SLEEP
from core.exceptions import ConfigError
from core.sensor_store import compile_filters
from core.templates import SensorTemplate, templates_from_panels
from sources.file_source import read_filter_file, read_key_value_file

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_CONFIG_DIR = "cfg"
DEFAULT_FONT_DIR = "fonts"
DEFAULT_SENSOR_PATH = "cfg/sensors"
DEFAULT_SENSOR_MAPPING = "sensor-mapping.cfg"
DEFAULT_REFRESH = 1.0
DISPLAY_SIZE = (960, 376)
IMG_SAVE_DIR = "out"


@dataclass
class MonitorConfig:
    """Parsed panel configuration."""

    panels: List[Dict[str, Any]] = field(default_factory=list)
    active_panels: List[int] = field(default_factory=list)
    refresh: float = DEFAULT_REFRESH
    sensor_refresh: Optional[float] = None
    sensor_page_time: float = DEFAULT_SENSOR_PAGE_TIME
    time_page_time: Optional[float] = None
    time_page: Optional[str] = None
    time_page_font_size: Optional[int] = None
    sensor_page_label: Optional[str] = None
    display_on_hour: Optional[int] = None
    display_off_hour: Optional[int] = None
    sensor_filter: List[str] = field(default_factory=list)

    @property
    def templates(self) -> List[SensorTemplate]:
        return templates_from_panels(self.panels, self.active_panels)

    @property
    def poll_interval(self) -> float:
        return self.sensor_refresh if self.sensor_refresh is not None else self.refresh

    def compiled_filters(self) -> List[Pattern]:
        return compile_filters(self.sensor_filter)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitorConfig":
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        setup = data.get("setup") or {}
        panels = data.get("panels") or []
        if not isinstance(panels, list):
            raise ConfigError("'panels' must be a list")

        active = data.get("active_panels")
        if active is None:
            active = list(range(1, len(panels) + 1))
        try:
            active = [int(i) for i in active]
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"'active_panels' must be a list of panel numbers, got {active!r}") from exc

        cfg = cls(
            panels=panels,
            active_panels=active,
            refresh=_positive(setup, "refresh", DEFAULT_REFRESH),
            sensor_refresh=_positive(setup, "sensor_refresh", None),
            sensor_page_time=_positive(setup, "sensor_page_time", DEFAULT_SENSOR_PAGE_TIME),
            time_page_time=_positive(setup, "time_page_time", None),
            time_page=setup.get("time_page"),
            time_page_font_size=setup.get("time_page_font_size"),
            sensor_page_label=setup.get("sensor_page_label"),
            display_on_hour=_hour(setup, "display_on_hour"),
            display_off_hour=_hour(setup, "display_off_hour"),
            sensor_filter=list(data.get("sensor_filter") or []),
        )
        # Fail early on bad filter expressions
        cfg.compiled_filters()
        return cfg


def _positive(setup: Dict, key: str, default):
    value = setup.get(key)
    if value is None:
        return default
    try:
        value = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be a number, got {value!r}") from exc
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value}")
    return value


def _hour(setup: Dict, key: str) -> Optional[int]:
    value = setup.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 23:
        raise ConfigError(f"'{key}' must be an hour 0-23, got {value!r}")
    return value


def resolve_path(path: str, config_dir: str) -> str:
    """Relative paths are taken from the config directory."""
    if os.path.isabs(path):
        return path
    return os.path.join(config_dir, path)


def load_config(path: str) -> MonitorConfig:
    """Load the panel config from a YAML file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    logger.info("Loaded configuration %s", path)
    return MonitorConfig.from_dict(data or {})


def filter_file_for(mapping_path: str) -> str:
    """cfg/sensor-mapping.cfg -> cfg/sensor-mapping-filter.cfg"""
    stem, ext = os.path.splitext(mapping_path)
    return f"{stem}-filter{ext}"


def load_sensor_filter(mapping_path: str) -> List[str]:
    """Filter expressions from the filter file next to the mapping file."""
    filter_file = filter_file_for(mapping_path)
    if not os.path.isfile(filter_file):
        logger.info("No sensor filter file %s available", filter_file)
        return []
    logger.info("Loading sensor filter file %s", filter_file)
    patterns = read_filter_file(filter_file)
    compile_filters(patterns)
    return patterns


def load_sensor_mapping(mapping_path: str) -> Dict[str, str]:
    """Sensor key renames (source key -> panel key) from the mapping file."""
    if not os.path.isfile(mapping_path):
        logger.info("Sensor mapping file %s not found", mapping_path)
        return {}
    logger.info("Loading sensor mapping file %s", mapping_path)
    return read_key_value_file(mapping_path)
