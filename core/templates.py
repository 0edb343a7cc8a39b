"""Sensor templates: configured rules that turn sensor keys into pages.

A template has a regular expression over sensor keys and a name template
with positional placeholders {1}..{9} that are filled from the match's
capture groups. Everything else in the template's configuration is
render metadata and is passed through untouched.

Config example (a panel in the YAML config):
    panels:
      - name: "CPU"
        sensors:
          - pattern: '^cpu_(\\d+)_temp$'
            name: "Core {1}"
            unit: "°C"
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SENSOR_NAME = "Sensor"

# Keys that are consumed here; anything else is render metadata
_TEMPLATE_KEYS = ("pattern", "name", "label")


@dataclass(frozen=True)
class SensorTemplate:
    """One configured page rule."""

    pattern: Optional[str] = None
    name: Optional[str] = None
    label: Optional[str] = None
    panel: Optional[str] = None
    # Unhashable; templates hash by their rule fields only
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def base_name(self) -> str:
        """Name template before capture substitution."""
        return self.name or self.label or self.panel or DEFAULT_SENSOR_NAME

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any], panel: Optional[str] = None) -> "SensorTemplate":
        metadata = {k: v for k, v in cfg.items() if k not in _TEMPLATE_KEYS}
        return cls(
            pattern=cfg.get("pattern"),
            name=cfg.get("name"),
            label=cfg.get("label"),
            panel=panel,
            metadata=metadata,
        )


@dataclass(frozen=True)
class CompiledTemplate:
    """A SensorTemplate together with its compiled key matcher."""

    template: SensorTemplate
    matcher: re.Pattern

    def match(self, key: str):
        return self.matcher.search(key)


def compile_templates(templates: Iterable[SensorTemplate]) -> List[CompiledTemplate]:
    """Compile template patterns, keeping configured order.

    Templates without a pattern cannot discover keys and are skipped.
    A template with an invalid pattern is dropped with a warning; the
    rest are still compiled.
    """
    compiled = []
    for template in templates:
        if not template.pattern:
            logger.debug("Template '%s' has no pattern, skipped", template.base_name)
            continue
        if not isinstance(template.pattern, str):
            logger.warning("Invalid sensor pattern '%s': not a string", template.pattern)
            continue
        try:
            matcher = re.compile(template.pattern)
        except re.error as exc:
            logger.warning("Invalid sensor pattern '%s': %s", template.pattern, exc)
            continue
        compiled.append(CompiledTemplate(template, matcher))
    return compiled


def panel_name(panel: Dict[str, Any]) -> Optional[str]:
    return panel.get("name") or panel.get("label")


def templates_from_panels(
    panels: Sequence[Dict[str, Any]], active_panels: Sequence[int]
) -> List[SensorTemplate]:
    """Collect templates of the active panels, in active_panels order.

    Panel indices are 1-based. Index 0 and indices past the last panel
    are ignored. Raises ConfigError for panels or sensor entries that
    are not mappings.
    """
    templates = []
    for active in active_panels:
        if active < 1 or active > len(panels):
            logger.warning("Ignoring invalid active panel index %s", active)
            continue
        panel = panels[active - 1]
        if not isinstance(panel, dict):
            raise ConfigError(f"Panel {active} must be a mapping, got {panel!r}")
        sensors = panel.get("sensors") or []
        if not isinstance(sensors, list):
            raise ConfigError(f"'sensors' of panel {active} must be a list")
        for sensor_cfg in sensors:
            if not isinstance(sensor_cfg, dict):
                raise ConfigError(f"Sensor entry of panel {active} must be a mapping, got {sensor_cfg!r}")
            templates.append(SensorTemplate.from_dict(sensor_cfg, panel_name(panel)))
    return templates
