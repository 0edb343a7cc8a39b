from __future__ import annotations

import logging

import pytest

from core.exceptions import ConfigError
from core.templates import (
    DEFAULT_SENSOR_NAME,
    SensorTemplate,
    compile_templates,
    templates_from_panels,
)


def test_compile_keeps_configured_order() -> None:
    templates = [
        SensorTemplate(pattern="^b", name="B"),
        SensorTemplate(pattern="^a", name="A"),
        SensorTemplate(pattern="^c", name="C"),
    ]
    compiled = compile_templates(templates)
    assert [c.template.name for c in compiled] == ["B", "A", "C"]


def test_invalid_pattern_is_skipped_with_warning(caplog) -> None:
    templates = [
        SensorTemplate(pattern="^ok$", name="OK"),
        SensorTemplate(pattern="cpu_(\\d+", name="Broken"),
        SensorTemplate(pattern="^also_ok$", name="Also"),
    ]
    with caplog.at_level(logging.WARNING):
        compiled = compile_templates(templates)

    assert [c.template.name for c in compiled] == ["OK", "Also"]
    assert "cpu_(\\d+" in caplog.text


def test_non_string_pattern_is_skipped_with_warning(caplog) -> None:
    templates = [
        SensorTemplate.from_dict({"pattern": 2024, "name": "Year"}),
        SensorTemplate.from_dict({"pattern": "^cpu", "name": "CPU"}),
    ]
    with caplog.at_level(logging.WARNING):
        compiled = compile_templates(templates)

    assert [c.template.name for c in compiled] == ["CPU"]
    assert "2024" in caplog.text


def test_templates_without_pattern_are_skipped() -> None:
    compiled = compile_templates([SensorTemplate(name="No pattern"), SensorTemplate(pattern="", name="Empty")])
    assert compiled == []


def test_from_dict_splits_metadata() -> None:
    template = SensorTemplate.from_dict(
        {"pattern": "^x$", "name": "X", "unit": "°C", "color": "#ff0000"}, panel="CPU"
    )
    assert template.pattern == "^x$"
    assert template.panel == "CPU"
    assert template.metadata == {"unit": "°C", "color": "#ff0000"}


def test_base_name_fallbacks() -> None:
    assert SensorTemplate(name="Name", label="Label").base_name == "Name"
    assert SensorTemplate(label="Label", panel="Panel").base_name == "Label"
    assert SensorTemplate(panel="Panel").base_name == "Panel"
    assert SensorTemplate().base_name == DEFAULT_SENSOR_NAME


def test_templates_from_active_panels_in_active_order() -> None:
    panels = [
        {"name": "CPU", "sensors": [{"pattern": "^cpu", "name": "C1"}, {"pattern": "^core", "name": "C2"}]},
        {"label": "Memory", "sensors": [{"pattern": "^memory", "name": "M"}]},
        {"name": "Unused", "sensors": [{"pattern": "^x", "name": "X"}]},
    ]
    templates = templates_from_panels(panels, [2, 0, 1, 7])
    assert [t.name for t in templates] == ["M", "C1", "C2"]
    assert templates[0].panel == "Memory"


def test_panel_without_sensors() -> None:
    assert templates_from_panels([{"name": "Empty"}], [1]) == []


@pytest.mark.parametrize(
    "panels",
    [
        ["CPU"],
        [None],
        [{"name": "CPU", "sensors": "^cpu"}],
        [{"name": "CPU", "sensors": ["^cpu"]}],
    ],
)
def test_malformed_panels_raise_config_error(panels) -> None:
    with pytest.raises(ConfigError):
        templates_from_panels(panels, [1])


def test_templates_are_hashable_despite_metadata() -> None:
    first = SensorTemplate.from_dict({"pattern": "^x$", "name": "X", "unit": "%"})
    second = SensorTemplate.from_dict({"pattern": "^x$", "name": "X", "unit": "%"})
    assert hash(first) == hash(second)
    assert len({first, second}) == 1
    assert first != SensorTemplate.from_dict({"pattern": "^x$", "name": "X", "unit": "°C"})
