"""Text file sensor source.

Reads `label: value` lines from a single file, or from every regular
file in a directory. This is the format written by tools/sysinfo.py and
by any external script that wants to feed the panel.

Blank lines, `#` comments and lines without a `:` separator are ignored.
"""

import logging
import os
from typing import Dict, Optional

from core.registry import register_source
from core.sensor_source import SensorSource

logger = logging.getLogger(__name__)


def parse_key_value_line(line: str) -> Optional[tuple]:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition(":")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip()


def read_key_value_file(path: str, target: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Read a key-value file into target (a new dict if not given)."""
    if target is None:
        target = {}
    with open(path, encoding="utf-8") as f:
        for line in f:
            parsed = parse_key_value_line(line)
            if parsed:
                key, value = parsed
                target[key] = value
    return target


def read_filter_file(path: str) -> list:
    """Read regular expressions, one per line. Returns the raw strings."""
    patterns = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.append(line)
    return patterns


@register_source("file")
class FileSensorSource(SensorSource):
    """Reads sensor values written by another program."""

    def __init__(self, path: str):
        self.path = path

    def collect(self) -> Dict[str, str]:
        values: Dict[str, str] = {}
        if os.path.isdir(self.path):
            for entry in sorted(os.listdir(self.path)):
                file_path = os.path.join(self.path, entry)
                if os.path.isfile(file_path) and not entry.startswith("."):
                    read_key_value_file(file_path, values)
        else:
            read_key_value_file(self.path, values)
        return values

    def __repr__(self) -> str:
        return f"<FileSensorSource {self.path}>"
