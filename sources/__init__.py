"""Sensor source implementations for the sensor panel.

Importing this package registers all built-in source types.
"""

from sources.system_source import SystemSensorSource
from sources.file_source import FileSensorSource, read_filter_file, read_key_value_file
from sources.date_time import date_time_value, date_time_values

__all__ = [
    "SystemSensorSource",
    "FileSensorSource",
    "read_filter_file",
    "read_key_value_file",
    "date_time_value",
    "date_time_values",
]
