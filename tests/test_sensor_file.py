from __future__ import annotations

import os
import stat

import pytest

from core.sensor_file import write_sensor_file
from sources.file_source import FileSensorSource, read_key_value_file


def test_writes_label_value_lines(tmp_path) -> None:
    out = tmp_path / "sensors.txt"
    write_sensor_file(str(out), {"cpu_usage": "12.5", "uptime": "3h 2m"})
    assert sorted(out.read_text().splitlines()) == ["cpu_usage: 12.5", "uptime: 3h 2m"]


def test_file_is_world_readable(tmp_path) -> None:
    out = tmp_path / "sensors.txt"
    write_sensor_file(str(out), {"a": "1"})
    assert os.stat(out).st_mode & stat.S_IROTH


def test_replaces_existing_file_without_leftovers(tmp_path) -> None:
    out = tmp_path / "sensors.txt"
    out.write_text("old: value\n")
    write_sensor_file(str(out), {"new": "value"})
    assert out.read_text() == "new: value\n"
    assert os.listdir(tmp_path) == ["sensors.txt"]


def test_custom_temp_dir(tmp_path) -> None:
    out = tmp_path / "sensors.txt"
    temp_dir = tmp_path / "tmp"
    write_sensor_file(str(out), {"a": "1"}, str(temp_dir))
    assert out.read_text() == "a: 1\n"
    assert os.listdir(temp_dir) == []


def test_directory_output_is_rejected(tmp_path) -> None:
    with pytest.raises(IsADirectoryError):
        write_sensor_file(str(tmp_path), {"a": "1"})


def test_written_file_reads_back_through_file_source(tmp_path) -> None:
    out = tmp_path / "sensors.txt"
    values = {"cpu_usage": "1.0", "storage_root_usage": "50.0"}
    write_sensor_file(str(out), values)
    assert FileSensorSource(str(out)).collect() == values
    assert read_key_value_file(str(out)) == values
