from __future__ import annotations

from datetime import datetime

import pytest

from sources.date_time import DATE_PREFIX, date_time_value, date_time_values

NOW = datetime(2026, 3, 7, 9, 5, 4)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("DATE_year", "2026"),
        ("DATE_month", "03"),
        ("DATE_day", "07"),
        ("DATE_hour", "09"),
        ("DATE_minute", "05"),
        ("DATE_second", "04"),
        ("DATE_m_d_h_m_2", "03/07  09:05"),
        ("DATE_m_d_1", "03月07日"),
        ("DATE_y_m_d_2", "2026-03-07"),
        ("DATE_y_m_d_3", "2026/03/07"),
        ("DATE_h_m_s_1", "09:05:04"),
        ("DATE_h_m_s_2", "09时05分04秒"),
        ("DATE_h_m_2", "09 : 05"),
        ("DATE_h_m_3", "09:05"),
    ],
)
def test_date_time_labels(label, expected) -> None:
    assert date_time_value(label, NOW) == expected


def test_unknown_labels() -> None:
    assert date_time_value("DATE_unknown", NOW) is None
    assert date_time_value("cpu_usage", NOW) is None


def test_all_values_share_the_prefix() -> None:
    values = date_time_values(NOW)
    assert len(values) == 20
    assert all(label.startswith(DATE_PREFIX) for label in values)
    assert all(date_time_value(label, NOW) == value for label, value in values.items())
