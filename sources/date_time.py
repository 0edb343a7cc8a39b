"""Date and time virtual sensors.

Keys starting with DATE_ are not read from the machine; they are computed
from the local clock. The poller merges them into the store on every
tick so templates can discover them like any other sensor. Formats
follow the labels used by the panel designer (including the CJK
variants).
"""

from datetime import datetime
from typing import Dict, Optional

DATE_PREFIX = "DATE_"


def date_time_values(now: Optional[datetime] = None) -> Dict[str, str]:
    """All DATE_ sensors for `now` (default: the current local time)."""
    now = now or datetime.now()
    year = str(now.year)
    month = f"{now.month:02}"
    day = f"{now.day:02}"
    hour = f"{now.hour:02}"
    minute = f"{now.minute:02}"
    second = f"{now.second:02}"

    return {
        "DATE_year": year,
        "DATE_month": month,
        "DATE_day": day,
        "DATE_hour": hour,
        "DATE_minute": minute,
        "DATE_second": second,
        "DATE_m_d_h_m_1": f"{month}月{day}日  {hour}:{minute}",
        "DATE_m_d_h_m_2": f"{month}/{day}  {hour}:{minute}",
        "DATE_m_d_1": f"{month}月{day}日",
        "DATE_m_d_2": f"{month}-{day}",
        "DATE_y_m_d_1": f"{year}年{month}月{day}日",
        "DATE_y_m_d_2": f"{year}-{month}-{day}",
        "DATE_y_m_d_3": f"{year}/{month}/{day}",
        "DATE_y_m_d_4": f"{year} {month} {day}",
        "DATE_h_m_s_1": f"{hour}:{minute}:{second}",
        "DATE_h_m_s_2": f"{hour}时{minute}分{second}秒",
        "DATE_h_m_s_3": f"{hour} {minute} {second}",
        "DATE_h_m_1": f"{hour}时{minute}分",
        "DATE_h_m_2": f"{hour} : {minute}",
        "DATE_h_m_3": f"{hour}:{minute}",
    }


def date_time_value(label: str, now: Optional[datetime] = None) -> Optional[str]:
    """Return the formatted value for a DATE_ label, or None."""
    if not label.startswith(DATE_PREFIX):
        return None
    return date_time_values(now).get(label)
