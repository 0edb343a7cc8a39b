"""Time-of-day display schedule.

The display is switched on at display_on_hour and off at display_off_hour.
Either may be left unset. A range whose on hour is later than its off hour
wraps around midnight, e.g. on=22 off=6 is active from 22:00 to 05:59.
"""

from datetime import datetime
from typing import Optional, Union


def is_display_active(
    now: Union[datetime, int],
    on_hour: Optional[int] = None,
    off_hour: Optional[int] = None,
) -> bool:
    """Return True if the display should be on at `now` (datetime or hour 0-23)."""
    hour = now if isinstance(now, int) else now.hour

    if on_hour is None and off_hour is None:
        return True
    if off_hour is None:
        return hour >= on_hour
    if on_hour is None:
        return hour < off_hour
    if on_hour <= off_hour:
        return on_hour <= hour < off_hour
    return hour >= on_hour or hour < off_hour
