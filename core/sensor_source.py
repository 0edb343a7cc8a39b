"""Sensor source abstraction for the sensor panel.

A SensorSource knows how to read raw values from somewhere (/proc, /sys,
text files written by another program). The poller calls refresh() and
then collect() once per tick. Values are plain strings; formatting is up
to the source.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict

logger = logging.getLogger(__name__)


class SensorSource(ABC):
    """Base class for all raw sensor value providers.

    Subclasses implement collect(). refresh() and collect_slow() are
    optional hooks. Any of them may raise; the poller logs the error and
    treats the tick as "no new data".
    """

    name = "source"

    def refresh(self) -> None:
        """Update internal collector state before collect()."""

    @abstractmethod
    def collect(self) -> Dict[str, str]:
        """Return a dict of sensor key -> value."""
        ...

    def collect_slow(self) -> Dict[str, str]:
        """Return expensive sensor values. Polled on a longer interval."""
        return {}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
