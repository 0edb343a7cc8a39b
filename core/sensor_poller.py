"""Background sensor poller.

Refreshes a SensorSource on a fixed interval and merges the collected
values into the shared SensorStore. There is exactly one poller thread,
so ticks never run concurrently. A tick that takes longer than the
interval is followed by the next one without sleeping; missed ticks are
not made up.

Before merging, virtual sensors (date and time) are added and source keys
are renamed through the optional sensor mapping. Exclusion filters apply
to the renamed keys.

The poller runs for the lifetime of the process. It has no stop signal;
the thread is a daemon and ends with the interpreter.
"""

import logging
import threading
import time
from re import Pattern
from typing import Callable, Dict, Iterable, List, Optional

from core.sensor_source import SensorSource
from core.sensor_store import SensorStore

logger = logging.getLogger(__name__)

# Storage and other expensive sensors
SLOW_REFRESH_INTERVAL = 300.0


class SensorPoller:
    """Polls one SensorSource and feeds a SensorStore."""

    def __init__(
        self,
        source: SensorSource,
        store: SensorStore,
        interval: float,
        filters: Optional[Iterable[Pattern]] = None,
        mapping: Optional[Dict[str, str]] = None,
        virtual_sensors: Optional[Callable[[], Dict[str, str]]] = None,
        slow_interval: float = SLOW_REFRESH_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source
        self.store = store
        self.interval = interval
        self.filters: List[Pattern] = list(filters or [])
        self.mapping: Dict[str, str] = dict(mapping or {})
        self.virtual_sensors = virtual_sensors
        self.slow_interval = slow_interval
        self._clock = clock
        self._sleep = sleep
        self._slow_time = clock()
        self._thread: Optional[threading.Thread] = None

    def _collect(self) -> Dict[str, str]:
        try:
            self.source.refresh()
            return dict(self.source.collect())
        except Exception as exc:
            logger.warning("Sensor update from %r failed: %s", self.source, exc)
            return {}

    def _collect_slow(self) -> Dict[str, str]:
        try:
            return dict(self.source.collect_slow())
        except Exception as exc:
            logger.warning("Slow sensor update from %r failed: %s", self.source, exc)
            return {}

    def _merge(self, raw: Dict[str, str]) -> int:
        """Add virtual sensors, apply the key mapping and merge into the store."""
        if self.virtual_sensors is not None:
            raw.update(self.virtual_sensors())
        if self.mapping:
            raw = {self.mapping.get(key, key): value for key, value in raw.items()}
        return self.store.merge(raw, self.filters)

    def initial_read(self) -> int:
        """Synchronous first read, including the slow sensors."""
        raw = self._collect()
        raw.update(self._collect_slow())
        self._slow_time = self._clock()
        return self._merge(raw)

    def poll_once(self) -> int:
        """Run one tick. Returns the number of values merged."""
        raw = self._collect()

        if self._clock() - self._slow_time > self.slow_interval:
            logger.debug("Refreshing slow sensors")
            raw.update(self._collect_slow())
            self._slow_time = self._clock()

        return self._merge(raw)

    def _run(self):
        while True:
            tick_start = self._clock()
            self.poll_once()
            elapsed = self._clock() - tick_start
            if self.interval > elapsed:
                self._sleep(self.interval - elapsed)

    def start(self):
        """Do the initial read and spawn the poller thread."""
        if self._thread and self._thread.is_alive():
            return
        self.initial_read()
        self._thread = threading.Thread(target=self._run, daemon=True, name="sensor-poller")
        self._thread.start()
        logger.info(
            "Sensor poller started for %r (refresh=%dms)", self.source, int(self.interval * 1000)
        )

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()


def start_sensor_poller(
    source: SensorSource,
    store: SensorStore,
    interval: float,
    filters: Optional[Iterable[Pattern]] = None,
    mapping: Optional[Dict[str, str]] = None,
    virtual_sensors: Optional[Callable[[], Dict[str, str]]] = None,
) -> SensorPoller:
    """Create and start a poller. Convenience for the entry points."""
    poller = SensorPoller(source, store, interval, filters, mapping, virtual_sensors)
    poller.start()
    return poller
