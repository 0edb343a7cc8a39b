"""Thread-shared sensor value store.

One writer (the sensor poller) and any number of readers (page building
and rendering). Readers always get a point-in-time copy. A merge is
atomic with respect to readers: it is applied while holding the write
side of a reader/writer lock.

If a merge fails halfway through, the store is marked poisoned and every
later access raises StorePoisonedError instead of serving partial data.
"""

import logging
import re
import threading
from typing import Dict, Iterable, List, Mapping, Optional

from core.exceptions import ConfigError, StorePoisonedError

logger = logging.getLogger(__name__)


def compile_filters(patterns: Iterable[str]) -> List[re.Pattern]:
    """Compile exclusion filter expressions. Invalid ones are a ConfigError."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"Invalid sensor filter '{pattern}': {exc}") from exc
    return compiled


def is_filtered(key: str, filters: Optional[Iterable[re.Pattern]]) -> bool:
    """True if any filter matches somewhere in the key."""
    if not filters:
        return False
    return any(f.search(key) for f in filters)


class _ReadWriteLock:
    """Many concurrent readers or a single writer. Waiting writers go first."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self):
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self):
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class SensorStore:
    """Mapping of sensor key -> string value shared between threads."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = _ReadWriteLock()
        self._poisoned = False

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    def _check(self):
        if self._poisoned:
            raise StorePoisonedError("Sensor store is poisoned by a failed merge")

    def snapshot(self) -> Dict[str, str]:
        """Return a copy of all current values."""
        self._lock.acquire_read()
        try:
            self._check()
            return dict(self._values)
        finally:
            self._lock.release_read()

    def get(self, key: str) -> Optional[str]:
        self._lock.acquire_read()
        try:
            self._check()
            return self._values.get(key)
        finally:
            self._lock.release_read()

    def merge(self, raw: Mapping[str, str], filters: Optional[Iterable[re.Pattern]] = None) -> int:
        """Insert or replace every entry of raw whose key is not filtered.

        Existing keys missing from raw are left untouched. Returns the
        number of entries written.
        """
        filters = list(filters or [])
        self._lock.acquire_write()
        try:
            self._check()
            written = 0
            try:
                for key, value in raw.items():
                    if is_filtered(key, filters):
                        continue
                    self._values[key] = value
                    written += 1
            except BaseException:
                self._poisoned = True
                logger.error("Sensor store merge failed, store is now poisoned")
                raise
            return written
        finally:
            self._lock.release_write()

    def __len__(self) -> int:
        return len(self.snapshot())
