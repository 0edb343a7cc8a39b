from __future__ import annotations

import logging
import time

from conftest import FakeClock

from core.sensor_poller import SensorPoller, start_sensor_poller
from core.sensor_source import SensorSource
from core.sensor_store import SensorStore, compile_filters


class ScriptedSource(SensorSource):
    def __init__(self, ticks, slow=None, fail_on=(), slow_fails=False) -> None:
        self.ticks = list(ticks)
        self.slow = slow or {}
        self.fail_on = set(fail_on)
        self.slow_fails = slow_fails
        self.refreshes = 0
        self.slow_calls = 0

    def refresh(self) -> None:
        self.refreshes += 1

    def collect(self):
        idx = self.refreshes - 1
        if idx in self.fail_on:
            raise OSError("sensor bus error")
        return self.ticks[min(idx, len(self.ticks) - 1)]

    def collect_slow(self):
        self.slow_calls += 1
        if self.slow_fails:
            raise OSError("smartctl failed")
        return self.slow


def test_poll_merges_into_store() -> None:
    store = SensorStore()
    poller = SensorPoller(ScriptedSource([{"cpu_usage": "5.0"}]), store, 1.0)
    assert poller.poll_once() == 1
    assert store.snapshot() == {"cpu_usage": "5.0"}


def test_excluded_keys_never_reach_store() -> None:
    store = SensorStore()
    source = ScriptedSource([{"cpu_usage": "5.0", "net_docker0_rx": "1.0"}])
    poller = SensorPoller(source, store, 1.0, compile_filters(["docker"]))
    poller.initial_read()
    poller.poll_once()
    assert "net_docker0_rx" not in store.snapshot()
    assert store.get("cpu_usage") == "5.0"


def test_source_failure_is_a_no_op_tick(caplog) -> None:
    store = SensorStore()
    source = ScriptedSource([{"a": "1"}, {"a": "2"}, {"a": "3"}], fail_on={1})
    poller = SensorPoller(source, store, 1.0)

    poller.poll_once()
    with caplog.at_level(logging.WARNING):
        assert poller.poll_once() == 0
    assert store.get("a") == "1"
    assert "sensor bus error" in caplog.text

    poller.poll_once()
    assert store.get("a") == "3"


def test_slow_sensors_on_their_own_interval(fake_clock: FakeClock) -> None:
    store = SensorStore()
    source = ScriptedSource([{"a": "1"}], slow={"storage_root_usage": "40.0"})
    poller = SensorPoller(source, store, 1.0, slow_interval=300.0, clock=fake_clock)

    poller.initial_read()
    assert source.slow_calls == 1

    fake_clock.now = 100.0
    poller.poll_once()
    assert source.slow_calls == 1

    fake_clock.now = 301.0
    poller.poll_once()
    assert source.slow_calls == 2
    assert store.get("storage_root_usage") == "40.0"


def test_slow_failure_does_not_block_primary(caplog) -> None:
    store = SensorStore()
    source = ScriptedSource([{"a": "1"}], slow_fails=True)
    poller = SensorPoller(source, store, 1.0)
    with caplog.at_level(logging.WARNING):
        poller.initial_read()
    assert store.get("a") == "1"
    assert "smartctl failed" in caplog.text


def test_started_poller_keeps_refreshing() -> None:
    store = SensorStore()
    source = ScriptedSource([{"tick": "1"}, {"tick": "2"}, {"tick": "3"}])
    poller = start_sensor_poller(source, store, 0.01)
    assert poller.running

    deadline = time.monotonic() + 5
    while store.get("tick") != "3" and time.monotonic() < deadline:
        time.sleep(0.01)
    assert store.get("tick") == "3"


def test_mapping_renames_source_keys() -> None:
    store = SensorStore()
    source = ScriptedSource([{"coretemp_core_0": "48.0", "load_1m": "0.10"}])
    poller = SensorPoller(source, store, 1.0, mapping={"coretemp_core_0": "cpu_temp"})
    poller.poll_once()
    assert store.snapshot() == {"cpu_temp": "48.0", "load_1m": "0.10"}


def test_filters_apply_to_mapped_keys() -> None:
    store = SensorStore()
    source = ScriptedSource([{"coretemp_core_0": "48.0", "load_1m": "0.10"}])
    poller = SensorPoller(
        source, store, 1.0, compile_filters(["^cpu_temp$"]), mapping={"coretemp_core_0": "cpu_temp"}
    )
    poller.poll_once()
    assert store.snapshot() == {"load_1m": "0.10"}


def test_virtual_sensors_merged_every_tick() -> None:
    store = SensorStore()
    clock_values = iter(["09:05", "09:06"])
    poller = SensorPoller(
        ScriptedSource([{"a": "1"}]), store, 1.0,
        virtual_sensors=lambda: {"DATE_h_m_3": next(clock_values)},
    )

    poller.initial_read()
    assert store.get("DATE_h_m_3") == "09:05"
    poller.poll_once()
    assert store.get("DATE_h_m_3") == "09:06"
    assert store.get("a") == "1"


def test_virtual_sensors_survive_source_failure() -> None:
    store = SensorStore()
    poller = SensorPoller(
        ScriptedSource([{"a": "1"}], fail_on={0}), store, 1.0,
        virtual_sensors=lambda: {"DATE_year": "2026"},
    )
    assert poller.poll_once() == 1
    assert store.snapshot() == {"DATE_year": "2026"}
