"""System sensor source -- CPU, temperatures, fans, memory, network.

Reads from /proc and /sys on Linux. No external dependencies. CPU usage
and network throughput are rates, computed from the difference between
two refresh() calls; the first collect() after startup reports 0.

Keys:
    cpu_usage, cpu_<n>_usage           percent
    temperature_<zone>                 thermal zones, degrees C
    <chip>_temp<n> / <chip>_<label>    hwmon temperatures, degrees C
    <chip>_fan<n>                      hwmon fans, RPM
    memory_usage, memory_used, memory_total
    load_1m, load_5m, load_15m, uptime
    net_<iface>_rx, net_<iface>_tx     KiB/s
"""

import glob
import logging
import os
import re
import time
from typing import Dict, List, Optional, Tuple

from core.registry import register_source
from core.sensor_source import SensorSource
from sources.storage import storage_sensors

logger = logging.getLogger(__name__)

_KEY_CLEAN_RE = re.compile(r"[^a-zA-Z0-9]+")


def sensor_key(*parts: str) -> str:
    """Join parts into a lower case key with underscores only."""
    joined = "_".join(p for p in parts if p)
    return _KEY_CLEAN_RE.sub("_", joined).strip("_").lower()


def _read(path: str) -> Optional[str]:
    try:
        with open(path) as f:
            return f.read().strip()
    except (OSError, ValueError):
        return None


def _parse_cpu_times(stat: str) -> Dict[str, Tuple[int, int]]:
    """Return {cpu_name: (busy, total)} from /proc/stat content."""
    times = {}
    for line in stat.splitlines():
        if not line.startswith("cpu"):
            continue
        parts = line.split()
        values = [int(v) for v in parts[1:]]
        # idle + iowait
        idle = values[3] + (values[4] if len(values) > 4 else 0)
        total = sum(values[:8])
        times[parts[0]] = (total - idle, total)
    return times


@register_source("system")
class SystemSensorSource(SensorSource):
    """Polls system metrics from /proc and /sys."""

    def __init__(self, proc_root: str = "/proc", sys_root: str = "/sys", mounts: Optional[List[str]] = None):
        self.proc_root = proc_root
        self.sys_root = sys_root
        self.mounts = mounts
        self._cpu_prev: Dict[str, Tuple[int, int]] = {}
        self._cpu_usage: Dict[str, float] = {}
        self._net_prev: Dict[str, Tuple[int, int]] = {}
        self._net_time = 0.0
        self._net_rates: Dict[str, Tuple[float, float]] = {}

    # ------------------------------------------------------------------
    # Rate sampling
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        self._refresh_cpu()
        self._refresh_net()

    def _refresh_cpu(self):
        stat = _read(os.path.join(self.proc_root, "stat"))
        if stat is None:
            return
        current = _parse_cpu_times(stat)
        usage = {}
        for cpu, (busy, total) in current.items():
            prev_busy, prev_total = self._cpu_prev.get(cpu, (busy, total))
            delta_total = total - prev_total
            usage[cpu] = (busy - prev_busy) / delta_total * 100.0 if delta_total > 0 else 0.0
        self._cpu_prev = current
        self._cpu_usage = usage

    def _refresh_net(self):
        content = _read(os.path.join(self.proc_root, "net", "dev"))
        if content is None:
            return
        now = time.monotonic()
        elapsed = now - self._net_time if self._net_time else 0.0
        current = {}
        rates = {}
        for line in content.splitlines()[2:]:
            iface, _, data = line.partition(":")
            iface = iface.strip()
            fields = data.split()
            if iface == "lo" or len(fields) < 9:
                continue
            rx, tx = int(fields[0]), int(fields[8])
            current[iface] = (rx, tx)
            prev = self._net_prev.get(iface)
            if prev and elapsed > 0:
                rates[iface] = ((rx - prev[0]) / elapsed / 1024, (tx - prev[1]) / elapsed / 1024)
            else:
                rates[iface] = (0.0, 0.0)
        self._net_prev = current
        self._net_time = now
        self._net_rates = rates

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def collect(self) -> Dict[str, str]:
        data: Dict[str, str] = {}

        for cpu, usage in self._cpu_usage.items():
            if cpu == "cpu":
                data["cpu_usage"] = f"{usage:.1f}"
            else:
                data[f"cpu_{cpu[3:]}_usage"] = f"{usage:.1f}"

        data.update(self._thermal_zones())
        data.update(self._hwmon())
        data.update(self._memory())

        loadavg = _read(os.path.join(self.proc_root, "loadavg"))
        if loadavg:
            parts = loadavg.split()
            data["load_1m"], data["load_5m"], data["load_15m"] = parts[0], parts[1], parts[2]

        uptime = _read(os.path.join(self.proc_root, "uptime"))
        if uptime:
            seconds = float(uptime.split()[0])
            hours = int(seconds // 3600)
            minutes = int((seconds % 3600) // 60)
            data["uptime"] = f"{hours}h {minutes}m"

        for iface, (rx, tx) in self._net_rates.items():
            data[sensor_key("net", iface, "rx")] = f"{rx:.1f}"
            data[sensor_key("net", iface, "tx")] = f"{tx:.1f}"

        return data

    def collect_slow(self) -> Dict[str, str]:
        return storage_sensors(os.path.join(self.proc_root, "mounts"), self.mounts)

    def _thermal_zones(self) -> Dict[str, str]:
        data = {}
        pattern = os.path.join(self.sys_root, "class", "thermal", "thermal_zone*")
        for zone in sorted(glob.glob(pattern)):
            temp = _read(os.path.join(zone, "temp"))
            if temp is None:
                continue
            zone_type = _read(os.path.join(zone, "type")) or os.path.basename(zone)
            try:
                data[sensor_key("temperature", zone_type)] = f"{int(temp) / 1000.0:.1f}"
            except ValueError:
                continue
        return data

    def _hwmon(self) -> Dict[str, str]:
        data = {}
        pattern = os.path.join(self.sys_root, "class", "hwmon", "hwmon*")
        for chip_dir in sorted(glob.glob(pattern)):
            chip = _read(os.path.join(chip_dir, "name")) or os.path.basename(chip_dir)
            for input_path in sorted(glob.glob(os.path.join(chip_dir, "temp*_input"))):
                raw = _read(input_path)
                if raw is None:
                    continue
                base = os.path.basename(input_path)[: -len("_input")]
                label = _read(os.path.join(chip_dir, base + "_label")) or base
                try:
                    data[sensor_key(chip, label)] = f"{int(raw) / 1000.0:.1f}"
                except ValueError:
                    continue
            for input_path in sorted(glob.glob(os.path.join(chip_dir, "fan*_input"))):
                raw = _read(input_path)
                if raw is None:
                    continue
                base = os.path.basename(input_path)[: -len("_input")]
                data[sensor_key(chip, base)] = raw
        return data

    def _memory(self) -> Dict[str, str]:
        content = _read(os.path.join(self.proc_root, "meminfo"))
        if content is None:
            return {}
        meminfo = {}
        for line in content.splitlines():
            parts = line.split(":")
            if len(parts) == 2:
                meminfo[parts[0].strip()] = int(parts[1].strip().split()[0])
        total = meminfo.get("MemTotal", 0)
        available = meminfo.get("MemAvailable", 0)
        if not total:
            return {}
        used = total - available
        return {
            "memory_usage": f"{used / total * 100.0:.1f}",
            "memory_used": f"{used / 1024 ** 2:.1f}",
            "memory_total": f"{total / 1024 ** 2:.1f}",
        }

    def __repr__(self) -> str:
        return f"<SystemSensorSource {self.proc_root}>"
