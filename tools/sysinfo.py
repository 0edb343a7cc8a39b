#!/usr/bin/env python3
"""Sensor value collector - write system sensors to a text file.

Polls the same system sensor source the panel uses and writes the values
as `label: value` lines, for the panel's file source or any other reader.
The output file is replaced atomically on every refresh.

Single run, print to console:
    python3 -m tools.sysinfo --console

Continuous, every 2s, storage sensors every 5 minutes:
    python3 -m tools.sysinfo --out /run/sensors/sys.txt --refresh 2 --disk-refresh 300
"""

import argparse
import logging
import os
import sys
import time

from core.sensor_file import write_sensor_file
from main import setup_logging
from sources.system_source import SystemSensorSource

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Sensor value collection for the sensor panel",
    )
    parser.add_argument(
        "-o", "--out",
        help="Output sensor file",
    )
    parser.add_argument(
        "-t", "--temp-dir",
        help="Temp directory for preparing the output file, must be on the same "
             "filesystem (default: the output file's directory)",
    )
    parser.add_argument(
        "--console", action="store_true",
        help="Print values in console",
    )
    parser.add_argument(
        "-r", "--refresh", type=int, default=0,
        help="Sensor refresh interval in seconds, 0 runs once (default: 0)",
    )
    parser.add_argument(
        "--disk-refresh", type=int, default=0,
        help="Storage sensor refresh interval in seconds, 0 disables them (default: 0)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    return parser.parse_args(argv)


def print_sensors(sensors, stream=None):
    """Pretty print with sorted keys."""
    stream = stream or sys.stdout
    for label, value in sorted(sensors.items()):
        print(f"{label}: {value}", file=stream)
    print(file=stream)


def collect_loop(args, source: SystemSensorSource):
    sensors = {}
    disk_refresh_time = time.monotonic()
    if args.disk_refresh:
        sensors.update(source.collect_slow())

    if args.refresh:
        logger.info("Starting sensor collection with refresh=%dms", args.refresh * 1000)

    while True:
        start = time.monotonic()

        source.refresh()
        sensors.update(source.collect())

        if args.disk_refresh and time.monotonic() - disk_refresh_time > args.disk_refresh:
            logger.debug("Refreshing storage sensors")
            sensors.update(source.collect_slow())
            disk_refresh_time = time.monotonic()

        if args.out:
            write_sensor_file(args.out, sensors, args.temp_dir)

        if args.console:
            print_sensors(sensors)

        if not args.refresh:
            break

        elapsed = time.monotonic() - start
        if args.refresh > elapsed:
            time.sleep(args.refresh - elapsed)

    return sensors


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    if args.out:
        if os.path.isdir(args.out):
            logger.error("Output cannot be a directory: %s", args.out)
            return 1
        parent = os.path.dirname(args.out)
        if parent:
            os.makedirs(parent, exist_ok=True)

    try:
        collect_loop(args, SystemSensorSource())
    except OSError as exc:
        logger.error("Sensor collection failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
