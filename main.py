#!/usr/bin/env python3
"""Sensor Panel - Entry point.

Polls system sensors and cycles a small display through one page per
matched sensor, plus an optional clock page.

Usage:
    python3 main.py --config panel.yaml              # Sensor panel mode
    python3 main.py --config panel.yaml --simulate --save   # No hardware, frames in out/
    python3 main.py --image picture.png --off-after 10
    python3 main.py --off                            # Switch display off and exit
    python3 main.py --log-level DEBUG                # Verbose logging
"""

__version__ = "1.0.0"

import argparse
import logging
import sys
import time

from PIL import Image

import config
from core import (
    PageCycleLoop,
    PanelError,
    SensorStore,
    compile_filters,
    compile_templates,
    create_source,
)
from core.sensor_poller import start_sensor_poller
from output.display import SimulatedDisplay
from output.renderer import PanelRenderer

# Import to trigger source registration
import sources  # noqa: F401
from sources.date_time import date_time_values

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Sensor Panel - system sensor display",
    )
    parser.add_argument(
        "--on", action="store_true",
        help="Switch display on and exit",
    )
    parser.add_argument(
        "--off", action="store_true",
        help="Switch display off and exit",
    )
    parser.add_argument(
        "-i", "--image",
        help="Image to display, scaled to the display size",
    )
    parser.add_argument(
        "-c", "--config",
        help="YAML panel configuration, relative paths are taken from --config-dir",
    )
    parser.add_argument(
        "--config-dir", default=config.DEFAULT_CONFIG_DIR,
        help="Configuration directory (default: %(default)s)",
    )
    parser.add_argument(
        "--font-dir", default=config.DEFAULT_FONT_DIR,
        help="Font directory (default: %(default)s)",
    )
    parser.add_argument(
        "--source", choices=["system", "file"],
        help="Sensor source (default: file if --sensor-path is given, else system)",
    )
    parser.add_argument(
        "--sensor-path",
        help=f"Sensor value file or directory, selects the file source (default: {config.DEFAULT_SENSOR_PATH})",
    )
    parser.add_argument(
        "--sensor-mapping", default=config.DEFAULT_SENSOR_MAPPING,
        help="Sensor key mapping file, its -filter file holds exclusion filters (default: %(default)s)",
    )
    parser.add_argument(
        "-o", "--off-after", type=int,
        help="Switch off display n seconds after showing an image",
    )
    parser.add_argument(
        "-s", "--save", action="store_true",
        help="Save sent frames in the out/ folder",
    )
    parser.add_argument(
        "--simulate", action="store_true",
        help="Simulate the display, no hardware required",
    )
    parser.add_argument(
        "--addr", type=lambda v: int(v, 0), default=0x3C,
        help="OLED I2C address (default: 0x3C)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"Sensor Panel {__version__}",
    )
    return parser.parse_args(argv)


def setup_logging(level_name: str) -> None:
    """Configure root logger with a consistent format."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-7s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def open_display(args):
    save_dir = config.IMG_SAVE_DIR if args.save else None
    if args.simulate:
        return SimulatedDisplay(config.DISPLAY_SIZE, save_dir=save_dir)
    from output.oled import OLEDDisplay
    return OLEDDisplay(addr=args.addr)


def open_source(args):
    source = args.source or ("file" if args.sensor_path else "system")
    if source == "file":
        return create_source("file", args.sensor_path or config.DEFAULT_SENSOR_PATH)
    return create_source("system")


def run_sensor_panel(args, display) -> None:
    """Start the sensor poller and cycle pages until a fatal error."""
    cfg = config.load_config(config.resolve_path(args.config, args.config_dir))
    mapping_file = config.resolve_path(args.sensor_mapping, args.config_dir)
    filters = compile_filters(cfg.sensor_filter + config.load_sensor_filter(mapping_file))

    templates = compile_templates(cfg.templates)
    logger.info("Compiled %d sensor templates", len(templates))

    store = SensorStore()
    start_sensor_poller(
        open_source(args),
        store,
        cfg.poll_interval,
        filters,
        mapping=config.load_sensor_mapping(mapping_file),
        virtual_sensors=date_time_values,
    )

    if cfg.time_page:
        logger.info("Time page enabled: %s", cfg.time_page)

    renderer = PanelRenderer(display.size, args.font_dir, args.config_dir)
    loop = PageCycleLoop(
        store,
        templates,
        renderer,
        display,
        refresh=cfg.refresh,
        sensor_page_time=cfg.sensor_page_time,
        time_page_time=cfg.time_page_time,
        time_page=cfg.time_page,
        time_page_font_size=cfg.time_page_font_size,
        sensor_page_label=cfg.sensor_page_label,
        on_hour=cfg.display_on_hour,
        off_hour=cfg.display_off_hour,
    )
    loop.run()


def run(args) -> None:
    display = open_display(args)

    if args.off:
        display.off()
        return
    if args.on:
        display.on()
        return

    display.init()

    if args.config:
        logger.info("Starting sensor panel mode")
        run_sensor_panel(args, display)
        return

    if args.image:
        logger.info("Loading and displaying image %s...", args.image)
        with Image.open(args.image) as img:
            frame = img.convert("RGB").resize(display.size)
        start = time.monotonic()
        display.send(frame)
        logger.debug("Image sent in %dms", (time.monotonic() - start) * 1000)

    if args.off_after:
        logger.info("Switching off display in %ds", args.off_after)
        time.sleep(args.off_after)
        display.off()


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    logger.info("Sensor Panel v%s starting", __version__)
    try:
        run(args)
    except PanelError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    logger.info("Bye bye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
