"""Sensor source registry.

Register source types by name so the entry points can pick one from the
command line or configuration.

Usage:
    @register_source("system")
    class SystemSensorSource(SensorSource):
        ...
"""

import logging

logger = logging.getLogger(__name__)

SOURCE_REGISTRY = {}


def register_source(name):
    """Decorator to register a sensor source class by type name."""
    def decorator(cls):
        SOURCE_REGISTRY[name] = cls
        cls.name = name
        logger.debug("Registered source type: %s -> %s", name, cls.__name__)
        return cls
    return decorator


def create_source(name, *args, **kwargs):
    """Instantiate a registered source type."""
    cls = SOURCE_REGISTRY.get(name)
    if cls is None:
        raise KeyError(f"Unknown sensor source type: {name}")
    return cls(*args, **kwargs)
