"""Exception hierarchy for the sensor panel.

Tolerated faults (bad template patterns, sensor collection errors, render
errors) are logged where they happen. Everything raised from here on is
meant to reach the caller.
"""


class PanelError(Exception):
    """Base class for all sensor panel errors."""


class ConfigError(PanelError):
    """Configuration is missing or invalid."""


class NoPagesError(PanelError):
    """No page matched the configuration at startup."""


class RenderError(PanelError):
    """A page could not be rendered into an image."""


class DisplayError(PanelError):
    """The display transport failed. Not recoverable."""


class StorePoisonedError(PanelError):
    """The sensor store was left inconsistent by a failed write."""
