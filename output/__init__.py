"""Page rendering and display outputs."""

from output.display import Display, SimulatedDisplay
from output.renderer import PanelRenderer

__all__ = ["Display", "SimulatedDisplay", "PanelRenderer"]
