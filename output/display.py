"""Display collaborators.

The cycle loop only needs send(image), on() and off(). Any failure in
those is a DisplayError and ends the loop, since nothing more can be
shown without a working transport.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from PIL import Image

logger = logging.getLogger(__name__)


class Display(ABC):
    """Base class for all display outputs."""

    size: Tuple[int, int] = (960, 376)

    def init(self) -> None:
        """Prepare the hardware and switch it on."""
        self.on()

    @abstractmethod
    def send(self, image: Image.Image) -> None:
        ...

    @abstractmethod
    def on(self) -> None:
        ...

    @abstractmethod
    def off(self) -> None:
        ...

    def close(self) -> None:
        """Release resources. Override if needed."""


class SimulatedDisplay(Display):
    """Display without hardware, for development and tests.

    Keeps the last frame and, with a save directory, stores every frame as
    a numbered PNG.
    """

    def __init__(self, size: Tuple[int, int] = (960, 376), save_dir: Optional[str] = None):
        self.size = size
        self.save_dir = save_dir
        self.is_on = False
        self.frame_count = 0
        self.last_image: Optional[Image.Image] = None
        if save_dir:
            os.makedirs(save_dir, exist_ok=True)

    def send(self, image: Image.Image) -> None:
        if image.size != self.size:
            image = image.resize(self.size)
        self.last_image = image
        self.frame_count += 1
        if self.save_dir:
            path = os.path.join(self.save_dir, f"frame-{self.frame_count:05}.png")
            image.save(path)
            logger.debug("Saved frame %s", path)

    def on(self) -> None:
        self.is_on = True
        logger.debug("Simulated display on")

    def off(self) -> None:
        self.is_on = False
        logger.debug("Simulated display off")
