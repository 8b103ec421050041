"""
Graphics hosts backed by pygame.

The scene only needs a handful of immediate-mode primitives (circles,
outlined circles, lines with alpha) plus the viewport size. The frame loop
additionally needs clear/present. Two hosts provide them:

- PygameHost: a resizable desktop window.
- OffscreenHost: an in-memory surface whose frames are captured as numpy
  arrays, for video/PNG export and tests.
"""

import logging
import math
from typing import Callable, Protocol

import numpy as np
import pygame

from lissatable.color import Color

logger = logging.getLogger(__name__)

FrameSink = Callable[[np.ndarray], None]


class Canvas(Protocol):
    """Drawing primitives the scene renders through."""

    def screen_width(self) -> float: ...

    def screen_height(self) -> float: ...

    def draw_circle(self, x: float, y: float, radius: float, color: Color): ...

    def draw_circle_lines(
        self, x: float, y: float, radius: float, line_width: float, color: Color
    ): ...

    def draw_line(
        self, x0: float, y0: float, x1: float, y1: float, width: float, color: Color
    ): ...


class Host(Canvas, Protocol):
    """A canvas the frame loop can clear and present."""

    def clear_background(self, color: Color): ...

    def next_frame(self) -> bool:
        """Present the frame. Returns False once the host is shutting down."""
        ...


def surface_to_array(surface: pygame.Surface) -> np.ndarray:
    """Convert pygame surface to an (H, W, 3) uint8 array."""
    # pygame uses (width, height) but numpy expects (height, width)
    arr = pygame.surfarray.array3d(surface)
    return np.ascontiguousarray(np.transpose(arr, (1, 0, 2)))


def _pixel_width(width: float) -> int:
    return max(1, int(round(width)))


class PygameCanvas:
    """Implements the drawing primitives on a pygame Surface."""

    def __init__(self, surface: pygame.Surface):
        self.surface = surface

    def screen_width(self) -> float:
        return float(self.surface.get_width())

    def screen_height(self) -> float:
        return float(self.surface.get_height())

    def clear_background(self, color: Color):
        self.surface.fill(color.to_rgba8()[:3])

    def draw_circle(self, x: float, y: float, radius: float, color: Color):
        self._draw(
            lambda surf, ox, oy: pygame.draw.circle(surf, color.to_rgba8(), (x - ox, y - oy), radius),
            color,
            (x - radius, y - radius, x + radius, y + radius),
        )

    def draw_circle_lines(
        self, x: float, y: float, radius: float, line_width: float, color: Color
    ):
        width = _pixel_width(line_width)
        self._draw(
            lambda surf, ox, oy: pygame.draw.circle(
                surf, color.to_rgba8(), (x - ox, y - oy), radius, width
            ),
            color,
            (x - radius, y - radius, x + radius, y + radius),
        )

    def draw_line(
        self, x0: float, y0: float, x1: float, y1: float, width: float, color: Color
    ):
        px = _pixel_width(width)
        self._draw(
            lambda surf, ox, oy: pygame.draw.line(
                surf, color.to_rgba8(), (x0 - ox, y0 - oy), (x1 - ox, y1 - oy), px
            ),
            color,
            (min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)),
            pad=px,
        )

    def _draw(
        self,
        draw_fn: Callable[[pygame.Surface, float, float], object],
        color: Color,
        bounds: tuple[float, float, float, float],
        pad: int = 1,
    ):
        """
        Run a pygame draw call, compositing through a scratch surface when
        the colour is translucent.

        pygame.draw writes alpha straight into the target instead of
        blending, so translucent shapes go onto a SRCALPHA surface covering
        their bounding box which is then blitted.
        """
        if color.to_rgba8()[3] >= 255:
            draw_fn(self.surface, 0.0, 0.0)
            return

        left = math.floor(bounds[0]) - pad
        top = math.floor(bounds[1]) - pad
        right = math.ceil(bounds[2]) + pad
        bottom = math.ceil(bounds[3]) + pad
        scratch = pygame.Surface((max(1, right - left), max(1, bottom - top)), pygame.SRCALPHA)
        draw_fn(scratch, left, top)
        self.surface.blit(scratch, (left, top))


class PygameHost(PygameCanvas):
    """A resizable pygame window."""

    def __init__(
        self,
        size: tuple[int, int] = (700, 700),
        title: str = "Lissajous Curve Table",
    ):
        pygame.init()
        pygame.display.set_caption(title)
        super().__init__(pygame.display.set_mode(size, pygame.RESIZABLE))
        self._closed = False
        logger.info("Opened %dx%d window", *self.surface.get_size())

    def request_screen_size(self, width: int, height: int):
        self.surface = pygame.display.set_mode((width, height), pygame.RESIZABLE)

    def next_frame(self) -> bool:
        pygame.display.flip()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._closed = True
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self._closed = True
            elif event.type == pygame.VIDEORESIZE:
                # pygame 2 resizes the display surface itself; re-fetch it
                self.surface = pygame.display.get_surface()

        return not self._closed

    def close(self):
        pygame.quit()


class OffscreenHost(PygameCanvas):
    """
    Renders into an in-memory surface.

    Each presented frame is captured as an (H, W, 3) uint8 array and passed
    to ``sink`` when one is given; the latest capture is kept on
    ``last_frame``.
    """

    def __init__(self, width: int, height: int, sink: FrameSink | None = None):
        super().__init__(pygame.Surface((width, height)))
        self.sink = sink
        self.last_frame: np.ndarray | None = None
        self.frames_presented = 0
        self._closed = False

    def request_screen_size(self, width: int, height: int):
        self.resize(width, height)

    def resize(self, width: int, height: int):
        """Swap in a surface of a new size."""
        self.surface = pygame.Surface((width, height))

    def next_frame(self) -> bool:
        self.last_frame = surface_to_array(self.surface)
        self.frames_presented += 1
        if self.sink is not None:
            self.sink(self.last_frame)
        return not self._closed

    def close(self):
        self._closed = True
