"""
Lissajous curve table.

A square grid of driver circles whose rotating markers trace a table of
Lissajous figures, redrawn every frame.
"""

from lissatable.color import BLACK, WHITE, Color, blend
from lissatable.curve import Circle, ColoredPoint, Curve
from lissatable.driver import FrameLoop, FramePacer, LoopConfig
from lissatable.scene import Scene, SceneConfig, grid_size

__version__ = "0.1.0"
