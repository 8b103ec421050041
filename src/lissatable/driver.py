"""
Frame loop driver.

Each iteration clears the host, renders the scene, presents, advances the
angle, optionally waits out the rest of the frame budget, and rebuilds the
scene when the viewport size has changed.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from lissatable.scene import Scene, SceneConfig

logger = logging.getLogger(__name__)


@dataclass
class LoopConfig:
    """Configuration for the frame loop."""

    target_fps: float | None = None  # None = uncapped
    initial_size: tuple[int, int] = (700, 700)
    title: str = "Lissajous Curve Table"
    scene: SceneConfig = field(default_factory=SceneConfig)


class FramePacer:
    """
    Holds each frame to a fixed duration using a monotonic deadline.

    The wait is an Event wait so stop() (from a signal handler or another
    thread) cuts it short.
    """

    def __init__(
        self,
        target_fps: float | None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.frame_duration = 1.0 / target_fps if target_fps else None
        self.clock = clock
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self):
        self._stop.set()

    def wait(self, frame_start: float) -> float:
        """
        Block until ``frame_start + frame_duration``.

        Returns:
            Seconds waited (0.0 when uncapped, late, or stopped).
        """
        if self.frame_duration is None or self._stop.is_set():
            return 0.0

        remaining = frame_start + self.frame_duration - self.clock()
        # Millisecond resolution is plenty for visual pacing
        remaining = round(remaining, 3)
        if remaining <= 0:
            return 0.0

        self._stop.wait(remaining)
        return remaining


class FrameLoop:
    """
    Drives a Scene on a host until the host closes or stop() is called.

    Args:
        host: Graphics host (see lissatable.host.Host).
        config: Loop configuration. Uses defaults if None.
        pacer: Optional pre-built pacer, mainly for tests.
    """

    def __init__(
        self,
        host,
        config: LoopConfig | None = None,
        pacer: FramePacer | None = None,
    ):
        self.host = host
        self.cfg = config or LoopConfig()
        self.pacer = pacer or FramePacer(self.cfg.target_fps)
        self.frame_count = 0
        self.scene = self._build_scene()

    def _viewport(self) -> tuple[float, float]:
        return (self.host.screen_width(), self.host.screen_height())

    def _build_scene(self) -> Scene:
        width, height = self._viewport()
        scene = Scene(width, height, self.cfg.scene)
        rows, cols = scene.grid_dims
        logger.info("Built %dx%d curve table for %gx%g viewport", rows, cols, width, height)
        return scene

    def stop(self):
        """Ask the loop to finish after the current frame."""
        self.pacer.stop()

    @property
    def running(self) -> bool:
        return not self.pacer.stopped

    def step(self) -> bool:
        """
        Run one frame.

        Returns:
            False once the host reports it is closing.
        """
        start = self.pacer.clock()

        self.host.clear_background(self.cfg.scene.background_color)
        self.scene.show(self.host)
        alive = self.host.next_frame()
        self.scene.update()
        self.frame_count += 1

        self.pacer.wait(start)

        if self._viewport() != self.scene.size:
            logger.info("Viewport resized, rebuilding scene")
            self.scene = self._build_scene()

        return alive

    def run(self, max_frames: int | None = None) -> int:
        """
        Loop until the host closes, stop() is called, or ``max_frames``
        frames have been drawn.

        Returns:
            Number of frames drawn.
        """
        logger.info(
            "Starting frame loop (target fps: %s)",
            self.cfg.target_fps if self.cfg.target_fps else "uncapped",
        )
        drawn = 0
        try:
            while self.running:
                if max_frames is not None and drawn >= max_frames:
                    break
                alive = self.step()
                drawn += 1
                if not alive:
                    break
        except KeyboardInterrupt:
            logger.info("Interrupted")
        logger.info("Frame loop stopped after %d frames", drawn)
        return drawn
