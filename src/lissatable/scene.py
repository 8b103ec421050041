"""
Scene model for the Lissajous curve table.

Owns the driver circles, the grid of curves and the global angle.
show() samples every driver and draws a frame; update() advances the angle
and clears all curves once per revolution.
"""

import logging
import math
from dataclasses import dataclass

from lissatable.color import BLACK, WHITE, Color
from lissatable.curve import Circle, Curve

logger = logging.getLogger(__name__)

TAU = 2 * math.pi


@dataclass
class SceneConfig:
    """Configuration for scene layout and drawing."""

    cell_size: float = 80.0
    angle_step: float = math.pi / 400  # Radians per frame
    circle_inset: float = 10.0  # Driver radius = cell_size / 2 - inset
    marker_radius: float = 3.0
    highlight_radius: float = 2.0
    line_width: float = 1.0
    guide_alpha: float = 0.2
    background_color: Color = BLACK

    @property
    def frames_per_revolution(self) -> int:
        return int(round(TAU / self.angle_step))


def grid_size(width: float, height: float, cell_size: float = 80.0) -> int:
    """
    Number of rows (and columns) that fit the viewport.

    One cell per axis is taken by the driver circles, and the grid is
    forced square. Viewports smaller than two cells give 0.
    """
    cols = math.floor(width / cell_size) - 1
    rows = math.floor(height / cell_size) - 1
    return max(0, min(cols, rows))


class Scene:
    """
    A square table of Lissajous curves and the circles that drive them.

    Column i feeds the x coordinate of every curve in column i using
    harmonic i + 1; row j feeds the y coordinate of every curve in row j
    using harmonic j + 1.
    """

    def __init__(
        self,
        width: float,
        height: float,
        config: SceneConfig | None = None,
    ):
        self.cfg = config or SceneConfig()
        self.size = (width, height)
        self.angle = 0.0

        w = self.cfg.cell_size
        n = grid_size(width, height, w)
        d = w / 2 - self.cfg.circle_inset

        self.cols: list[Circle] = []
        for i in range(n):
            color = Color.from_rgba(int(i / n * 255), 255, 0, 255)
            self.cols.append(Circle((i + 1.5) * w, w / 2, d, color))

        self.rows: list[Circle] = []
        for j in range(n):
            # Same denominator as the columns; the grid is square.
            color = Color.from_rgba(255, 0, int(j / n * 255), 255)
            self.rows.append(Circle(w / 2, (j + 1.5) * w, d, color))

        self.curves: list[list[Curve]] = [
            [Curve() for _ in range(n)] for _ in range(n)
        ]

        logger.debug("Laid out %dx%d grid for %gx%g viewport", n, n, width, height)

    @property
    def grid_dims(self) -> tuple[int, int]:
        """(rows, cols) of the curve grid."""
        return (len(self.rows), len(self.cols))

    def iter_curves(self):
        for row in self.curves:
            yield from row

    def column_markers(self) -> list[tuple[float, float]]:
        return [c.marker(self.angle, i + 1) for i, c in enumerate(self.cols)]

    def row_markers(self) -> list[tuple[float, float]]:
        return [c.marker(self.angle, j + 1) for j, c in enumerate(self.rows)]

    def show(self, canvas):
        """
        Sample the drivers, extend every curve by one point, and draw.

        All column markers are applied before any row marker, and curves
        are only committed after both passes.

        Args:
            canvas: Anything exposing the host drawing primitives.
        """
        cfg = self.cfg
        guide = WHITE.with_alpha(cfg.guide_alpha)
        screen_w = canvas.screen_width()
        screen_h = canvas.screen_height()

        for i, (circle, (x, y)) in enumerate(zip(self.cols, self.column_markers())):
            canvas.draw_circle_lines(circle.x, circle.y, circle.d, cfg.line_width, circle.color)
            canvas.draw_circle(x, y, cfg.marker_radius, WHITE)
            canvas.draw_line(x, 0.0, x, screen_h, cfg.line_width, guide)

            # x-setter gets the row's colour, y-setter the column's
            for j, row_circle in enumerate(self.rows):
                self.curves[j][i].set_x(x, row_circle.color)

        for j, (circle, (x, y)) in enumerate(zip(self.rows, self.row_markers())):
            canvas.draw_circle_lines(circle.x, circle.y, circle.d, cfg.line_width, circle.color)
            canvas.draw_circle(x, y, cfg.marker_radius, WHITE)
            canvas.draw_line(0.0, y, screen_w, y, cfg.line_width, guide)

            for i, col_circle in enumerate(self.cols):
                self.curves[j][i].set_y(y, col_circle.color)

        for curve in self.iter_curves():
            curve.add()
            curve.show(canvas, cfg.line_width, cfg.highlight_radius)

    def update(self) -> bool:
        """
        Advance the angle by one step.

        Returns:
            True if a revolution completed and every curve was cleared.
        """
        self.angle -= self.cfg.angle_step

        # isclose: 800 float steps of pi/400 land within rounding of -2pi
        if self.angle < -TAU or math.isclose(self.angle, -TAU):
            self.reset()
            logger.debug("Revolution complete, angle reset")
            self.angle = 0.0
            return True
        return False

    def reset(self):
        """Clear every curve's path."""
        for curve in self.iter_curves():
            curve.reset()
