"""
Driver circles and traced curves.

A curve collects one coloured point per frame. Its x coordinate comes from
the column driver above it, its y coordinate from the row driver to its
left; both are staged with set_x/set_y and committed with add().
"""

import math
from dataclasses import dataclass, field

from lissatable.color import WHITE, Color, blend


@dataclass(frozen=True)
class Circle:
    """A row or column driver circle."""

    x: float
    y: float
    d: float
    color: Color

    def marker(self, angle: float, harmonic: int) -> tuple[float, float]:
        """
        Position of the rotating marker on this circle.

        Args:
            angle: Global scene angle.
            harmonic: Frequency multiplier (axis index + 1).

        Returns:
            (x, y) of the marker. At angle 0 it sits at the bottom of the
            circle in screen space (y grows downwards).
        """
        phase = angle * harmonic + math.pi / 2
        return (
            self.x + self.d * math.cos(phase),
            self.y + self.d * math.sin(phase),
        )


@dataclass
class Vec2:
    x: float = 0.0
    y: float = 0.0


@dataclass
class ColoredPoint:
    """One vertex of a traced curve."""

    x: float
    y: float
    color: Color


@dataclass
class Curve:
    """A Lissajous curve represented as a sequence of points."""

    path: list[ColoredPoint] = field(default_factory=list)
    current: Vec2 = field(default_factory=Vec2)
    color_x: Color = WHITE
    color_y: Color = WHITE

    def reset(self):
        """Forget the traced path."""
        self.path.clear()

    def set_x(self, value: float, color: Color):
        """Stage the x value of the next point."""
        self.current.x = value
        self.color_x = color

    def set_y(self, value: float, color: Color):
        """Stage the y value of the next point."""
        self.current.y = value
        self.color_y = color

    def add(self) -> ColoredPoint:
        """Commit the staged coordinates as a new point."""
        point = ColoredPoint(
            self.current.x,
            self.current.y,
            blend(self.color_x, self.color_y),
        )
        self.path.append(point)
        return point

    def append_point(
        self, x: float, y: float, color_x: Color, color_y: Color
    ) -> ColoredPoint:
        """Stage both coordinates and commit them in one call."""
        self.set_x(x, color_x)
        self.set_y(y, color_y)
        return self.add()

    def __len__(self) -> int:
        return len(self.path)

    def show(self, canvas, line_width: float = 1.0, highlight_radius: float = 2.0):
        """Draw the curve as a closed polyline plus a dot on its newest point."""
        path = self.path
        if not path:
            return

        # Each segment takes the colour of the point it ends on.
        for p, q in zip(path, path[1:]):
            canvas.draw_line(p.x, p.y, q.x, q.y, line_width, q.color)

        if len(path) >= 2:
            first, last = path[0], path[-1]
            canvas.draw_line(last.x, last.y, first.x, first.y, line_width, first.color)

        head = path[-1]
        canvas.draw_circle(head.x, head.y, highlight_radius, WHITE)
