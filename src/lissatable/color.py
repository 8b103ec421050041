"""
RGBA colour value and blending.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Color:
    """RGBA colour with float channels in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        """Build a colour from 0-255 integer channels."""
        return cls(r / 255.0, g / 255.0, b / 255.0, a / 255.0)

    def with_alpha(self, alpha: float) -> "Color":
        return replace(self, a=alpha)

    def to_rgba8(self) -> tuple[int, int, int, int]:
        """Convert to the 0-255 integer tuple pygame expects."""
        return (
            _to_byte(self.r),
            _to_byte(self.g),
            _to_byte(self.b),
            _to_byte(self.a),
        )


def _to_byte(channel: float) -> int:
    return max(0, min(255, int(round(channel * 255.0))))


def blend(c1: Color, c2: Color) -> Color:
    """
    Mix two colours by averaging each channel.

    The result is always opaque.
    """
    r = round((c1.r + c2.r) / 2.0 * 255.0)
    g = round((c1.g + c2.g) / 2.0 * 255.0)
    b = round((c1.b + c2.b) / 2.0 * 255.0)
    return Color.from_rgba(r, g, b, 255)


WHITE = Color(1.0, 1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0, 1.0)
