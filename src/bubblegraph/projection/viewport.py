"""Viewport clamp and idle bobbing.

Both operate on rendered coordinates only; nothing here writes back into a
node's simulated position.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    """Drawable area in pixels."""

    width: float
    height: float
    padding: float = 10.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must be positive, got {self.width}x{self.height}")
        if self.padding < 0:
            raise ValueError("Viewport padding cannot be negative")

    @classmethod
    def from_window(
        cls, width: float, height: float, header_offset: float = 0.0, padding: float = 10.0
    ) -> Viewport:
        """Viewport below a fixed header of ``header_offset`` pixels."""
        return cls(width=width, height=max(1.0, height - header_offset), padding=padding)

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    def clamp(self, x: float, y: float, radius: float) -> tuple[float, float]:
        """Keep a circle of ``radius`` fully inside the padded viewport."""
        return (
            clamp_axis(x, radius, self.width, self.padding),
            clamp_axis(y, radius, self.height, self.padding),
        )


def clamp_axis(value: float, radius: float, extent: float, padding: float) -> float:
    """Clamp into ``[radius + padding, extent - radius - padding]``.

    When the circle cannot fit (the range is empty) the result is the midpoint
    of the axis.
    """
    low = radius + padding
    high = extent - radius - padding
    if low > high:
        return extent / 2
    return min(high, max(low, value))


@dataclass(frozen=True)
class Bobbing:
    """Idle vertical oscillation: amplitude * sin(t * speed + phase)."""

    amplitude: float = 2.0  # Pixels
    speed: float = 2.0  # Radians per second
    phase_scale: float = 0.1  # Phase per unit of the identity's first code point

    def phase(self, identity: str) -> float:
        """Phase offset derived from the identity's first character."""
        if not identity:
            return 0.0
        return ord(identity[0]) * self.phase_scale

    def offset(self, identity: str, elapsed: float) -> float:
        return self.amplitude * math.sin(elapsed * self.speed + self.phase(identity))
