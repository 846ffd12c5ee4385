"""Node dataclass: a labelled circle simulated as a point mass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from bubblegraph.model.category import Category


@dataclass(frozen=True)
class RadiusWeights:
    """Weights turning node attributes into a display radius."""

    base: float = 25.0
    experience: float = 8.0
    content: float = 3.0
    project: float = 2.0


DEFAULT_RADIUS_WEIGHTS = RadiusWeights()


def node_radius(
    experience_level: float = 0,
    content_count: int = 0,
    project_count: int = 0,
    weights: RadiusWeights = DEFAULT_RADIUS_WEIGHTS,
) -> float:
    """Radius grows with each attribute and never drops below ``weights.base``."""
    size = (
        weights.base
        + experience_level * weights.experience
        + content_count * weights.content
        + project_count * weights.project
    )
    return max(weights.base, size)


@dataclass
class Node:
    """A simulated node.

    ``x``/``y`` and ``vx``/``vy`` are owned by the simulation. ``fx``/``fy``
    is the pin: while set, the simulation places the node there instead of
    integrating its velocity.
    """

    # Identity (doubles as label and selection key)
    id: str
    radius: float = 25.0
    category: Category = Category.DEFAULT
    label: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    # Physical state
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Node id cannot be empty")
        if self.radius < 0:
            raise ValueError(f"Node radius must be non-negative, got {self.radius}")
        self.category = Category.parse(self.category)
        if not self.label:
            self.label = self.id

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None

    def pin(self, x: float, y: float) -> None:
        self.fx = x
        self.fy = y

    def unpin(self) -> None:
        self.fx = None
        self.fy = None

    @property
    def color(self) -> str:
        return self.category.color
