"""Force model for the graph layout.

Provides five force contributors, each applied once per tick:
1. ManyBody - inverse-distance repulsion between every pair of nodes
2. Center - translates the node set so its centroid approaches a point
3. PositionX / PositionY - weak per-axis pull toward a target coordinate
4. LinkForce - spring toward a rest length that grows with link strength
5. Collide - pairwise minimum separation of radius + margin

Forces write into node velocities scaled by alpha (Center moves positions
directly and Collide ignores alpha). Integration lives in the simulation.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from bubblegraph.model.link import Link
    from bubblegraph.model.node import Node


@dataclass(frozen=True)
class ForceConfig:
    """Configuration for force and decay parameters."""

    # Repulsion
    charge_strength: float = -200.0  # Negative pushes apart
    distance_min: float = 1.0  # Floor on pair distance to avoid singularities

    # Centering
    center_strength: float = 0.05
    position_strength: float | None = 0.02  # None disables the x/y forces

    # Link attraction: rest length = base + strength * factor
    link_base_distance: float = 150.0
    link_distance_factor: float = 10.0

    # Collision avoidance
    collision_margin: float = 20.0
    collision_strength: float = 1.0

    # Decay policy
    alpha_decay: float = 0.01  # Fraction of the remaining gap to alpha_target closed per tick
    alpha_min: float = 0.001  # Stepper idles below this
    velocity_decay: float = 0.4  # Fraction of velocity lost per tick


# Landing page bubbles
BUBBLE_FORCES = ForceConfig()

# Knowledge graph on the software-engineering page
KNOWLEDGE_FORCES = ForceConfig(
    charge_strength=-300.0,
    center_strength=1.0,
    position_strength=None,
    alpha_decay=0.02,
)


class Force(Protocol):
    """A force contributor."""

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        """Bind the node set. Called whenever the node set changes."""
        ...

    def __call__(self, alpha: float) -> None:
        """Apply the force for one tick."""
        ...


def _jiggle(rng: random.Random) -> float:
    """Tiny non-zero offset used to separate coincident nodes."""
    return (rng.random() - 0.5) * 1e-6


class ManyBody:
    """Pairwise inverse-distance repulsion (attraction if strength > 0)."""

    def __init__(self, strength: float = -30.0, distance_min: float = 1.0) -> None:
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self._nodes: Sequence[Node] = ()
        self._rng = random.Random(0)

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self._nodes = nodes
        self._rng = rng

    def __call__(self, alpha: float) -> None:
        nodes = self._nodes
        for node in nodes:
            for other in nodes:
                if other is node:
                    continue
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0:
                    dx = _jiggle(self._rng)
                if dy == 0:
                    dy = _jiggle(self._rng)
                dist_sq = dx * dx + dy * dy
                if dist_sq < self.distance_min2:
                    dist_sq = math.sqrt(self.distance_min2 * dist_sq)
                weight = self.strength * alpha / dist_sq
                node.vx += dx * weight
                node.vy += dy * weight


class Center:
    """Shift all nodes so their centroid moves toward (x, y)."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        self.x = x
        self.y = y
        self.strength = strength
        self._nodes: Sequence[Node] = ()

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self._nodes = nodes

    def retarget(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def __call__(self, alpha: float) -> None:
        n = len(self._nodes)
        if n == 0:
            return
        sx = sum(node.x for node in self._nodes) / n
        sy = sum(node.y for node in self._nodes) / n
        shift_x = (sx - self.x) * self.strength
        shift_y = (sy - self.y) * self.strength
        for node in self._nodes:
            node.x -= shift_x
            node.y -= shift_y


class _Position:
    """Velocity pull toward ``target`` along one axis."""

    axis = "x"

    def __init__(self, target: float = 0.0, strength: float = 0.1) -> None:
        self.target = target
        self.strength = strength
        self._nodes: Sequence[Node] = ()

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self._nodes = nodes

    def retarget(self, target: float) -> None:
        self.target = target

    def __call__(self, alpha: float) -> None:
        k = self.strength * alpha
        if self.axis == "x":
            for node in self._nodes:
                node.vx += (self.target - node.x) * k
        else:
            for node in self._nodes:
                node.vy += (self.target - node.y) * k


class PositionX(_Position):
    axis = "x"


class PositionY(_Position):
    axis = "y"


class LinkForce:
    """Spring along each link toward its rest length.

    Per-link stiffness defaults to ``1 / min(degree(source), degree(target))``
    so hubs are not pulled apart by their many links; the correction is split
    between the endpoints in proportion to their degrees.
    """

    def __init__(
        self,
        links: Sequence[Link],
        distance: Callable[[Link], float],
        strength: Callable[[Link], float] | None = None,
    ) -> None:
        self.links = list(links)
        self.distance = distance
        self.strength = strength
        self._rng = random.Random(0)
        self._pairs: list[tuple[Node, Node, float, float, float]] = []

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self._rng = rng
        by_id = {node.id: node for node in nodes}
        degree: dict[str, int] = {}
        for link in self.links:
            degree[link.source_id] = degree.get(link.source_id, 0) + 1
            degree[link.target_id] = degree.get(link.target_id, 0) + 1

        self._pairs = []
        for link in self.links:
            source = by_id.get(link.source_id)
            target = by_id.get(link.target_id)
            if source is None or target is None:
                continue
            ds, dt = degree[link.source_id], degree[link.target_id]
            stiffness = self.strength(link) if self.strength else 1.0 / min(ds, dt)
            bias = ds / (ds + dt)
            self._pairs.append((source, target, self.distance(link), stiffness, bias))

    def __call__(self, alpha: float) -> None:
        for source, target, rest, stiffness, bias in self._pairs:
            dx = target.x + target.vx - source.x - source.vx
            dy = target.y + target.vy - source.y - source.vy
            if dx == 0:
                dx = _jiggle(self._rng)
            if dy == 0:
                dy = _jiggle(self._rng)
            length = math.sqrt(dx * dx + dy * dy)
            k = (length - rest) / length * alpha * stiffness
            dx *= k
            dy *= k
            target.vx -= dx * bias
            target.vy -= dy * bias
            source.vx += dx * (1 - bias)
            source.vy += dy * (1 - bias)


class Collide:
    """Push overlapping circles apart (radius + margin each)."""

    def __init__(self, margin: float = 0.0, strength: float = 1.0) -> None:
        self.margin = margin
        self.strength = strength
        self._nodes: Sequence[Node] = ()
        self._rng = random.Random(0)

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        self._nodes = nodes
        self._rng = rng

    def __call__(self, alpha: float) -> None:
        nodes = self._nodes
        for i, node in enumerate(nodes):
            ri = node.radius + self.margin
            ri2 = ri * ri
            xi = node.x + node.vx
            yi = node.y + node.vy
            for other in nodes[i + 1 :]:
                rj = other.radius + self.margin
                reach = ri + rj
                dx = xi - other.x - other.vx
                dy = yi - other.y - other.vy
                dist_sq = dx * dx + dy * dy
                if dist_sq >= reach * reach:
                    continue
                if dx == 0:
                    dx = _jiggle(self._rng)
                    dist_sq += dx * dx
                if dy == 0:
                    dy = _jiggle(self._rng)
                    dist_sq += dy * dy
                dist = math.sqrt(dist_sq)
                k = (reach - dist) / dist * self.strength
                dx *= k
                dy *= k
                rj2 = rj * rj
                share = rj2 / (ri2 + rj2) if ri2 + rj2 > 0 else 0.5
                node.vx += dx * share
                node.vy += dy * share
                other.vx -= dx * (1 - share)
                other.vy -= dy * (1 - share)


class ForceSet:
    """Named, ordered force contributors; applied in insertion order."""

    def __init__(self) -> None:
        self._forces: dict[str, Force] = {}

    def set(self, name: str, force: Force | None) -> None:
        """Add or replace a named force; ``None`` removes it."""
        if force is None:
            self._forces.pop(name, None)
        else:
            self._forces[name] = force

    def get(self, name: str) -> Force | None:
        return self._forces.get(name)

    def names(self) -> list[str]:
        return list(self._forces)

    def initialize(self, nodes: Sequence[Node], rng: random.Random) -> None:
        for force in self._forces.values():
            force.initialize(nodes, rng)

    def apply(self, alpha: float) -> None:
        for force in self._forces.values():
            force(alpha)

    def __iter__(self) -> Iterator[str]:
        return iter(self._forces)

    def __len__(self) -> int:
        return len(self._forces)


def build_forces(
    config: ForceConfig,
    width: float,
    height: float,
    links: Sequence[Link] = (),
) -> ForceSet:
    """Build the force set for a viewport.

    Args:
        config: Force parameters
        width: Viewport width in pixels
        height: Viewport height in pixels
        links: Already-resolved links (dangling ones removed)

    Returns:
        ForceSet ordered link, charge, center, collision, x, y
    """
    forces = ForceSet()
    if links:
        forces.set(
            "link",
            LinkForce(
                links,
                distance=lambda link: link.rest_length(
                    config.link_base_distance, config.link_distance_factor
                ),
            ),
        )
    forces.set("charge", ManyBody(config.charge_strength, config.distance_min))
    forces.set("center", Center(width / 2, height / 2, config.center_strength))
    forces.set("collision", Collide(config.collision_margin, config.collision_strength))
    if config.position_strength is not None:
        forces.set("x", PositionX(width / 2, config.position_strength))
        forces.set("y", PositionY(height / 2, config.position_strength))
    return forces


def retarget_forces(forces: ForceSet, width: float, height: float) -> None:
    """Point every viewport-dependent force at the centre of a new viewport."""
    center = forces.get("center")
    if isinstance(center, Center):
        center.retarget(width / 2, height / 2)
    force_x = forces.get("x")
    if isinstance(force_x, PositionX):
        force_x.retarget(width / 2)
    force_y = forces.get("y")
    if isinstance(force_y, PositionY):
        force_y.retarget(height / 2)
