"""Frame projector: simulation state to a renderable Frame.

Each Frame is a snapshot containing everything needed to draw one animation
frame. Projection clamps nodes into the viewport and layers the optional bob
on top; the simulated positions are read, never written.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bubblegraph.model.link import Link
    from bubblegraph.model.node import Node
    from bubblegraph.projection.ripple import Ripple
    from bubblegraph.projection.viewport import Bobbing, Viewport


@dataclass
class NodeVisual:
    """A node as drawn: a filled circle with a centred label."""

    id: str
    label: str

    # Rendered centre (clamped, bob applied)
    x: float
    y: float

    radius: float
    color: str
    category: str
    font_size: float

    # Knowledge-graph decorations; empty for plain bubbles
    ring_width: float = 0.0
    level_label: str = ""
    caption: str = ""

    # Interaction state
    hovered: bool = False
    dragging: bool = False


@dataclass
class LinkVisual:
    """A link drawn as a straight line between rendered node centres."""

    id: str
    source_id: str
    target_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    stroke_width: float
    link_type: str


@dataclass
class RippleVisual:
    x: float
    y: float
    radius: float
    opacity: float


@dataclass
class Frame:
    """A complete visual frame for rendering."""

    tick: int
    time: float
    alpha: float
    width: float
    height: float

    nodes: list[NodeVisual] = field(default_factory=list)
    links: list[LinkVisual] = field(default_factory=list)
    ripples: list[RippleVisual] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def node(self, node_id: str) -> NodeVisual | None:
        for visual in self.nodes:
            if visual.id == node_id:
                return visual
        return None


def render_position(
    node: Node, viewport: Viewport, elapsed: float, bobbing: Bobbing | None = None
) -> tuple[float, float]:
    """Rendered centre of ``node``: bob added to y, then clamped on both axes."""
    y = node.y
    if bobbing is not None:
        y += bobbing.offset(node.id, elapsed)
    return viewport.clamp(node.x, y, node.radius)


def _decorations(node: Node) -> tuple[float, str, str]:
    experience = node.data.get("experience_level")
    if experience is None:
        return 0.0, "", ""
    posts = int(node.data.get("blog_post_count", 0) or 0)
    caption = f"{posts} posts" if posts > 0 else ""
    return max(1.0, float(experience) / 2), f"L{experience}", caption


def project(
    nodes: Sequence[Node],
    links: Iterable[Link],
    viewport: Viewport,
    *,
    tick: int = 0,
    time: float = 0.0,
    elapsed: float = 0.0,
    alpha: float = 0.0,
    bobbing: Bobbing | None = None,
    hovered: str | None = None,
    dragging: Iterable[str] = (),
    ripples: Iterable[Ripple] = (),
) -> Frame:
    """Project simulation state into a Frame.

    Args:
        nodes: Simulated nodes (read only)
        links: Resolved links
        viewport: Current viewport
        tick: Simulation tick count
        time: Frame timestamp
        elapsed: Seconds since the layout mounted (drives the bob)
        alpha: Current simulation heat
        bobbing: Bob parameters, or None for no bob
        hovered: Id of the node under the pointer
        dragging: Ids of nodes currently pinned by a drag
        ripples: Cursor ripples to draw

    Returns:
        Frame with node, link and ripple visuals
    """
    dragging_ids = set(dragging)
    frame = Frame(
        tick=tick, time=time, alpha=alpha, width=viewport.width, height=viewport.height
    )

    positions: dict[str, tuple[float, float]] = {}
    for node in nodes:
        x, y = render_position(node, viewport, elapsed, bobbing)
        positions[node.id] = (x, y)
        ring_width, level_label, caption = _decorations(node)
        frame.nodes.append(
            NodeVisual(
                id=node.id,
                label=node.label,
                x=x,
                y=y,
                radius=node.radius,
                color=node.color,
                category=node.category.value,
                font_size=max(10.0, node.radius / 3),
                ring_width=ring_width,
                level_label=level_label,
                caption=caption,
                hovered=node.id == hovered,
                dragging=node.id in dragging_ids,
            )
        )

    for link in links:
        start = positions.get(link.source_id)
        end = positions.get(link.target_id)
        if start is None or end is None:
            continue
        frame.links.append(
            LinkVisual(
                id=link.id,
                source_id=link.source_id,
                target_id=link.target_id,
                x1=start[0],
                y1=start[1],
                x2=end[0],
                y2=end[1],
                stroke_width=link.stroke_width,
                link_type=link.link_type,
            )
        )

    for ripple in ripples:
        frame.ripples.append(
            RippleVisual(x=ripple.x, y=ripple.y, radius=ripple.radius, opacity=ripple.opacity)
        )

    return frame
