"""Frame projection: simulated nodes to clamped, bobbing render snapshots."""

from bubblegraph.projection.projector import (
    Frame,
    LinkVisual,
    NodeVisual,
    RippleVisual,
    project,
    render_position,
)
from bubblegraph.projection.ripple import Ripple, RippleField
from bubblegraph.projection.viewport import Bobbing, Viewport, clamp_axis

__all__ = [
    "Bobbing",
    "Frame",
    "LinkVisual",
    "NodeVisual",
    "Ripple",
    "RippleField",
    "RippleVisual",
    "Viewport",
    "clamp_axis",
    "project",
    "render_position",
]
