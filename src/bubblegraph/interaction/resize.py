"""Resize adapter: follow viewport changes and let the layout re-settle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bubblegraph.engine.forces import retarget_forces
from bubblegraph.events import Disposer, Signal
from bubblegraph.projection.viewport import Viewport

if TYPE_CHECKING:
    from bubblegraph.engine.simulation import Simulation

logger = logging.getLogger(__name__)

RESIZE_REHEAT_ALPHA = 0.3


@dataclass(frozen=True)
class WindowSize:
    """Host window dimensions in pixels."""

    width: float
    height: float


class ResizeAdapter:
    """Recompute the viewport and viewport-dependent forces on resize."""

    def __init__(
        self,
        simulation: Simulation,
        viewport: Viewport,
        header_offset: float = 0.0,
        reheat_alpha: float = RESIZE_REHEAT_ALPHA,
    ) -> None:
        self.simulation = simulation
        self.viewport = viewport
        self.header_offset = header_offset
        self.reheat_alpha = reheat_alpha
        self.on_viewport: Signal[Viewport] = Signal("viewport")

    def attach(self, window_resized: Signal[WindowSize]) -> Disposer:
        """Listen to a host resize signal; returns the disposer."""
        return window_resized.connect(lambda size: self.resize(size.width, size.height))

    def resize(self, width: float, height: float) -> Viewport:
        """Apply a new window size: retarget forces, reheat, notify."""
        viewport = Viewport.from_window(
            width, height, header_offset=self.header_offset, padding=self.viewport.padding
        )
        self.viewport = viewport
        retarget_forces(self.simulation.forces, viewport.width, viewport.height)
        self.simulation.reheat(self.reheat_alpha)
        logger.debug("Viewport resized to %.0fx%.0f", viewport.width, viewport.height)
        self.on_viewport.emit(viewport)
        return viewport
