"""Simulation stepper: advances node positions once per frame.

Tick sequence:
1. Move alpha toward alpha_target by alpha_decay
2. Apply every force in the force set (writes velocities)
3. Integrate: pinned nodes jump to their pin with zero velocity, free nodes
   lose velocity_decay of their velocity and move by what is left
4. Notify tick listeners (positions are complete at this point)

The stepper requests one frame at a time from a FrameScheduler and goes idle
once alpha falls below alpha_min.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bubblegraph.engine.forces import BUBBLE_FORCES, ForceConfig, ForceSet
from bubblegraph.events import Signal

if TYPE_CHECKING:
    from bubblegraph.engine.scheduler import FrameScheduler
    from bubblegraph.model.node import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickEvent:
    """Emitted after each frame the stepper runs."""

    time: float  # Frame timestamp from the scheduler (seconds)
    tick: int  # Number of force ticks performed so far
    alpha: float
    ticked: bool  # False when a kept-alive loop ran without force work


class Simulation:
    """Owns a node set and steps it under a force set.

    Example:
        >>> sim = Simulation(nodes, forces, scheduler)
        >>> dispose = sim.on_tick.connect(render)
        >>> sim.start()
        >>> ...
        >>> sim.stop()
    """

    def __init__(
        self,
        nodes: Sequence[Node],
        forces: ForceSet,
        scheduler: FrameScheduler,
        config: ForceConfig = BUBBLE_FORCES,
        seed: int | None = None,
        keep_alive: bool = False,
    ) -> None:
        """Bind nodes and forces.

        Args:
            nodes: Nodes to simulate; the simulation owns them until stopped
            forces: Force set (initialized here against ``nodes``)
            scheduler: Frame queue driving the stepper
            config: Decay parameters
            seed: Seed for the jiggle applied to coincident nodes
            keep_alive: Keep requesting frames after cooling down, without
                doing force work, so per-frame effects keep animating
        """
        self.nodes: list[Node] = list(nodes)
        self.forces = forces
        self.scheduler = scheduler
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.alpha_min = config.alpha_min
        self.alpha_decay = config.alpha_decay
        self.velocity_decay = config.velocity_decay
        self.keep_alive = keep_alive
        self.tick_count = 0

        self.on_tick: Signal[TickEvent] = Signal("tick")
        self.on_end: Signal[Simulation] = Signal("end")

        self._rng = random.Random(seed)
        self._frame_handle: int | None = None
        self._cold = False
        self._epoch = 0

        self.forces.initialize(self.nodes, self._rng)

    @property
    def running(self) -> bool:
        """True while a frame is queued."""
        return self._frame_handle is not None

    @property
    def hot(self) -> bool:
        """True while ticks still do force work."""
        return not self._cold

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def tick(self, iterations: int = 1) -> float:
        """Run force ticks synchronously without notifying listeners.

        Returns:
            Largest per-node displacement during the last iteration.
        """
        if not self.nodes:
            return 0.0

        max_step = 0.0
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
            self.forces.apply(self.alpha)

            max_step = 0.0
            keep = 1.0 - self.velocity_decay
            for node in self.nodes:
                old_x, old_y = node.x, node.y
                if node.fx is None:
                    node.vx *= keep
                    node.x += node.vx
                else:
                    node.x = node.fx
                    node.vx = 0.0
                if node.fy is None:
                    node.vy *= keep
                    node.y += node.vy
                else:
                    node.y = node.fy
                    node.vy = 0.0
                max_step = max(max_step, math.hypot(node.x - old_x, node.y - old_y))
            self.tick_count += 1
        return max_step

    def start(self) -> None:
        """Begin stepping from full heat (alpha = 1)."""
        self.alpha = 1.0
        self.restart()

    def restart(self) -> None:
        """Resume stepping without touching alpha. No-op on an empty node set."""
        if not self.nodes:
            return
        self._cold = False
        if self._frame_handle is None:
            self._frame_handle = self.scheduler.request_frame(self._on_frame)
            logger.debug("Simulation resumed: alpha=%.3f nodes=%d", self.alpha, len(self.nodes))

    def stop(self) -> None:
        """Cancel the queued frame. Safe to call repeatedly or before start."""
        self._epoch += 1
        if self._frame_handle is not None:
            self.scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None
            logger.debug("Simulation stopped at tick %d", self.tick_count)

    def reheat(self, alpha: float = 0.3) -> None:
        """Set alpha directly and resume stepping."""
        self.alpha = alpha
        self.restart()

    def set_alpha_target(self, target: float) -> None:
        """Alpha converges to ``target`` instead of zero (used while dragging)."""
        self.alpha_target = max(0.0, target)

    def _on_frame(self, now: float) -> None:
        self._frame_handle = None
        epoch = self._epoch
        ticked = False
        if not self._cold:
            self.tick()
            ticked = True
            if self.alpha < self.alpha_min:
                self._cold = True

        self.on_tick.emit(TickEvent(time=now, tick=self.tick_count, alpha=self.alpha, ticked=ticked))
        if ticked and self._cold:
            logger.debug("Simulation settled after %d ticks", self.tick_count)
            self.on_end.emit(self)

        # A listener stopped or already restarted us
        if self._epoch != epoch or self._frame_handle is not None:
            return
        if self._cold and not self.keep_alive:
            return
        self._frame_handle = self.scheduler.request_frame(self._on_frame)
