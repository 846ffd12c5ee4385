"""Graph layout: one mounted simulation with its interaction and resize wiring.

A GraphLayout is the unit a host owns. ``mount()`` builds a fresh simulation
for a node/link set, ``unmount()`` tears everything down (frame loop, listener
registrations, pins). Mounting again with new data always unmounts first, so
at most one frame loop per layout is ever alive.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from bubblegraph.engine.forces import BUBBLE_FORCES, KNOWLEDGE_FORCES, ForceConfig, build_forces
from bubblegraph.engine.simulation import Simulation, TickEvent
from bubblegraph.events import Signal, Subscriptions
from bubblegraph.interaction.controller import DEFAULT_CLICK_DISTANCE, InteractionController
from bubblegraph.interaction.resize import ResizeAdapter, WindowSize
from bubblegraph.model.destination import resolve_destination
from bubblegraph.model.link import Link, resolve_links
from bubblegraph.projection.projector import Frame, project
from bubblegraph.projection.ripple import RippleField
from bubblegraph.projection.viewport import Bobbing, Viewport

if TYPE_CHECKING:
    from bubblegraph.engine.scheduler import FrameScheduler
    from bubblegraph.model.node import Node

logger = logging.getLogger(__name__)


class Placement(StrEnum):
    RING = "ring"  # Evenly spaced on a circle around the centre
    RANDOM = "random"  # Uniform over the viewport


class PointerKind(StrEnum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    ENTER = "enter"
    LEAVE = "leave"


@dataclass(frozen=True)
class LayoutPreset:
    """Everything that differs between the two layouts the site uses."""

    name: str
    forces: ForceConfig
    bobbing: Bobbing | None = None
    header_offset: float = 0.0
    placement: Placement = Placement.RING
    ring_fraction: float = 0.3  # Ring radius as a fraction of min(width, height)
    ripples: bool = False


BUBBLE_PRESET = LayoutPreset(
    name="bubbles",
    forces=BUBBLE_FORCES,
    bobbing=Bobbing(),
    placement=Placement.RING,
    ripples=True,
)

KNOWLEDGE_PRESET = LayoutPreset(
    name="knowledge",
    forces=KNOWLEDGE_FORCES,
    header_offset=100.0,
    placement=Placement.RANDOM,
)


@dataclass(frozen=True)
class Selection:
    """A confirmed click on a node."""

    node_id: str
    destination: str
    node: Node


@dataclass(frozen=True)
class PointerOutcome:
    handled: bool
    selection: Selection | None = None


class GraphLayout:
    """Force-directed layout bound to a frame scheduler and a viewport."""

    def __init__(
        self,
        scheduler: FrameScheduler,
        window: WindowSize,
        preset: LayoutPreset = BUBBLE_PRESET,
        padding: float = 10.0,
        click_distance: float = DEFAULT_CLICK_DISTANCE,
        seed: int | None = None,
        window_resized: Signal[WindowSize] | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.preset = preset
        self.padding = padding
        self.click_distance = click_distance
        self.seed = seed
        self.window = window
        self.window_resized = window_resized

        self.on_frame: Signal[Frame] = Signal("frame")
        self.on_select: Signal[Selection] = Signal("select")

        self.viewport = Viewport.from_window(
            window.width, window.height, header_offset=preset.header_offset, padding=padding
        )
        self.latest_frame: Frame | None = None
        self.links: list[Link] = []

        self.simulation: Simulation | None = None
        self.controller: InteractionController | None = None
        self.resizer: ResizeAdapter | None = None
        self.ripples: RippleField | None = (
            RippleField(rng=random.Random(seed)) if preset.ripples else None
        )

        self._subscriptions = Subscriptions()
        self._started_at: float | None = None
        self._elapsed = 0.0
        self._last_selection: Selection | None = None

    @property
    def mounted(self) -> bool:
        return self.simulation is not None

    @property
    def nodes(self) -> list[Node]:
        return self.simulation.nodes if self.simulation else []

    def mount(self, nodes: Sequence[Node], links: Sequence[Link] = ()) -> None:
        """Build and start a simulation for ``nodes``/``links``.

        Links whose endpoints are missing are dropped. Any previous
        simulation is torn down first.
        """
        if self.mounted:
            self.unmount()

        rng = random.Random(self.seed)
        node_list = list(nodes)
        self._place(node_list, rng)
        self.links = resolve_links(links, (node.id for node in node_list))

        forces = build_forces(
            self.preset.forces, self.viewport.width, self.viewport.height, self.links
        )
        simulation = Simulation(
            node_list,
            forces,
            self.scheduler,
            config=self.preset.forces,
            seed=self.seed,
            keep_alive=self.preset.bobbing is not None,
        )
        controller = InteractionController(simulation, click_distance=self.click_distance)
        resizer = ResizeAdapter(simulation, self.viewport, header_offset=self.preset.header_offset)

        self.simulation = simulation
        self.controller = controller
        self.resizer = resizer
        self._started_at = None
        self._elapsed = 0.0
        self.latest_frame = None

        subs = self._subscriptions
        subs.add(simulation.on_tick.connect(self._render))
        subs.add(controller.on_select.connect(self._selected))
        subs.add(resizer.on_viewport.connect(self._viewport_changed))
        if self.window_resized is not None:
            subs.add(resizer.attach(self.window_resized))
        subs.add(controller.cancel)
        subs.add(simulation.stop)

        simulation.start()
        logger.info(
            "Mounted %s layout: nodes=%d links=%d",
            self.preset.name,
            len(node_list),
            len(self.links),
        )

    def unmount(self) -> None:
        """Stop the frame loop and release every registration. Idempotent."""
        self._subscriptions.dispose()
        if self.ripples is not None:
            self.ripples.clear()
        if self.simulation is not None:
            logger.info("Unmounted %s layout", self.preset.name)
        self.simulation = None
        self.controller = None
        self.resizer = None

    def remount(self, nodes: Sequence[Node], links: Sequence[Link] = ()) -> None:
        """Rebuild from scratch after the input set changed."""
        self.mount(nodes, links)

    def resize(self, width: float, height: float) -> Viewport:
        """Apply a window resize directly (hosts without a resize signal)."""
        self.window = WindowSize(width, height)
        if self.resizer is None:
            self.viewport = Viewport.from_window(
                width, height, header_offset=self.preset.header_offset, padding=self.padding
            )
            return self.viewport
        return self.resizer.resize(width, height)

    def pointer(
        self,
        kind: PointerKind | str,
        x: float = 0.0,
        y: float = 0.0,
        node_id: str | None = None,
        pointer_id: int = 0,
    ) -> PointerOutcome:
        """Dispatch one pointer event to the interaction controller."""
        kind = PointerKind(kind)
        controller = self.controller
        if controller is None:
            return PointerOutcome(handled=False)

        match kind:
            case PointerKind.DOWN:
                if node_id is None:
                    return PointerOutcome(handled=False)
                return PointerOutcome(controller.pointer_down(node_id, x, y, pointer_id))
            case PointerKind.MOVE:
                if self.ripples is not None:
                    self.ripples.spawn(x, y)
                return PointerOutcome(controller.pointer_move(x, y, pointer_id))
            case PointerKind.UP:
                active = controller.has_gesture(pointer_id)
                self._last_selection = None
                controller.pointer_up(x, y, pointer_id)
                return PointerOutcome(handled=active, selection=self._last_selection)
            case PointerKind.ENTER:
                if node_id is None:
                    return PointerOutcome(handled=False)
                return PointerOutcome(controller.pointer_enter(node_id))
            case PointerKind.LEAVE:
                return PointerOutcome(controller.pointer_leave(node_id))

    def snapshot(self) -> Frame:
        """Project the current state without advancing anything."""
        if self.simulation is None:
            return self._empty_frame()
        last = self.latest_frame
        return self._project(time=last.time if last else 0.0, elapsed=self._elapsed)

    def _place(self, nodes: list[Node], rng: random.Random) -> None:
        width, height = self.viewport.width, self.viewport.height
        count = len(nodes)
        for i, node in enumerate(nodes):
            if self.preset.placement is Placement.RING:
                angle = i / count * 2 * math.pi
                ring = min(width, height) * self.preset.ring_fraction
                node.x = width / 2 + ring * math.cos(angle)
                node.y = height / 2 + ring * math.sin(angle)
            else:
                node.x = rng.random() * width
                node.y = rng.random() * height
            node.vx = node.vy = 0.0
            node.unpin()

    def _empty_frame(self) -> Frame:
        return Frame(
            tick=0, time=0.0, alpha=0.0, width=self.viewport.width, height=self.viewport.height
        )

    def _project(self, time: float, elapsed: float) -> Frame:
        simulation = self.simulation
        controller = self.controller
        if simulation is None or controller is None:
            return self._empty_frame()
        return project(
            simulation.nodes,
            self.links,
            self.viewport,
            tick=simulation.tick_count,
            time=time,
            elapsed=elapsed,
            alpha=simulation.alpha,
            bobbing=self.preset.bobbing,
            hovered=controller.hovered,
            dragging=controller.dragging,
            ripples=self.ripples.ripples if self.ripples is not None else (),
        )

    def _render(self, event: TickEvent) -> None:
        if self._started_at is None:
            self._started_at = event.time
        if self.ripples is not None:
            self.ripples.advance()
        self._elapsed = event.time - self._started_at
        frame = self._project(time=event.time, elapsed=self._elapsed)
        self.latest_frame = frame
        self.on_frame.emit(frame)

    def _selected(self, node: Node) -> None:
        selection = Selection(node_id=node.id, destination=resolve_destination(node.id), node=node)
        self._last_selection = selection
        self.on_select.emit(selection)

    def _viewport_changed(self, viewport: Viewport) -> None:
        self.viewport = viewport
