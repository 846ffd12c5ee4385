"""Interaction controller: drag pinning, hover, and click-vs-drag selection.

Per-node state machine:

    FREE --pointer down--> DRAGGING --pointer up--> FREE

Pointer down pins the node where it is and (when no other drag is active)
raises the simulation's alpha target so the rest of the layout reacts.
Moves re-pin it to the pointer. Release unpins it and drops the alpha target
back to zero. A gesture whose pointer strays farther than ``click_distance``
from where it went down is a drag and never selects; anything else is a
click and selects exactly once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from bubblegraph.events import Signal

if TYPE_CHECKING:
    from bubblegraph.engine.simulation import Simulation
    from bubblegraph.model.node import Node

logger = logging.getLogger(__name__)

DEFAULT_CLICK_DISTANCE = 4.0
DRAG_ALPHA_TARGET = 0.3


class DragState(StrEnum):
    FREE = "free"
    DRAGGING = "dragging"


@dataclass
class _Gesture:
    node: Node
    start_x: float
    start_y: float
    dragged: bool = False


class InteractionController:
    """Translates pointer gestures into pins, reheats and selections."""

    def __init__(
        self,
        simulation: Simulation,
        click_distance: float = DEFAULT_CLICK_DISTANCE,
        drag_alpha_target: float = DRAG_ALPHA_TARGET,
    ) -> None:
        if click_distance < 0:
            raise ValueError("click_distance cannot be negative")
        self.simulation = simulation
        self.click_distance = click_distance
        self.drag_alpha_target = drag_alpha_target
        self.hovered: str | None = None
        self.on_select: Signal[Node] = Signal("select")
        self._gestures: dict[int, _Gesture] = {}

    def state(self, node_id: str) -> DragState:
        for gesture in self._gestures.values():
            if gesture.node.id == node_id:
                return DragState.DRAGGING
        return DragState.FREE

    def has_gesture(self, pointer_id: int = 0) -> bool:
        return pointer_id in self._gestures

    @property
    def dragging(self) -> list[str]:
        return [gesture.node.id for gesture in self._gestures.values()]

    def pointer_down(self, node_id: str, x: float, y: float, pointer_id: int = 0) -> bool:
        """Start a gesture on ``node_id``. Returns False for unknown nodes."""
        node = self.simulation.node(node_id)
        if node is None or pointer_id in self._gestures:
            return False
        if self.state(node_id) is DragState.DRAGGING:
            return False

        if not self._gestures:
            self.simulation.set_alpha_target(self.drag_alpha_target)
            self.simulation.restart()
        self._gestures[pointer_id] = _Gesture(node=node, start_x=x, start_y=y)
        node.pin(node.x, node.y)
        return True

    def pointer_move(self, x: float, y: float, pointer_id: int = 0) -> bool:
        """Re-pin the dragged node under the pointer."""
        gesture = self._gestures.get(pointer_id)
        if gesture is None:
            return False
        if not gesture.dragged and (
            math.hypot(x - gesture.start_x, y - gesture.start_y) > self.click_distance
        ):
            gesture.dragged = True
        gesture.node.pin(x, y)
        return True

    def pointer_up(self, x: float, y: float, pointer_id: int = 0) -> Node | None:
        """Finish a gesture.

        Returns:
            The selected node when the gesture was a click, else None.
        """
        gesture = self._gestures.pop(pointer_id, None)
        if gesture is None:
            return None
        if not gesture.dragged and (
            math.hypot(x - gesture.start_x, y - gesture.start_y) > self.click_distance
        ):
            gesture.dragged = True

        gesture.node.unpin()
        if not self._gestures:
            self.simulation.set_alpha_target(0.0)

        if gesture.dragged:
            return None
        logger.info("Node selected: %s", gesture.node.id)
        self.on_select.emit(gesture.node)
        return gesture.node

    def pointer_enter(self, node_id: str) -> bool:
        if self.simulation.node(node_id) is None:
            return False
        self.hovered = node_id
        return True

    def pointer_leave(self, node_id: str | None = None) -> bool:
        if node_id is not None and node_id != self.hovered:
            return False
        self.hovered = None
        return True

    def cancel(self) -> None:
        """Abort every gesture without selecting (used on teardown)."""
        for gesture in self._gestures.values():
            gesture.node.unpin()
        if self._gestures:
            self.simulation.set_alpha_target(0.0)
        self._gestures.clear()
        self.hovered = None
