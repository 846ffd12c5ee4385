"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from bubblegraph.engine.forces import BUBBLE_FORCES, ForceConfig, build_forces
from bubblegraph.engine.scheduler import ManualFrameScheduler
from bubblegraph.engine.simulation import Simulation
from bubblegraph.model.node import Node


def make_node(node_id: str, x: float = 0.0, y: float = 0.0, radius: float = 25.0) -> Node:
    """Create a test node at a position."""
    return Node(id=node_id, x=x, y=y, radius=radius)


def make_simulation(
    nodes: list[Node],
    scheduler: ManualFrameScheduler,
    config: ForceConfig = BUBBLE_FORCES,
    width: float = 800.0,
    height: float = 600.0,
    keep_alive: bool = False,
) -> Simulation:
    """Simulation over ``nodes`` with the standard force set for a viewport."""
    forces = build_forces(config, width, height)
    return Simulation(nodes, forces, scheduler, config=config, seed=7, keep_alive=keep_alive)


@pytest.fixture
def scheduler() -> ManualFrameScheduler:
    return ManualFrameScheduler()
