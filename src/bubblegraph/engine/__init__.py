"""Layout engine: force model, simulation stepper, frame scheduling."""

from bubblegraph.engine.forces import (
    BUBBLE_FORCES,
    KNOWLEDGE_FORCES,
    Center,
    Collide,
    ForceConfig,
    ForceSet,
    LinkForce,
    ManyBody,
    PositionX,
    PositionY,
    build_forces,
    retarget_forces,
)
from bubblegraph.engine.scheduler import (
    AsyncioFrameScheduler,
    FrameScheduler,
    ManualFrameScheduler,
)
from bubblegraph.engine.simulation import Simulation, TickEvent

__all__ = [
    "BUBBLE_FORCES",
    "KNOWLEDGE_FORCES",
    "AsyncioFrameScheduler",
    "Center",
    "Collide",
    "ForceConfig",
    "ForceSet",
    "FrameScheduler",
    "LinkForce",
    "ManualFrameScheduler",
    "ManyBody",
    "PositionX",
    "PositionY",
    "Simulation",
    "TickEvent",
    "build_forces",
    "retarget_forces",
]
