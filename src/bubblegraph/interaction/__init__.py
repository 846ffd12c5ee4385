"""Pointer interaction and viewport resize handling."""

from bubblegraph.interaction.controller import DragState, InteractionController
from bubblegraph.interaction.resize import ResizeAdapter, WindowSize

__all__ = [
    "DragState",
    "InteractionController",
    "ResizeAdapter",
    "WindowSize",
]
