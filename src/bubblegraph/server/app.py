"""FastAPI server with REST API and WebSocket frame streaming.

Provides:
- REST /api/layouts: list layouts, read the latest frame, resize, pointer events
- WebSocket /ws/layouts/{name}: Stream Frame objects at ~30 FPS
- WebSocket /ws/layouts/{name}/control: Pointer and resize commands as JSON
- Content and auth routers under /api/v1
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, Field, ValidationError

from bubblegraph.api.auth import router as auth_router
from bubblegraph.api.content import router as content_router
from bubblegraph.config import get_layout_settings
from bubblegraph.corpora.landing import seed_demo_content
from bubblegraph.layout import GraphLayout, PointerKind, PointerOutcome
from bubblegraph.logging_config import layout_context
from bubblegraph.server.state import (
    UnknownLayoutError,
    get_content_store,
    get_layout_host,
    get_session_provider,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: mount layouts, open and close the session gate."""
    settings = get_layout_settings()
    sessions = get_session_provider()
    sessions.init()

    store = get_content_store()
    if settings.demo_content and not store.list_nodes(include_inactive=True):
        created = seed_demo_content(store)
        logger.info("Loaded demo content: %d knowledge nodes", created)

    host = get_layout_host()
    host.start()
    yield
    host.stop()
    sessions.teardown()


# Create FastAPI app
app = FastAPI(
    title="BubbleGraph",
    description="Interactive force-directed layouts for a personal site",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(auth_router)
app.include_router(content_router)


# Pydantic models for REST requests and responses


class LayoutSummary(BaseModel):
    """Response model for one hosted layout."""

    name: str = Field(description="Layout name")
    mounted: bool = Field(description="Whether a simulation is mounted")
    running: bool = Field(description="Whether the frame loop is scheduled")
    alpha: float = Field(description="Current simulation heat")
    node_count: int = Field(description="Number of nodes")
    link_count: int = Field(description="Number of resolved links")
    width: float = Field(description="Viewport width")
    height: float = Field(description="Viewport height")


class LayoutListResponse(BaseModel):
    layouts: list[LayoutSummary]


class ResizeRequest(BaseModel):
    """Request body for a window resize."""

    width: float = Field(gt=0, description="New window width in pixels")
    height: float = Field(gt=0, description="New window height in pixels")


class ViewportResponse(BaseModel):
    width: float
    height: float


class PointerRequest(BaseModel):
    """Request body for one pointer event."""

    type: PointerKind = Field(description="down, move, up, enter or leave")
    node_id: str | None = Field(default=None, description="Node under the pointer")
    x: float = Field(default=0.0, description="Pointer x in viewport coordinates")
    y: float = Field(default=0.0, description="Pointer y in viewport coordinates")
    pointer_id: int = Field(default=0, description="Pointer identity for multi-touch")


class SelectionResponse(BaseModel):
    node_id: str = Field(description="Selected node id")
    destination: str = Field(description="Route the selection resolves to")
    label: str = Field(description="Node label")


class PointerResponse(BaseModel):
    handled: bool = Field(description="Whether the event changed interaction state")
    selected: SelectionResponse | None = Field(
        default=None, description="Present when a click was confirmed"
    )


def _get_layout(name: str) -> GraphLayout:
    """Look up a hosted layout or answer 404."""
    try:
        return get_layout_host().get(name)
    except UnknownLayoutError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Layout '{name}' not found",
        ) from e


def _summary(name: str, layout: GraphLayout) -> LayoutSummary:
    simulation = layout.simulation
    return LayoutSummary(
        name=name,
        mounted=layout.mounted,
        running=simulation.running if simulation else False,
        alpha=simulation.alpha if simulation else 0.0,
        node_count=len(layout.nodes),
        link_count=len(layout.links),
        width=layout.viewport.width,
        height=layout.viewport.height,
    )


def _frame_data(layout: GraphLayout) -> dict[str, Any]:
    frame = layout.latest_frame or layout.snapshot()
    return frame.to_dict()


def _pointer_response(outcome: PointerOutcome) -> PointerResponse:
    selection = outcome.selection
    if selection is None:
        return PointerResponse(handled=outcome.handled)
    return PointerResponse(
        handled=outcome.handled,
        selected=SelectionResponse(
            node_id=selection.node_id,
            destination=selection.destination,
            label=selection.node.label,
        ),
    )


def _dispatch_pointer(layout: GraphLayout, request: PointerRequest) -> PointerResponse:
    outcome = layout.pointer(
        request.type,
        x=request.x,
        y=request.y,
        node_id=request.node_id,
        pointer_id=request.pointer_id,
    )
    return _pointer_response(outcome)


# REST endpoints


@app.get("/api/layouts", response_model=LayoutListResponse, tags=["layouts"])
async def list_layouts() -> LayoutListResponse:
    """List hosted layouts with their current state."""
    host = get_layout_host()
    return LayoutListResponse(
        layouts=[_summary(name, layout) for name, layout in host.layouts.items()]
    )


@app.get(
    "/api/layouts/{name}/frame",
    tags=["layouts"],
    responses={404: {"description": "Layout not found"}},
)
async def get_frame(name: str) -> dict[str, Any]:
    """Return the latest rendered frame (or a snapshot if none was rendered yet)."""
    return _frame_data(_get_layout(name))


@app.post(
    "/api/layouts/{name}/resize",
    response_model=ViewportResponse,
    tags=["layouts"],
    responses={404: {"description": "Layout not found"}},
)
async def resize_layout(name: str, request: ResizeRequest) -> ViewportResponse:
    """Apply a window resize; the layout re-settles into the new viewport."""
    layout = _get_layout(name)
    with layout_context(name):
        viewport = layout.resize(request.width, request.height)
    return ViewportResponse(width=viewport.width, height=viewport.height)


@app.post(
    "/api/layouts/{name}/pointer",
    response_model=PointerResponse,
    tags=["layouts"],
    responses={404: {"description": "Layout not found"}},
)
async def pointer_event(name: str, request: PointerRequest) -> PointerResponse:
    """Dispatch one pointer event to the layout's interaction controller."""
    layout = _get_layout(name)
    with layout_context(name):
        response = _dispatch_pointer(layout, request)
        if response.selected is not None:
            logger.info(
                "Selected %s -> %s",
                response.selected.node_id,
                response.selected.destination,
            )
    return response


# WebSocket connections management


class ConnectionManager:
    """Track WebSocket connections per layout."""

    def __init__(self) -> None:
        self.frame_connections: dict[str, list[WebSocket]] = {}
        self.control_connections: dict[str, list[WebSocket]] = {}

    async def connect_frames(self, name: str, websocket: WebSocket) -> None:
        """Accept a frames WebSocket connection."""
        await websocket.accept()
        self.frame_connections.setdefault(name, []).append(websocket)
        logger.info(
            "Frame client connected to %s, total: %d", name, len(self.frame_connections[name])
        )

    async def connect_control(self, name: str, websocket: WebSocket) -> None:
        """Accept a control WebSocket connection."""
        await websocket.accept()
        self.control_connections.setdefault(name, []).append(websocket)
        logger.info(
            "Control client connected to %s, total: %d", name, len(self.control_connections[name])
        )

    def disconnect_frames(self, name: str, websocket: WebSocket) -> None:
        connections = self.frame_connections.get(name, [])
        if websocket in connections:
            connections.remove(websocket)
        logger.info("Frame client disconnected from %s, remaining: %d", name, len(connections))

    def disconnect_control(self, name: str, websocket: WebSocket) -> None:
        connections = self.control_connections.get(name, [])
        if websocket in connections:
            connections.remove(websocket)
        logger.info("Control client disconnected from %s, remaining: %d", name, len(connections))


# Global connection manager
manager = ConnectionManager()


@app.websocket("/ws/layouts/{name}")
async def websocket_frames(websocket: WebSocket, name: str) -> None:
    """WebSocket endpoint for streaming frames at the configured stream rate.

    Streams Frame objects containing every node, link and ripple visual.
    Unknown layout names are rejected before the handshake completes.
    """
    try:
        layout = get_layout_host().get(name)
    except UnknownLayoutError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect_frames(name, websocket)
    interval = 1.0 / get_layout_settings().stream_rate
    loop = asyncio.get_running_loop()

    try:
        while True:
            start = loop.time()
            await websocket.send_json(_frame_data(layout))

            elapsed = loop.time() - start
            await asyncio.sleep(max(0.0, interval - elapsed))

    except WebSocketDisconnect:
        manager.disconnect_frames(name, websocket)
    except Exception as e:
        logger.error("Frame streaming error on %s: %s", name, str(e))
        manager.disconnect_frames(name, websocket)


@app.websocket("/ws/layouts/{name}/control")
async def websocket_control(websocket: WebSocket, name: str) -> None:
    """WebSocket endpoint for receiving interaction commands.

    Accepts commands:
    - {"type": "down", "node_id": "...", "x": 10, "y": 20} - Pointer down on a node
    - {"type": "move", "x": 12, "y": 22} - Pointer move (drag / ripple)
    - {"type": "up", "x": 12, "y": 22} - Pointer up; may confirm a click
    - {"type": "enter", "node_id": "..."} / {"type": "leave"} - Hover
    - {"type": "resize", "width": 1024, "height": 768} - Window resize
    """
    try:
        layout = get_layout_host().get(name)
    except UnknownLayoutError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect_control(name, websocket)

    try:
        while True:
            data = await websocket.receive_json()
            with layout_context(name):
                reply = _handle_control(layout, data)
            await websocket.send_json(reply)

    except WebSocketDisconnect:
        manager.disconnect_control(name, websocket)
    except Exception as e:
        logger.error("Control WebSocket error on %s: %s", name, str(e))
        manager.disconnect_control(name, websocket)


def _handle_control(layout: GraphLayout, data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        return {"success": False, "message": "Command must be a JSON object"}
    cmd_type = str(data.get("type", "")).lower()

    if cmd_type == "resize":
        try:
            resize = ResizeRequest.model_validate(data)
        except ValidationError:
            return {"success": False, "message": "Invalid resize dimensions"}
        viewport = layout.resize(resize.width, resize.height)
        return {
            "success": True,
            "message": f"Resized to {viewport.width:.0f}x{viewport.height:.0f}",
        }

    if cmd_type in {kind.value for kind in PointerKind}:
        try:
            pointer = PointerRequest.model_validate({**data, "type": cmd_type})
        except ValidationError:
            return {"success": False, "message": f"Invalid {cmd_type} command"}
        response = _dispatch_pointer(layout, pointer)
        return {"success": True, "message": cmd_type, **response.model_dump()}

    return {"success": False, "message": f"Unknown command: {cmd_type}"}


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
