"""API endpoints for knowledge content: nodes, posts and connections.

Reads are public. Writes require a live admin session (see
``bubblegraph.api.auth.require_session``). Every write fires the store's
change signal, which rebuilds the knowledge layout.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from bubblegraph.api.auth import require_session
from bubblegraph.content import (
    Connection,
    ConnectionCreate,
    ContentNotFoundError,
    ContentStats,
    ContentStore,
    ContentValidationError,
    KnowledgeNode,
    NodeCreate,
    NodeUpdate,
    Post,
    PostCreate,
    PostStatus,
    PostUpdate,
)
from bubblegraph.server.state import get_content_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["content"])

_admin = [Depends(require_session)]


class DeleteNodeResponse(BaseModel):
    """Response body for a cascading node delete."""

    success: bool
    node_id: str
    posts_removed: int = Field(description="Posts deleted with the node")
    connections_removed: int = Field(description="Connections deleted with the node")


def _get_store() -> ContentStore:
    return get_content_store()


def _not_found(e: ContentNotFoundError) -> HTTPException:
    logger.warning("Content lookup failed: %s", e)
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# Nodes


@router.get("/nodes", response_model=list[KnowledgeNode])
async def list_nodes(include_inactive: bool = False) -> list[KnowledgeNode]:
    """List knowledge nodes, most experienced first."""
    return _get_store().list_nodes(include_inactive=include_inactive)


@router.post(
    "/nodes",
    response_model=KnowledgeNode,
    status_code=status.HTTP_201_CREATED,
    dependencies=_admin,
    responses={401: {"description": "Missing or invalid session"}},
)
async def create_node(request: NodeCreate) -> KnowledgeNode:
    return _get_store().create_node(request)


@router.get(
    "/nodes/{node_id}",
    response_model=KnowledgeNode,
    responses={404: {"description": "Node not found"}},
)
async def get_node(node_id: str) -> KnowledgeNode:
    try:
        return _get_store().get_node(node_id)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


@router.patch(
    "/nodes/{node_id}",
    response_model=KnowledgeNode,
    dependencies=_admin,
    responses={
        400: {"description": "Invalid update"},
        401: {"description": "Missing or invalid session"},
        404: {"description": "Node not found"},
    },
)
async def update_node(node_id: str, request: NodeUpdate) -> KnowledgeNode:
    try:
        return _get_store().update_node(node_id, request)
    except ContentNotFoundError as e:
        raise _not_found(e) from e
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete(
    "/nodes/{node_id}",
    response_model=DeleteNodeResponse,
    dependencies=_admin,
    responses={
        401: {"description": "Missing or invalid session"},
        404: {"description": "Node not found"},
    },
)
async def delete_node(node_id: str) -> DeleteNodeResponse:
    """Delete a node together with its posts and connections.

    Raises:
        HTTPException: 404 if the node doesn't exist.
    """
    try:
        summary = _get_store().delete_node(node_id)
    except ContentNotFoundError as e:
        raise _not_found(e) from e

    return DeleteNodeResponse(
        success=True,
        node_id=summary.node_id,
        posts_removed=summary.posts_removed,
        connections_removed=summary.connections_removed,
    )


# Posts


@router.get(
    "/nodes/{node_id}/posts",
    response_model=list[Post],
    responses={404: {"description": "Node not found"}},
)
async def list_posts(
    node_id: str,
    post_status: PostStatus | None = Query(default=None, alias="status"),  # noqa: B008
) -> list[Post]:
    """List a node's posts, newest first, optionally filtered by status."""
    try:
        return _get_store().list_posts(node_id, status=post_status)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


@router.post(
    "/nodes/{node_id}/posts",
    response_model=Post,
    status_code=status.HTTP_201_CREATED,
    dependencies=_admin,
    responses={
        401: {"description": "Missing or invalid session"},
        404: {"description": "Node not found"},
    },
)
async def create_post(node_id: str, request: PostCreate) -> Post:
    try:
        return _get_store().create_post(node_id, request)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


@router.get("/posts/{post_id}", response_model=Post, responses={404: {"description": "Not found"}})
async def get_post(post_id: str) -> Post:
    try:
        return _get_store().get_post(post_id)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


@router.patch(
    "/posts/{post_id}",
    response_model=Post,
    dependencies=_admin,
    responses={
        400: {"description": "Invalid update"},
        401: {"description": "Missing or invalid session"},
        404: {"description": "Post not found"},
    },
)
async def update_post(post_id: str, request: PostUpdate) -> Post:
    try:
        return _get_store().update_post(post_id, request)
    except ContentNotFoundError as e:
        raise _not_found(e) from e
    except ContentValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete(
    "/posts/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_admin,
    responses={
        401: {"description": "Missing or invalid session"},
        404: {"description": "Post not found"},
    },
)
async def delete_post(post_id: str) -> None:
    try:
        _get_store().delete_post(post_id)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


# Connections


@router.get("/connections", response_model=list[Connection])
async def list_connections() -> list[Connection]:
    return _get_store().list_connections()


@router.post(
    "/connections",
    response_model=Connection,
    status_code=status.HTTP_201_CREATED,
    dependencies=_admin,
    responses={
        400: {"description": "Endpoint is not a knowledge node"},
        401: {"description": "Missing or invalid session"},
    },
)
async def create_connection(request: ConnectionCreate) -> Connection:
    """Connect two existing knowledge nodes.

    Raises:
        HTTPException: 400 if either endpoint doesn't exist.
    """
    try:
        return _get_store().create_connection(request)
    except ContentValidationError as e:
        logger.warning("Rejected connection: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete(
    "/connections/{connection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=_admin,
    responses={
        401: {"description": "Missing or invalid session"},
        404: {"description": "Connection not found"},
    },
)
async def delete_connection(connection_id: str) -> None:
    try:
        _get_store().delete_connection(connection_id)
    except ContentNotFoundError as e:
        raise _not_found(e) from e


# Stats


@router.get("/stats", response_model=ContentStats)
async def get_stats() -> ContentStats:
    """Node, connection and published post counts with the mean experience level."""
    return _get_store().stats()
