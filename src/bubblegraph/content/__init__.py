"""Knowledge content: nodes, posts and connections feeding the knowledge graph."""

from bubblegraph.content.store import (
    Connection,
    ConnectionCreate,
    ContentNotFoundError,
    ContentStats,
    ContentStore,
    ContentStoreError,
    ContentType,
    ContentValidationError,
    DeleteSummary,
    KnowledgeNode,
    NodeCreate,
    NodeUpdate,
    Post,
    PostCreate,
    PostStatus,
    PostUpdate,
    reading_time_minutes,
    slugify,
)

__all__ = [
    "Connection",
    "ConnectionCreate",
    "ContentNotFoundError",
    "ContentStats",
    "ContentStore",
    "ContentStoreError",
    "ContentType",
    "ContentValidationError",
    "DeleteSummary",
    "KnowledgeNode",
    "NodeCreate",
    "NodeUpdate",
    "Post",
    "PostCreate",
    "PostStatus",
    "PostUpdate",
    "reading_time_minutes",
    "slugify",
]
