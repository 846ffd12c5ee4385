"""In-memory store for knowledge nodes, their posts, and node connections.

This module provides the ContentStore class: basic create/read/update/delete
for the three record kinds, slug and reading-time derivation, cascading node
deletes, and assembly of the knowledge graph's layout input.
"""

from __future__ import annotations

import itertools
import logging
import math
import re
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from bubblegraph.events import Signal
from bubblegraph.model.category import Category
from bubblegraph.model.link import Link
from bubblegraph.model.node import Node, node_radius

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class ContentStoreError(Exception):
    """Base exception for content store failures."""

    pass


class ContentNotFoundError(ContentStoreError):
    """Raised when a node, post, or connection id is unknown."""

    pass


class ContentValidationError(ContentStoreError):
    """Raised when a write would leave the store inconsistent."""

    pass


class PostStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ContentType(StrEnum):
    BLOG_POST = "blog_post"
    NOTE = "note"
    PROJECT = "project"
    RESOURCE = "resource"


def slugify(text: str) -> str:
    """URL slug: lowercase, runs of non-alphanumerics become '-', ends trimmed.

    >>> slugify("  React & Next.js ")
    'react-next-js'
    """
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def reading_time_minutes(content: str) -> int:
    """Estimated minutes to read ``content``, at least one."""
    words = len(content.split())
    # halves round up
    return max(1, math.floor(words / WORDS_PER_MINUTE + 0.5))


def _parse_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [tag.strip() for tag in value if tag and tag.strip()]


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


# Inputs


class NodeCreate(BaseModel):
    """Fields supplied when creating a knowledge node."""

    title: str = Field(min_length=1, description="Technology or concept name")
    description: str = Field(default="", description="Short description")
    category: Category = Field(default=Category.PROGRAMMING, description="Display category")
    experience_level: int = Field(default=1, ge=1, le=10, description="1 beginner .. 10 expert")
    years_experience: float = Field(default=0.0, ge=0, le=50, description="Years of use")
    icon: str | None = Field(default=None, description="Optional icon identifier")
    project_count: int = Field(default=0, ge=0, description="Projects using this node")

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Title cannot be empty or whitespace only")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v: Any) -> Category:
        return Category.parse(v)

    @field_validator("icon")
    @classmethod
    def blank_icon_is_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class NodeUpdate(BaseModel):
    """Partial update of a knowledge node; unset fields are left alone."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    category: Category | None = None
    experience_level: int | None = Field(default=None, ge=1, le=10)
    years_experience: float | None = Field(default=None, ge=0, le=50)
    icon: str | None = None
    project_count: int | None = Field(default=None, ge=0)
    is_active: bool | None = None

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v: Any) -> Category | None:
        return None if v is None else Category.parse(v)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return None if v is None else v.strip()


class PostCreate(BaseModel):
    """Fields supplied when writing a post."""

    title: str = Field(min_length=1)
    content: str = Field(default="")
    excerpt: str | None = None
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] = Field(default_factory=list)
    content_type: ContentType = ContentType.BLOG_POST

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str]:
        return _parse_tags(v)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title cannot be empty or whitespace only")
        return v.strip()

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        return v.strip()

    @field_validator("excerpt")
    @classmethod
    def blank_excerpt_is_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    excerpt: str | None = None
    status: PostStatus | None = None
    tags: list[str] | None = None
    content_type: ContentType | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> list[str] | None:
        return None if v is None else _parse_tags(v)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str | None) -> str | None:
        return None if v is None else v.strip()

    @field_validator("excerpt")
    @classmethod
    def blank_excerpt_is_none(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ConnectionCreate(BaseModel):
    from_node_id: str
    to_node_id: str
    strength: float = Field(default=5.0, gt=0, le=100)
    connection_type: str = Field(default="related", min_length=1)


# Stored records


class KnowledgeNode(BaseModel):
    id: str
    title: str
    slug: str
    description: str = ""
    category: Category = Category.PROGRAMMING
    experience_level: int = 1
    years_experience: float = 0.0
    icon: str | None = None
    project_count: int = 0
    is_active: bool = True
    blog_post_count: int = 0
    created_at: datetime
    updated_at: datetime


class Post(BaseModel):
    id: str
    node_id: str
    title: str
    slug: str
    content: str = ""
    excerpt: str | None = None
    status: PostStatus = PostStatus.DRAFT
    tags: list[str] = Field(default_factory=list)
    content_type: ContentType = ContentType.BLOG_POST
    reading_time_minutes: int = 1
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class Connection(BaseModel):
    id: str
    from_node_id: str
    to_node_id: str
    strength: float = 5.0
    connection_type: str = "related"
    created_at: datetime


class ContentStats(BaseModel):
    total_nodes: int
    total_connections: int
    published_posts: int
    average_experience: float


@dataclass(frozen=True)
class DeleteSummary:
    """What a cascading node delete removed."""

    node_id: str
    posts_removed: int
    connections_removed: int


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContentStore:
    """In-memory content store.

    ``on_change`` fires with the record kind ("node", "post", "connection")
    after every successful write so graph owners can rebuild their layout.

    Example:
        >>> store = ContentStore()
        >>> node = store.create_node(NodeCreate(title="Python", experience_level=8))
        >>> _ = store.create_post(node.id, PostCreate(title="Why typing", status="published"))
        >>> store.get_node(node.id).blog_post_count
        1
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._nodes: dict[str, KnowledgeNode] = {}
        self._posts: dict[str, Post] = {}
        self._connections: dict[str, Connection] = {}
        self._order: dict[str, int] = {}
        self._seq = itertools.count()
        self._lock = threading.RLock()
        self.on_change: Signal[str] = Signal("content_change")

    # Nodes

    def create_node(self, data: NodeCreate) -> KnowledgeNode:
        now = self._clock()
        node = KnowledgeNode(
            id=str(uuid.uuid4()),
            slug=slugify(data.title),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        with self._lock:
            self._nodes[node.id] = node
            self._order[node.id] = next(self._seq)
        logger.info("Created knowledge node %s (%s)", node.id, node.title)
        self.on_change.emit("node")
        return node

    def get_node(self, node_id: str) -> KnowledgeNode:
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise ContentNotFoundError(f"Knowledge node '{node_id}' not found")
            return node.model_copy(update={"blog_post_count": self._post_count(node_id)})

    def list_nodes(self, include_inactive: bool = False) -> list[KnowledgeNode]:
        """Nodes ordered by experience level, highest first."""
        with self._lock:
            nodes = [
                node.model_copy(update={"blog_post_count": self._post_count(node.id)})
                for node in self._nodes.values()
                if include_inactive or node.is_active
            ]
            nodes.sort(key=lambda n: (-n.experience_level, self._order[n.id]))
        return nodes

    def update_node(self, node_id: str, data: NodeUpdate) -> KnowledgeNode:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ContentValidationError("Title cannot be empty or whitespace only")
            changes["slug"] = slugify(changes["title"])
        with self._lock:
            current = self._nodes.get(node_id)
            if current is None:
                raise ContentNotFoundError(f"Knowledge node '{node_id}' not found")
            updated = current.model_copy(update={**changes, "updated_at": self._clock()})
            self._nodes[node_id] = updated
        logger.info("Updated knowledge node %s fields=%s", node_id, sorted(changes))
        self.on_change.emit("node")
        return self.get_node(node_id)

    def delete_node(self, node_id: str) -> DeleteSummary:
        """Delete a node with its posts and every connection touching it."""
        with self._lock:
            if node_id not in self._nodes:
                raise ContentNotFoundError(f"Knowledge node '{node_id}' not found")
            post_ids = [pid for pid, post in self._posts.items() if post.node_id == node_id]
            for pid in post_ids:
                del self._posts[pid]
            connection_ids = [
                cid
                for cid, conn in self._connections.items()
                if node_id in (conn.from_node_id, conn.to_node_id)
            ]
            for cid in connection_ids:
                del self._connections[cid]
            del self._nodes[node_id]
            self._order.pop(node_id, None)

        summary = DeleteSummary(
            node_id=node_id,
            posts_removed=len(post_ids),
            connections_removed=len(connection_ids),
        )
        logger.info(
            "Deleted knowledge node %s (posts=%d, connections=%d)",
            node_id,
            summary.posts_removed,
            summary.connections_removed,
        )
        self.on_change.emit("node")
        return summary

    # Posts

    def create_post(self, node_id: str, data: PostCreate) -> Post:
        now = self._clock()
        with self._lock:
            if node_id not in self._nodes:
                raise ContentNotFoundError(f"Knowledge node '{node_id}' not found")
            post = Post(
                id=str(uuid.uuid4()),
                node_id=node_id,
                slug=slugify(data.title),
                reading_time_minutes=reading_time_minutes(data.content),
                published_at=now if data.status is PostStatus.PUBLISHED else None,
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
            self._posts[post.id] = post
            self._order[post.id] = next(self._seq)
        logger.info("Created post %s on node %s", post.id, node_id)
        self.on_change.emit("post")
        return post

    def get_post(self, post_id: str) -> Post:
        with self._lock:
            post = self._posts.get(post_id)
        if post is None:
            raise ContentNotFoundError(f"Post '{post_id}' not found")
        return post

    def list_posts(self, node_id: str, status: PostStatus | None = None) -> list[Post]:
        """Posts for a node, newest first."""
        with self._lock:
            if node_id not in self._nodes:
                raise ContentNotFoundError(f"Knowledge node '{node_id}' not found")
            posts = [
                post
                for post in self._posts.values()
                if post.node_id == node_id and (status is None or post.status is status)
            ]
            posts.sort(key=lambda p: (p.created_at, self._order[p.id]), reverse=True)
        return posts

    def update_post(self, post_id: str, data: PostUpdate) -> Post:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        now = self._clock()
        if "excerpt" in data.model_fields_set:
            changes["excerpt"] = data.excerpt
        if "title" in changes:
            changes["title"] = changes["title"].strip()
            if not changes["title"]:
                raise ContentValidationError("Title cannot be empty or whitespace only")
            changes["slug"] = slugify(changes["title"])
        with self._lock:
            current = self._posts.get(post_id)
            if current is None:
                raise ContentNotFoundError(f"Post '{post_id}' not found")
            if "content" in changes:
                changes["reading_time_minutes"] = reading_time_minutes(changes["content"])
            status = changes.get("status", current.status)
            changes["published_at"] = now if status is PostStatus.PUBLISHED else None
            updated = current.model_copy(update={**changes, "updated_at": now})
            self._posts[post_id] = updated
        logger.info("Updated post %s", post_id)
        self.on_change.emit("post")
        return updated

    def delete_post(self, post_id: str) -> None:
        with self._lock:
            if self._posts.pop(post_id, None) is None:
                raise ContentNotFoundError(f"Post '{post_id}' not found")
            self._order.pop(post_id, None)
        logger.info("Deleted post %s", post_id)
        self.on_change.emit("post")

    # Connections

    def create_connection(self, data: ConnectionCreate) -> Connection:
        with self._lock:
            for endpoint in (data.from_node_id, data.to_node_id):
                if endpoint not in self._nodes:
                    raise ContentValidationError(
                        f"Connection endpoint '{endpoint}' is not a knowledge node"
                    )
            connection = Connection(
                id=str(uuid.uuid4()), created_at=self._clock(), **data.model_dump()
            )
            self._connections[connection.id] = connection
        logger.info(
            "Connected %s -> %s (%s)",
            data.from_node_id,
            data.to_node_id,
            data.connection_type,
        )
        self.on_change.emit("connection")
        return connection

    def list_connections(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    def delete_connection(self, connection_id: str) -> None:
        with self._lock:
            if self._connections.pop(connection_id, None) is None:
                raise ContentNotFoundError(f"Connection '{connection_id}' not found")
        logger.info("Deleted connection %s", connection_id)
        self.on_change.emit("connection")

    # Stats

    def stats(self) -> ContentStats:
        """Headline counts over active nodes, all connections and published posts."""
        with self._lock:
            levels = [node.experience_level for node in self._nodes.values() if node.is_active]
            published = sum(
                1 for post in self._posts.values() if post.status is PostStatus.PUBLISHED
            )
            connections = len(self._connections)
        average = round(sum(levels) / len(levels), 1) if levels else 0.0
        return ContentStats(
            total_nodes=len(levels),
            total_connections=connections,
            published_posts=published,
            average_experience=average,
        )

    # Graph input

    def graph_input(self) -> tuple[list[Node], list[Link]]:
        """Layout nodes (active only) and links for the knowledge graph.

        Links may still reference inactive nodes; the layout drops those.
        """
        nodes = [
            Node(
                id=record.id,
                radius=node_radius(
                    experience_level=record.experience_level,
                    content_count=record.blog_post_count,
                    project_count=record.project_count,
                ),
                category=record.category,
                label=record.title,
                data={
                    "title": record.title,
                    "slug": record.slug,
                    "experience_level": record.experience_level,
                    "blog_post_count": record.blog_post_count,
                },
            )
            for record in self.list_nodes()
        ]
        links = [
            Link(
                source_id=conn.from_node_id,
                target_id=conn.to_node_id,
                strength=conn.strength,
                link_type=conn.connection_type,
                id=conn.id,
            )
            for conn in self.list_connections()
        ]
        return nodes, links

    def _post_count(self, node_id: str) -> int:
        return sum(1 for post in self._posts.values() if post.node_id == node_id)
