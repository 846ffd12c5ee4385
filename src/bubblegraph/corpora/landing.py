"""The landing corpus: the four navigation bubbles plus sample knowledge content.

The bubbles are identified by the glyph they display; clicking one resolves
to a destination through ``bubblegraph.model.destination``. The sample
knowledge content is only loaded when ``LAYOUT_DEMO_CONTENT`` is enabled.
"""

from __future__ import annotations

from bubblegraph.content.store import (
    ConnectionCreate,
    ContentStore,
    NodeCreate,
    PostCreate,
    PostStatus,
)
from bubblegraph.model.node import Node

LANDING_GLYPHS = ("💻", "🌎", "📄", "📷")
LANDING_RADIUS = 50.0


def create_landing_nodes() -> list[Node]:
    """Create the four navigation bubbles in display order.

    Returns:
        list[Node]: Fresh nodes; callers may mount them directly.
    """
    return [Node(id=glyph, radius=LANDING_RADIUS) for glyph in LANDING_GLYPHS]


# (title, category, experience_level, years_experience, project_count)
_DEMO_NODES = [
    ("Python", "programming", 9, 8.0, 12),
    ("FastAPI", "frameworks", 7, 3.0, 4),
    ("PostgreSQL", "databases", 6, 5.0, 6),
    ("Docker", "devops", 6, 4.0, 8),
    ("pytest", "testing", 8, 6.0, 10),
    ("TypeScript", "programming", 7, 4.0, 5),
    ("React", "frameworks", 6, 3.5, 4),
    ("Distributed Systems", "concepts", 5, 2.0, 2),
]

# (from title, to title, strength)
_DEMO_CONNECTIONS = [
    ("Python", "FastAPI", 8.0),
    ("Python", "pytest", 7.0),
    ("FastAPI", "PostgreSQL", 5.0),
    ("FastAPI", "Docker", 4.0),
    ("TypeScript", "React", 8.0),
    ("Docker", "Distributed Systems", 3.0),
]

_DEMO_POSTS = [
    ("Python", "Notes on structural pattern matching", "match statements " * 250),
    ("Python", "Typing a plugin registry", "protocols and generics " * 120),
    ("pytest", "Fixtures that clean up after themselves", "yield fixtures " * 90),
    ("FastAPI", "Lifespan handlers in practice", "startup and shutdown " * 150),
]


def seed_demo_content(store: ContentStore) -> int:
    """Populate ``store`` with a small sample knowledge graph.

    Args:
        store: Store to write into; existing content is left in place.

    Returns:
        int: Number of knowledge nodes created.
    """
    ids: dict[str, str] = {}
    for title, category, level, years, projects in _DEMO_NODES:
        node = store.create_node(
            NodeCreate(
                title=title,
                category=category,
                experience_level=level,
                years_experience=years,
                project_count=projects,
            )
        )
        ids[title] = node.id

    for source, target, strength in _DEMO_CONNECTIONS:
        store.create_connection(
            ConnectionCreate(from_node_id=ids[source], to_node_id=ids[target], strength=strength)
        )

    for title, post_title, body in _DEMO_POSTS:
        store.create_post(
            ids[title],
            PostCreate(title=post_title, content=body.strip(), status=PostStatus.PUBLISHED),
        )

    return len(ids)
