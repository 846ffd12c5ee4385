"""Link dataclass: a directed, weighted relation between two nodes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_LINK_STRENGTH = 5.0
DEFAULT_LINK_TYPE = "related"


@dataclass
class Link:
    """A relation from ``source_id`` to ``target_id``.

    ``strength`` stretches the rest length and thickens the stroke;
    ``link_type`` is display only.
    """

    source_id: str
    target_id: str
    strength: float = DEFAULT_LINK_STRENGTH
    link_type: str = DEFAULT_LINK_TYPE
    id: str = ""

    def __post_init__(self) -> None:
        if self.strength <= 0:
            raise ValueError(f"Link strength must be positive, got {self.strength}")
        if not self.id:
            self.id = f"{self.source_id}->{self.target_id}"

    def rest_length(self, base: float = 150.0, factor: float = 10.0) -> float:
        """Target separation between the endpoints."""
        return base + self.strength * factor

    @property
    def stroke_width(self) -> float:
        return max(1.0, self.strength / 2)


def resolve_links(links: Iterable[Link], node_ids: Iterable[str]) -> list[Link]:
    """Drop links whose endpoints are not both present in ``node_ids``."""
    known = set(node_ids)
    candidates = list(links)
    kept = [link for link in candidates if link.source_id in known and link.target_id in known]
    dropped = len(candidates) - len(kept)
    if dropped:
        logger.debug("Dropped %d dangling links", dropped)
    return kept
