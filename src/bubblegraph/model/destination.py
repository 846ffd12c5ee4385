"""Where a selected bubble navigates to."""

from __future__ import annotations

import re
from enum import StrEnum

_WHITESPACE = re.compile(r"\s+")


class Destination(StrEnum):
    """Known topic pages reachable from the landing bubbles."""

    SWE = "swe"
    EARTH = "earth"
    WORDS = "words"
    PHOTOS = "photos"

    @classmethod
    def for_identity(cls, identity: str) -> Destination | None:
        """Return the page a bubble identity is wired to, or None."""
        match identity:
            case "💻":
                return cls.SWE
            case "🌎":
                return cls.EARTH
            case "📄":
                return cls.WORDS
            case "📷":
                return cls.PHOTOS
            case _:
                return None


def slugify_identity(identity: str) -> str:
    """Lowercase and turn whitespace runs into single hyphens."""
    return _WHITESPACE.sub("-", identity.strip().lower())


def resolve_destination(identity: str) -> str:
    """Resolve a node identity to a route, falling back to its slug.

    >>> resolve_destination("💻")
    'swe'
    >>> resolve_destination("Machine Learning")
    'machine-learning'
    """
    destination = Destination.for_identity(identity)
    if destination is not None:
        return destination.value
    return slugify_identity(identity)
