"""Domain model: Node, Link, Category, Destination."""

from bubblegraph.model.category import Category, category_color, category_label
from bubblegraph.model.destination import Destination, resolve_destination, slugify_identity
from bubblegraph.model.link import Link, resolve_links
from bubblegraph.model.node import DEFAULT_RADIUS_WEIGHTS, Node, RadiusWeights, node_radius

__all__ = [
    "DEFAULT_RADIUS_WEIGHTS",
    "Category",
    "Destination",
    "Link",
    "Node",
    "RadiusWeights",
    "category_color",
    "category_label",
    "node_radius",
    "resolve_destination",
    "resolve_links",
    "slugify_identity",
]
