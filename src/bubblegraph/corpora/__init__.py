"""Built-in node sets for the site's layouts."""

from bubblegraph.corpora.landing import (
    LANDING_GLYPHS,
    LANDING_RADIUS,
    create_landing_nodes,
    seed_demo_content,
)

__all__ = ["LANDING_GLYPHS", "LANDING_RADIUS", "create_landing_nodes", "seed_demo_content"]
