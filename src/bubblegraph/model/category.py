"""Node categories and their display palette."""

from __future__ import annotations

from enum import StrEnum


class Category(StrEnum):
    """Knowledge node categories. Anything unrecognized parses to DEFAULT."""

    PROGRAMMING = "programming"
    FRAMEWORKS = "frameworks"
    TOOLS = "tools"
    CONCEPTS = "concepts"
    DATABASES = "databases"
    CLOUD = "cloud"
    TESTING = "testing"
    DEVOPS = "devops"
    DESIGN = "design"
    MOBILE = "mobile"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: str | Category | None) -> Category:
        """Parse a category name case-insensitively, falling back to DEFAULT."""
        if isinstance(value, Category):
            return value
        if not value:
            return cls.DEFAULT
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.DEFAULT

    @property
    def label(self) -> str:
        """Human readable category name."""
        return category_label(self)

    @property
    def color(self) -> str:
        """Fill color used when drawing nodes of this category."""
        return category_color(self)


def category_color(category: Category) -> str:
    """Map a category to its hex color."""
    match category:
        case Category.PROGRAMMING:
            return "#3B82F6"  # Blue
        case Category.FRAMEWORKS:
            return "#10B981"  # Green
        case Category.TOOLS:
            return "#F59E0B"  # Yellow
        case Category.CONCEPTS:
            return "#8B5CF6"  # Purple
        case Category.DATABASES:
            return "#EF4444"  # Red
        case Category.CLOUD:
            return "#06B6D4"  # Cyan
        case Category.TESTING:
            return "#F97316"  # Orange
        case Category.DEVOPS:
            return "#84CC16"  # Lime
        case Category.DESIGN:
            return "#EC4899"  # Pink
        case Category.MOBILE:
            return "#6366F1"  # Indigo
        case _:
            return "#6B7280"  # Gray


def category_label(category: Category) -> str:
    """Map a category to the label shown in editors."""
    match category:
        case Category.PROGRAMMING:
            return "Programming Languages"
        case Category.FRAMEWORKS:
            return "Frameworks & Libraries"
        case Category.TOOLS:
            return "Development Tools"
        case Category.CONCEPTS:
            return "Concepts & Patterns"
        case Category.DATABASES:
            return "Databases"
        case Category.CLOUD:
            return "Cloud & Infrastructure"
        case Category.TESTING:
            return "Testing & QA"
        case Category.DEVOPS:
            return "DevOps & CI/CD"
        case Category.DESIGN:
            return "Design & UX"
        case Category.MOBILE:
            return "Mobile Development"
        case _:
            return "Uncategorized"
