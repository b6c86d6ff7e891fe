"""
Platform/category filter parsing helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..models import CATEGORIES, PLATFORMS, Category, Platform, Section


class InvalidFilter(ValueError):
    """Raised when a platform or category filter is not recognized."""


_PLATFORM_LOOKUP: dict[str, Platform] = {platform.lower(): platform for platform in PLATFORMS}
_CATEGORY_LOOKUP: dict[str, Category] = {category: category for category in CATEGORIES}


@dataclass(frozen=True)
class SearchFilters:
    """Normalized platform/category restriction for a search."""

    platform: Platform | None = None
    category: Category | None = None

    def accepts(self, section: Section) -> bool:
        """Return True when *section* passes both filters.

        A platform filter also admits sections marked `universal`.
        """
        if self.platform is not None and section.platform not in (self.platform, "universal"):
            return False
        if self.category is not None and section.category != self.category:
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"platform": self.platform, "category": self.category}


def supported_filter_values() -> str:
    """Return a short help text listing accepted filter values."""
    return (
        f"Supported platforms: {', '.join(PLATFORMS)}. "
        f"Supported categories: {', '.join(CATEGORIES)}."
    )


def parse_platform(raw: str | None) -> Platform | None:
    if raw is None or not str(raw).strip():
        return None
    platform = _PLATFORM_LOOKUP.get(str(raw).strip().lower())
    if platform is None:
        raise InvalidFilter(f"Unknown platform {raw!r}. {supported_filter_values()}")
    return platform


def parse_category(raw: str | None) -> Category | None:
    if raw is None or not str(raw).strip():
        return None
    key = str(raw).strip().lower().replace(" ", "-").replace("_", "-")
    category = _CATEGORY_LOOKUP.get(key)
    if category is None:
        raise InvalidFilter(f"Unknown category {raw!r}. {supported_filter_values()}")
    return category


def parse_search_filters(
    raw_filters: SearchFilters | Mapping[str, Any] | None,
) -> SearchFilters:
    """Normalize a filter mapping (or an existing `SearchFilters`)."""
    if raw_filters is None:
        return SearchFilters()
    if isinstance(raw_filters, SearchFilters):
        return SearchFilters(
            platform=parse_platform(raw_filters.platform),
            category=parse_category(raw_filters.category),
        )

    unknown = set(raw_filters) - {"platform", "category"}
    if unknown:
        raise InvalidFilter(
            f"Unknown filter field(s): {', '.join(sorted(unknown))}. "
            "Allowed fields: category, platform"
        )
    return SearchFilters(
        platform=parse_platform(raw_filters.get("platform")),
        category=parse_category(raw_filters.get("category")),
    )
