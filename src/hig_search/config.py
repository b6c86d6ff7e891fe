"""
Configuration helpers for ranking and indexing.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


ENV_DISABLE_SEMANTIC = "HIG_SEARCH_DISABLE_SEMANTIC"
ENV_MIN_SEMANTIC_THRESHOLD = "HIG_SEARCH_MIN_SEMANTIC_THRESHOLD"
ENV_INDEX_WORKERS = "HIG_SEARCH_INDEX_WORKERS"
ENV_MAPPINGS_PATH = "HIG_SEARCH_MAPPINGS_PATH"

DEFAULT_MIN_SEMANTIC_THRESHOLD = 0.3
DEFAULT_INDEX_WORKERS = 4


@dataclass(frozen=True)
class BoostFactors:
    """Multiplicative boosts applied after score combination."""

    exact_title: float = 2.0
    platform_match: float = 1.5
    category_match: float = 1.3
    recent_content: float = 1.2


@dataclass(frozen=True)
class SearchConfig:
    """Weights, thresholds and limits used by the hybrid ranker."""

    semantic_weight: float = 0.4
    keyword_weight: float = 0.3
    structure_weight: float = 0.2
    context_weight: float = 0.1
    min_semantic_threshold: float = DEFAULT_MIN_SEMANTIC_THRESHOLD
    boosts: BoostFactors = field(default_factory=BoostFactors)
    recent_days: int = 180
    default_limit: int = 10
    max_query_length: int = 500
    max_pattern_length: int = 100
    snippet_length: int = 200
    index_workers: int = DEFAULT_INDEX_WORKERS

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Build a config, letting environment variables override defaults."""
        threshold = float(
            os.getenv(ENV_MIN_SEMANTIC_THRESHOLD, str(DEFAULT_MIN_SEMANTIC_THRESHOLD))
        )
        workers = int(os.getenv(ENV_INDEX_WORKERS, str(DEFAULT_INDEX_WORKERS)))
        return cls(min_semantic_threshold=threshold, index_workers=max(workers, 1))


def semantic_disabled() -> bool:
    """Return True when semantic scoring is switched off via the environment."""
    return os.getenv(ENV_DISABLE_SEMANTIC, "").strip().lower() in {"1", "true", "yes"}


def resolve_mappings_path(override_path: str | None = None) -> Path | None:
    """
    Resolve an alternate concept mapping document.

    Precedence:
    1) explicit override_path
    2) HIG_SEARCH_MAPPINGS_PATH
    3) None (use the packaged table)
    """
    raw_path = override_path or os.getenv(ENV_MAPPINGS_PATH)
    if not raw_path:
        return None
    return Path(raw_path).expanduser().resolve()
