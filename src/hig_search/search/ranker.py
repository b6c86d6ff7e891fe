"""
Ranking helpers: weighted score combination, boosts and ordering.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ..config import SearchConfig
from ..indexing.semantic_index import IndexMetadata
from ..models import QueryAnalysis, RankedResult, Section


@dataclass(frozen=True)
class SignalScores:
    """The four per-section relevance signals, each in [0, 1]."""

    semantic: float
    keyword: float
    structure: float
    contextual: float


def combine_scores(scores: SignalScores, config: SearchConfig) -> float:
    return (
        scores.semantic * config.semantic_weight
        + scores.keyword * config.keyword_weight
        + scores.structure * config.structure_weight
        + scores.contextual * config.context_weight
    )


def passes_semantic_threshold(
    semantic_score: float, *, semantic_available: bool, config: SearchConfig
) -> bool:
    """Drop weak semantic matches, unless there is no semantic signal at all.

    Without embeddings every semantic score is 0, so the threshold would
    discard the whole corpus.
    """
    if not semantic_available:
        return True
    return semantic_score >= config.min_semantic_threshold


def apply_boosts(
    score: float,
    analysis: QueryAnalysis,
    section: Section,
    metadata: IndexMetadata,
    config: SearchConfig,
    *,
    now: datetime | None = None,
) -> float:
    """Multiply *score* by every applicable boost. Boosts compound."""
    boosts = config.boosts
    boosted = score

    if analysis.normalized_query in section.title.lower():
        boosted *= boosts.exact_title
    if analysis.platform is not None and section.platform == analysis.platform:
        boosted *= boosts.platform_match
    if analysis.category is not None and section.category == analysis.category:
        boosted *= boosts.category_match

    current = now or datetime.now(timezone.utc)
    if metadata.last_updated > current - timedelta(days=config.recent_days):
        boosted *= boosts.recent_content

    return boosted


def rank_results(results: list[RankedResult], *, limit: int) -> list[RankedResult]:
    """Sort scored results and apply limit."""
    ordered = sorted(
        results,
        key=lambda result: (
            -result.combined_score,
            -result.semantic_score,
            -result.keyword_score,
            result.title.lower(),
            result.section_id,
        ),
    )
    return ordered[: max(limit, 1)]
