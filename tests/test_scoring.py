"""Tests for the relevance signals, combination and boosts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from hig_search.config import SearchConfig
from hig_search.indexing import IndexMetadata, SectionEmbeddings, SectionIndexer, SemanticIndex
from hig_search.indexing.semantic_index import SemanticIndexEntry
from hig_search.models import RankedResult
from hig_search.search import analyze_query, cosine_similarity
from hig_search.search.ranker import (
    SignalScores,
    apply_boosts,
    combine_scores,
    passes_semantic_threshold,
    rank_results,
)
from hig_search.search.scorers import contextual_score, keyword_score, structure_score
from hig_search.search.semantic import SemanticScorer, semantic_similarity

from .conftest import make_section

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


def _metadata(**overrides) -> IndexMetadata:
    values = {
        "platform": "iOS",
        "category": "selection-and-input",
        "concepts": frozenset(),
        "quality_score": 0.5,
        "last_updated": NOW - timedelta(days=400),
    }
    values.update(overrides)
    return IndexMetadata(**values)


# ---------------------------------------------------------------------------
# Keyword
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "query",
    ["button", "button button button", "toolbar buttons layout", "navigation bar color"],
)
def test_keyword_score_is_bounded(query: str) -> None:
    section = make_section(
        "buttons",
        "Buttons and toolbar buttons",
        content="button " * 20 + "navigation bar color layout",
    )

    score = keyword_score(analyze_query(query), section)

    assert 0.0 <= score <= 1.0


def test_keyword_score_title_and_content_hits() -> None:
    section = make_section("sliders", "Sliders", content="A slider is a horizontal track.")

    # "slider": +2 title, +0.5 content, normalized by 2 and clamped.
    assert keyword_score(analyze_query("slider"), section) == 1.0
    # "track": content only, 0.5 / 2.
    assert keyword_score(analyze_query("track"), section) == pytest.approx(0.25)


def test_keyword_score_without_keywords_is_zero() -> None:
    section = make_section("buttons", "Buttons", content="the and for")

    assert keyword_score(analyze_query("the and for"), section) == 0.0


# ---------------------------------------------------------------------------
# Structure
# ---------------------------------------------------------------------------


def test_structure_score_without_structured_content_is_zero() -> None:
    section = make_section("buttons", "Buttons")

    assert structure_score(analyze_query("button guideline"), section) == 0.0


def test_structure_score_rewards_intent_fit() -> None:
    section = make_section(
        "buttons",
        "Buttons",
        structured={"overview": "Buttons initiate actions.", "guidelines": ["Use verbs"]},
    )

    assert structure_score(analyze_query("button guideline"), section) == pytest.approx(0.8)
    assert structure_score(analyze_query("button spec"), section) == pytest.approx(0.3)
    assert structure_score(analyze_query("button example"), section) == pytest.approx(0.3)
    assert structure_score(analyze_query("buttons"), section) == pytest.approx(0.5)


def test_structure_score_specifications_block() -> None:
    section = make_section(
        "buttons",
        "Buttons",
        structured={"specifications": {"min_height": "44pt"}},
    )

    assert structure_score(analyze_query("button size"), section) == pytest.approx(0.8)


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def test_contextual_score_platform_category_and_quality() -> None:
    analysis = analyze_query("buttons", platform="iOS", category="selection-and-input")

    assert contextual_score(analysis, _metadata(quality_score=1.0)) == 1.0
    assert contextual_score(analysis, _metadata(platform="universal", quality_score=0.0)) == (
        pytest.approx(0.5)
    )


def test_fallback_content_caps_quality_contribution() -> None:
    section = make_section(
        "placeholder",
        "Placeholder",
        quality={"score": 1.0, "confidence": 1.0, "is_fallback_content": True, "structure_score": 1.0},
    )
    entry = SectionIndexer(SemanticIndex()).build_entry(section)

    score = contextual_score(analyze_query("placeholder"), entry.metadata)

    assert entry.metadata.quality_score == pytest.approx(0.2)
    assert score == pytest.approx(0.06)


# ---------------------------------------------------------------------------
# Semantic
# ---------------------------------------------------------------------------


def test_cosine_similarity_is_symmetric() -> None:
    rng = np.random.default_rng(7)
    for _ in range(10):
        a = rng.normal(size=16)
        b = rng.normal(size=16)
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_cosine_similarity_with_zero_vector_is_zero() -> None:
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_cosine_similarity_length_mismatch_is_zero() -> None:
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0.0


def test_semantic_similarity_weights_slices() -> None:
    query = np.array([1.0, 0.0], dtype=np.float32)
    same = np.array([2.0, 0.0], dtype=np.float32)
    orthogonal = np.array([0.0, 1.0], dtype=np.float32)
    entry = SemanticIndexEntry(
        section_id="buttons",
        embeddings=SectionEmbeddings(
            title=same, overview=orthogonal, guidelines=same, full_content=orthogonal
        ),
        metadata=_metadata(),
        content_sha256="x",
    )

    assert semantic_similarity(query, entry) == pytest.approx(0.6)
    assert SemanticScorer(query).score(entry) == pytest.approx(0.6)
    assert SemanticScorer(None).available is False
    assert SemanticScorer(None).score(entry) == 0.0


# ---------------------------------------------------------------------------
# Combination and boosts
# ---------------------------------------------------------------------------


def test_combine_scores_uses_weights() -> None:
    scores = SignalScores(semantic=1.0, keyword=0.5, structure=0.5, contextual=1.0)

    assert combine_scores(scores, SearchConfig()) == pytest.approx(0.4 + 0.15 + 0.1 + 0.1)


def test_semantic_threshold_bypassed_without_semantic_signal() -> None:
    config = SearchConfig(min_semantic_threshold=0.3)

    assert passes_semantic_threshold(0.1, semantic_available=True, config=config) is False
    assert passes_semantic_threshold(0.3, semantic_available=True, config=config) is True
    assert passes_semantic_threshold(0.0, semantic_available=False, config=config) is True


def test_boosts_compound() -> None:
    section = make_section("buttons", "Buttons", category="selection-and-input")
    analysis = analyze_query("buttons", platform="iOS", category="selection-and-input")
    recent = _metadata(last_updated=NOW - timedelta(days=10))

    boosted = apply_boosts(1.0, analysis, section, recent, SearchConfig(), now=NOW)

    assert boosted == pytest.approx(2.0 * 1.5 * 1.3 * 1.2)


def test_no_boosts_when_nothing_applies() -> None:
    section = make_section("menus", "Menus", platform="macOS")
    analysis = analyze_query("buttons", platform="iOS")

    assert apply_boosts(0.5, analysis, section, _metadata(), SearchConfig(), now=NOW) == 0.5


def _result(section_id: str, title: str, combined: float, semantic: float = 0.0) -> RankedResult:
    return RankedResult(
        section_id=section_id,
        title=title,
        url="",
        platform="iOS",
        category="selection-and-input",
        semantic_score=semantic,
        keyword_score=0.0,
        structure_score=0.0,
        contextual_score=0.0,
        combined_score=combined,
        matched_concepts=(),
        snippet="",
    )


def test_rank_results_orders_and_truncates() -> None:
    results = [
        _result("c", "Charts", 0.4),
        _result("a", "Alerts", 0.9),
        _result("b", "Buttons", 0.4, semantic=0.5),
        _result("d", "Dials", 0.4),
    ]

    ranked = rank_results(results, limit=3)

    assert [r.section_id for r in ranked] == ["a", "b", "c"]
    assert len(rank_results(results, limit=0)) == 1
