"""Tests for end-to-end hybrid search."""

from __future__ import annotations

from datetime import datetime, timezone
from types import ModuleType

import pytest

import hig_search
import hig_search.search.query as query_module
from hig_search.config import SearchConfig
from hig_search.search import (
    HybridSearchEngine,
    InvalidFilter,
    InvalidQuery,
    get_engine,
    reset_engine,
)

from .conftest import FakeEmbeddingProvider, make_section


def _corpus():
    return [
        make_section(
            "buttons",
            "Buttons",
            content="Buttons initiate actions such as saving or sharing.",
            structured={"overview": "A button performs an action.", "guidelines": ["Use verbs"]},
        ),
        make_section(
            "navigation-bars",
            "Navigation Bars",
            category="navigation",
            content="Navigation bars sit at the top of the screen. A back button returns.",
        ),
        make_section(
            "menus",
            "Menus",
            platform="macOS",
            category="navigation",
            content="Menus list commands. Keep menu titles short for accessibility.",
        ),
        make_section(
            "accessibility",
            "Accessibility",
            platform="universal",
            category="foundations",
            content="Accessibility lets everyone use your app. Support Dynamic Type.",
            quality={"score": 0.9},
        ),
    ]


def test_button_query_ranks_buttons_above_navigation_bars() -> None:
    engine = HybridSearchEngine(FakeEmbeddingProvider(ready=False))

    results = engine.search("button", _corpus())
    ids = [result.section_id for result in results]

    assert ids.index("buttons") < ids.index("navigation-bars")
    assert results[0].section_id == "buttons"
    assert results[0].result_type == "component"


def test_accessibility_search_works_without_provider() -> None:
    engine = HybridSearchEngine(FakeEmbeddingProvider(ready=False))

    results = engine.search("accessibility", _corpus())

    assert results
    assert results[0].section_id == "accessibility"
    assert all(result.semantic_available is False for result in results)
    assert all(result.semantic_score == 0.0 for result in results)
    assert "accessibility" in results[0].matched_concepts


def test_semantic_threshold_drops_weak_matches() -> None:
    engine = HybridSearchEngine(FakeEmbeddingProvider(), config=SearchConfig())

    results = engine.search("button", _corpus())
    ids = [result.section_id for result in results]

    # Buttons: title and content both align with the query vector.
    assert ids[0] == "buttons"
    assert results[0].semantic_available is True
    assert results[0].semantic_score >= 0.3
    assert "navigation-bars" not in ids
    assert "accessibility" not in ids


def test_platform_filter_excludes_other_platforms() -> None:
    engine = HybridSearchEngine()

    results = engine.search("menus accessibility", _corpus(), {"platform": "ios"})
    ids = {result.section_id for result in results}

    assert "menus" not in ids
    assert "accessibility" in ids
    assert {result.platform for result in results} <= {"iOS", "universal"}


def test_invalid_filter_and_query_are_rejected() -> None:
    engine = HybridSearchEngine()

    with pytest.raises(InvalidFilter):
        engine.search("button", _corpus(), {"platform": "android"})
    with pytest.raises(InvalidQuery):
        engine.search("   ", _corpus())


def test_limit_is_applied() -> None:
    engine = HybridSearchEngine()

    assert len(engine.search("navigation", _corpus(), limit=2)) <= 2
    assert len(engine.search("navigation", _corpus(), limit=0)) == 1


def test_sections_are_indexed_lazily_and_refreshed() -> None:
    provider = FakeEmbeddingProvider()
    engine = HybridSearchEngine(provider)
    corpus = _corpus()

    engine.search("button", corpus)
    assert len(engine.index) == len(corpus)
    calls_after_first = len(provider.calls)

    engine.search("button", corpus)
    # Only the query embedding is new; section entries are reused.
    assert len(provider.calls) == calls_after_first + 1

    updated = make_section("buttons", "Buttons", content="Buttons were rewritten for color.")
    engine.search("button", [updated])
    entry = engine.index.get("buttons")
    assert "color" in entry.metadata.concepts
    assert len(engine.index) == len(corpus)


def test_section_that_fails_to_index_is_skipped(monkeypatch) -> None:
    engine = HybridSearchEngine()
    original = engine.indexer.index_section

    def flaky_index_section(section):
        if section.id == "buttons":
            raise RuntimeError("disk full")
        return original(section)

    monkeypatch.setattr(engine.indexer, "index_section", flaky_index_section)

    results = engine.search("button", _corpus())

    assert "buttons" not in {result.section_id for result in results}
    assert results


def test_degraded_entry_bypasses_threshold() -> None:
    provider = FakeEmbeddingProvider(fail_on="back button")
    engine = HybridSearchEngine(provider)

    results = engine.search("button", _corpus())
    by_id = {result.section_id: result for result in results}

    assert by_id["navigation-bars"].semantic_available is False
    assert by_id["buttons"].semantic_available is True


def test_snippet_centers_on_first_keyword() -> None:
    long_content = "Intro. " * 40 + "Sliders let people choose a value. " + "Outro. " * 40
    section = make_section("sliders", "Sliders", content=long_content)
    engine = HybridSearchEngine()

    result = engine.search("slider", [section])[0]

    assert "Sliders let people choose" in result.snippet
    assert result.snippet.endswith("...")
    assert len(result.snippet) <= 203


def test_recent_sections_get_boosted() -> None:
    engine = HybridSearchEngine()
    old = make_section(
        "old", "Alerts", content="Alerts", last_updated=datetime(2015, 1, 1, tzinfo=timezone.utc)
    )
    fresh = make_section("fresh", "Alerts", content="Alerts")

    results = engine.search("alerts", [old, fresh])

    assert [result.section_id for result in results] == ["fresh", "old"]
    assert results[0].combined_score == pytest.approx(results[1].combined_score * 1.2)


# ---------------------------------------------------------------------------
# Pattern search
# ---------------------------------------------------------------------------


def _symbol_corpus():
    return [
        make_section("uibutton", "UIButton", content="A control that executes your custom code."),
        make_section("uilabel", "UILabel", content="A view that displays text."),
        make_section("nsview", "NSView", platform="macOS", content="The infrastructure for drawing."),
        make_section("button", "Button", content="A control that initiates an action."),
    ]


def test_wildcard_query_is_routed_to_pattern_search() -> None:
    engine = HybridSearchEngine()

    results = engine.search("UI*", _symbol_corpus())

    assert sorted(result.section_id for result in results) == ["uibutton", "uilabel"]
    assert all(result.result_type == "pattern" for result in results)
    assert all(result.semantic_available is False for result in results)


def test_questions_are_ranked_not_pattern_matched() -> None:
    engine = HybridSearchEngine(FakeEmbeddingProvider(ready=False))

    plain = engine.search("what size should a button be", _corpus())
    question = engine.search("what size should a button be?", _corpus())

    assert question
    assert [r.section_id for r in question] == [r.section_id for r in plain]
    assert [r.combined_score for r in question] == pytest.approx(
        [r.combined_score for r in plain]
    )
    assert all(result.result_type != "pattern" for result in question)


def test_long_question_is_not_validated_as_pattern() -> None:
    engine = HybridSearchEngine(FakeEmbeddingProvider(ready=False))
    question = "could you tell me " * 5 + "what size a button should be on a small screen?"
    assert 100 < len(question) <= 500

    results = engine.search(question, _corpus())

    assert results[0].section_id == "buttons"


def test_pattern_query_detection() -> None:
    assert query_module.is_pattern_query("  UI*  ") is True
    assert query_module.is_pattern_query("NS????") is True
    assert query_module.is_pattern_query("is this a button?") is False
    assert query_module.is_pattern_query("button") is False
    assert query_module.is_pattern_query("   ") is False


def test_search_pattern_reports_examples_and_suggestions() -> None:
    engine = HybridSearchEngine()

    outcome = engine.search_pattern("NS????", _symbol_corpus())

    assert outcome.is_wildcard is True
    assert [result.section_id for result in outcome.results] == ["nsview"]
    assert outcome.examples == ("NS",)
    assert outcome.total == 1
    assert outcome.suggestions == ('Try "*NS????*" for broader results',)


def test_search_pattern_without_matches_suggests_wildcards() -> None:
    engine = HybridSearchEngine()

    outcome = engine.search_pattern("Slider", _symbol_corpus())

    assert outcome.results == ()
    assert 'Try "Slider*" to find items starting with "Slider"' in outcome.suggestions


def test_search_pattern_highlights_plain_matches() -> None:
    engine = HybridSearchEngine()

    outcome = engine.search_pattern("control", _symbol_corpus(), {"platform": "iOS"})

    assert {result.section_id for result in outcome.results} == {"uibutton", "button"}
    assert all("**control**" in result.snippet for result in outcome.results)


def test_search_pattern_rejects_invalid_patterns() -> None:
    engine = HybridSearchEngine()

    with pytest.raises(InvalidQuery):
        engine.search_pattern("x" * 101, _symbol_corpus())


# ---------------------------------------------------------------------------
# Engine management
# ---------------------------------------------------------------------------


def test_statistics_and_clear_index() -> None:
    provider = FakeEmbeddingProvider()
    engine = HybridSearchEngine(provider)
    result = engine.index_sections(_corpus())

    stats = engine.statistics()

    assert result.indexed_sections == 4
    assert stats["indexed_sections"] == 4
    assert stats["degraded_sections"] == 0
    assert stats["provider_ready"] is True

    engine.clear_index()
    assert engine.statistics()["indexed_sections"] == 0

    engine.close()
    assert provider.closed is True


def test_default_engine_respects_disabled_semantic(monkeypatch) -> None:
    monkeypatch.setenv("HIG_SEARCH_DISABLE_SEMANTIC", "1")
    reset_engine()
    try:
        engine = get_engine()
        assert engine.embedding_provider is None
        assert get_engine() is engine

        results = query_module.search("button", _corpus())
        assert results[0].section_id == "buttons"
    finally:
        reset_engine()


def test_package_keeps_search_subpackage_importable() -> None:
    assert isinstance(hig_search.search, ModuleType)
    assert hig_search.search.query is query_module
    assert hig_search.HybridSearchEngine is query_module.HybridSearchEngine
