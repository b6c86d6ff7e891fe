"""
Hybrid search over documentation sections.

`HybridSearchEngine.search` analyzes the query, scores every candidate section
on four signals (semantic, keyword, structure, context), combines and boosts
the scores and returns the best results. Queries containing `*` or `?` are
routed to glob pattern search instead.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from ..config import SearchConfig, semantic_disabled
from ..embeddings import EmbeddingProvider, GenAIEmbeddingProvider
from ..indexing import IndexingResult, SectionIndexer, SemanticIndex, SemanticIndexEntry
from ..models import QueryAnalysis, RankedResult, ResultType, Section
from .analysis import InvalidQuery, QueryAnalyzer
from .filters import SearchFilters, parse_search_filters
from .ranker import (
    SignalScores,
    apply_boosts,
    combine_scores,
    passes_semantic_threshold,
    rank_results,
)
from .scorers import contextual_score, keyword_score, structure_score
from .semantic import SemanticScorer
from .wildcard import (
    WildcardMatcher,
    has_wildcards,
    highlight_matches,
    parse_pattern,
    pattern_suggestions,
    validate_pattern,
)

logger = logging.getLogger(__name__)

_MAX_PATTERN_EXAMPLES = 10


def is_pattern_query(query: str) -> bool:
    """True for a single glob token such as `UI*` or `NS????`.

    Multi-word text is a natural-language question even when it contains `?`.
    """
    stripped = query.strip()
    return bool(stripped) and len(stripped.split()) == 1 and has_wildcards(stripped)


@dataclass(frozen=True)
class PatternSearchResult:
    """Results of a glob pattern search plus guidance for the caller."""

    pattern: str
    is_wildcard: bool
    results: tuple[RankedResult, ...]
    examples: tuple[str, ...]
    suggestions: tuple[str, ...]

    @property
    def total(self) -> int:
        return len(self.results)


class HybridSearchEngine:
    """Rank sections against free-text queries."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider | None = None,
        *,
        config: SearchConfig | None = None,
        analyzer: QueryAnalyzer | None = None,
        index: SemanticIndex | None = None,
        matcher: WildcardMatcher | None = None,
    ) -> None:
        self.config = config or SearchConfig.from_env()
        self.index = index if index is not None else SemanticIndex()
        self.indexer = SectionIndexer(
            self.index,
            embedding_provider,
            max_workers=self.config.index_workers,
        )
        self.analyzer = analyzer or QueryAnalyzer(max_query_length=self.config.max_query_length)
        self.matcher = matcher or WildcardMatcher(
            max_pattern_length=self.config.max_pattern_length
        )

    @property
    def embedding_provider(self) -> EmbeddingProvider | None:
        return self.indexer.embedding_provider

    def analyze_query(
        self,
        query: str,
        platform: str | None = None,
        category: str | None = None,
    ) -> QueryAnalysis:
        filters = parse_search_filters({"platform": platform, "category": category})
        return self.analyzer.analyze(query, filters.platform, filters.category)

    def index_section(self, section: Section) -> None:
        self.indexer.index_section(section)

    def index_sections(self, sections: Iterable[Section]) -> IndexingResult:
        return self.indexer.index_sections(sections)

    def search(
        self,
        query: str,
        corpus: Sequence[Section],
        filters: SearchFilters | Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[RankedResult]:
        normalized_limit = max(limit if limit is not None else self.config.default_limit, 1)
        parsed_filters = parse_search_filters(filters)

        if isinstance(query, str) and is_pattern_query(query):
            pattern_result = self.search_pattern(
                query.strip(), corpus, parsed_filters, normalized_limit
            )
            return list(pattern_result.results)

        analysis = self.analyzer.analyze(query, parsed_filters.platform, parsed_filters.category)
        scorer = SemanticScorer(self.indexer.embed_query(analysis.normalized_query))
        if not scorer.available:
            logger.info("No query embedding, ranking %r on lexical signals only", query)

        now = datetime.now(timezone.utc)
        results: list[RankedResult] = []
        for section in corpus:
            if not parsed_filters.accepts(section):
                continue
            entry = self._entry_for(section)
            if entry is None:
                continue
            try:
                result = self._score_section(section, entry, analysis, scorer, now=now)
            except Exception as exc:
                logger.warning("Skipping section %s, scoring failed: %s", section.id, exc)
                continue
            if result is not None:
                results.append(result)

        ranked = rank_results(results, limit=normalized_limit)
        logger.info(
            "Search %r: %d candidates, %d returned (intent=%s)",
            query,
            len(results),
            len(ranked),
            analysis.intent,
        )
        return ranked

    def search_pattern(
        self,
        pattern: str,
        corpus: Sequence[Section],
        filters: SearchFilters | Mapping[str, Any] | None = None,
        limit: int | None = None,
        *,
        fields: Sequence[str] = ("title", "content"),
        case_sensitive: bool = False,
        whole_word: bool = False,
    ) -> PatternSearchResult:
        """Glob pattern search over section fields."""
        is_valid, error = validate_pattern(pattern, max_length=self.config.max_pattern_length)
        if not is_valid:
            raise InvalidQuery(f"Invalid wildcard pattern: {error}")
        normalized_limit = max(limit if limit is not None else self.config.default_limit, 1)
        parsed_filters = parse_search_filters(filters)

        candidates = [section for section in corpus if parsed_filters.accepts(section)]
        matches = self.matcher.match(
            candidates,
            pattern,
            fields,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
            max_results=len(candidates),
        )
        parsed = parse_pattern(pattern, case_sensitive=case_sensitive, whole_word=whole_word)

        results: list[RankedResult] = []
        examples: list[str] = []
        for section, match in matches:
            snippet_source = section.content[: self.config.snippet_length]
            results.append(
                RankedResult(
                    section_id=section.id,
                    title=section.title,
                    url=section.url,
                    platform=section.platform,
                    category=section.category,
                    semantic_score=0.0,
                    keyword_score=match.score,
                    structure_score=0.0,
                    contextual_score=0.0,
                    combined_score=match.score,
                    matched_concepts=(),
                    snippet=highlight_matches(snippet_source, parsed),
                    result_type="pattern",
                    search_terms=(pattern,),
                    semantic_available=False,
                )
            )
            for segment in match.matched_segments:
                if segment not in examples:
                    examples.append(segment)

        ranked = rank_results(results, limit=normalized_limit)
        return PatternSearchResult(
            pattern=pattern,
            is_wildcard=has_wildcards(pattern),
            results=tuple(ranked),
            examples=tuple(examples[:_MAX_PATTERN_EXAMPLES]),
            suggestions=tuple(pattern_suggestions(pattern, len(results))),
        )

    def statistics(self) -> dict[str, Any]:
        provider = self.embedding_provider
        return {
            "indexed_sections": len(self.index),
            "degraded_sections": self.index.degraded_count(),
            "provider_ready": provider is not None and provider.is_ready(),
            "config": self.config,
        }

    def clear_index(self) -> None:
        self.index.clear()
        logger.info("Cleared semantic index")

    def close(self) -> None:
        if self.embedding_provider is not None:
            self.embedding_provider.close()

    def _entry_for(self, section: Section) -> SemanticIndexEntry | None:
        """Return the current entry, indexing lazily when missing or stale."""
        entry = self.index.get(section.id)
        if entry is not None and entry.content_sha256 == SectionIndexer.fingerprint(section):
            return entry
        try:
            return self.indexer.index_section(section)
        except Exception as exc:
            logger.warning("Skipping section %s, indexing failed: %s", section.id, exc)
            return None

    def _score_section(
        self,
        section: Section,
        entry: SemanticIndexEntry,
        analysis: QueryAnalysis,
        scorer: SemanticScorer,
        *,
        now: datetime,
    ) -> RankedResult | None:
        semantic_available = scorer.available and not entry.degraded
        scores = SignalScores(
            semantic=scorer.score(entry),
            keyword=keyword_score(analysis, section),
            structure=structure_score(analysis, section),
            contextual=contextual_score(analysis, entry.metadata),
        )
        if not passes_semantic_threshold(
            scores.semantic, semantic_available=semantic_available, config=self.config
        ):
            return None

        combined = apply_boosts(
            combine_scores(scores, self.config),
            analysis,
            section,
            entry.metadata,
            self.config,
            now=now,
        )
        return RankedResult(
            section_id=section.id,
            title=section.title,
            url=section.url,
            platform=section.platform,
            category=section.category,
            semantic_score=scores.semantic,
            keyword_score=scores.keyword,
            structure_score=scores.structure,
            contextual_score=scores.contextual,
            combined_score=combined,
            matched_concepts=tuple(sorted(analysis.concepts & entry.metadata.concepts)),
            snippet=self._snippet(section, analysis),
            result_type=self._result_type(analysis),
            search_terms=analysis.keywords,
            semantic_available=semantic_available,
        )

    def _snippet(self, section: Section, analysis: QueryAnalysis) -> str:
        content = section.content
        max_length = self.config.snippet_length
        if analysis.keywords:
            position = content.lower().find(analysis.keywords[0])
            if position != -1:
                start = max(0, position - 50)
                end = min(len(content), start + max_length)
                return content[start:end] + ("..." if end < len(content) else "")
        if len(content) > max_length:
            return content[:max_length] + "..."
        return content

    @staticmethod
    def _result_type(analysis: QueryAnalysis) -> ResultType:
        if analysis.intent == "find_component" or analysis.has_entity("component"):
            return "component"
        if analysis.intent == "find_guideline":
            return "guideline"
        return "section"


_ENGINE: HybridSearchEngine | None = None
_ENGINE_LOCK = threading.Lock()


def get_engine() -> HybridSearchEngine:
    """Return the process-wide default engine, creating it on first use."""
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is None:
            provider = None if semantic_disabled() else GenAIEmbeddingProvider()
            _ENGINE = HybridSearchEngine(provider)
        return _ENGINE


def reset_engine() -> None:
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is not None:
            _ENGINE.close()
        _ENGINE = None


def search(
    query: str,
    corpus: Sequence[Section],
    filters: SearchFilters | Mapping[str, Any] | None = None,
    limit: int = 10,
) -> list[RankedResult]:
    """Search *corpus* with the default engine."""
    return get_engine().search(query, corpus, filters, limit)


def index_section(section: Section) -> None:
    get_engine().index_section(section)
