"""
Query analysis: entity extraction, keyword/concept extraction and intent
classification.

Keyword extraction and intent classification sit behind the `Tokenizer` and
`IntentClassifier` protocols. The heuristic implementations below use fixed
term lists; a statistical implementation can be dropped in without touching
the scorers.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol, Sequence

from ..indexing.semantic_index import extract_concepts
from ..models import (
    Category,
    EntityMatch,
    EntityType,
    Platform,
    QueryAnalysis,
    SearchIntent,
)

logger = logging.getLogger(__name__)


class InvalidQuery(ValueError):
    """Raised when a query is empty or too long to analyze."""


COMPONENT_TERMS: tuple[str, ...] = (
    "button",
    "navigation",
    "tab",
    "menu",
    "slider",
    "picker",
    "table",
    "list",
    "view",
    "controller",
)
PLATFORM_TERMS: tuple[Platform, ...] = ("iOS", "macOS", "watchOS", "tvOS", "visionOS")
PROPERTY_TERMS: tuple[str, ...] = (
    "color",
    "spacing",
    "typography",
    "font",
    "size",
    "padding",
    "margin",
)
ENTITY_CONFIDENCE: dict[EntityType, float] = {
    "component": 0.8,
    "platform": 0.9,
    "property": 0.7,
}

# Checked in order; first hit wins.
CATEGORY_HINTS: tuple[tuple[tuple[str, ...], Category], ...] = (
    (("color", "material"), "color-and-materials"),
    (("typography", "font"), "typography"),
    (("navigation", "menu"), "navigation"),
    (("layout", "grid"), "layout"),
)

# Function words and query verbs that never describe a topic.
STOP_WORDS = frozenset(
    {
        "the", "and", "for", "are", "was", "were", "been", "being", "have", "has",
        "had", "does", "did", "will", "would", "could", "should", "may", "might",
        "can", "into", "with", "from", "about", "over", "under", "between", "then",
        "there", "here", "when", "where", "why", "how", "what", "which", "who",
        "this", "that", "these", "those", "its", "your", "our", "their", "not",
        "all", "any", "some", "more", "most", "very", "just", "also", "too",
        "add", "adding", "use", "using", "make", "making", "get", "show", "find",
        "want", "need", "like", "best", "practice", "practices", "example",
        "examples", "compare", "versus",
    }
)

_TOKEN_SPLIT_RE = re.compile(r"[^\w]+")
_VERSUS_RE = re.compile(r"\bvs\b\.?")
_PLATFORM_RES = {
    platform: re.compile(rf"\b{platform.lower()}\b") for platform in PLATFORM_TERMS
}


class Tokenizer(Protocol):
    """Extracts topic keywords from a normalized query."""

    def keywords(self, text: str) -> list[str]:
        ...


class IntentClassifier(Protocol):
    """Maps a normalized query and its entities to a search intent."""

    def classify(self, normalized_query: str, entities: Sequence[EntityMatch]) -> SearchIntent:
        ...


class HeuristicTokenizer:
    """Split on non-word characters and keep distinctive terms longer than two chars."""

    def __init__(self, stop_words: frozenset[str] = STOP_WORDS) -> None:
        self.stop_words = stop_words

    def keywords(self, text: str) -> list[str]:
        seen: set[str] = set()
        keywords: list[str] = []
        for token in _TOKEN_SPLIT_RE.split(text.lower()):
            if len(token) <= 2 or token in self.stop_words or token.isdigit():
                continue
            if token not in seen:
                seen.add(token)
                keywords.append(token)
        return keywords


class HeuristicIntentClassifier:
    """Ordered substring rules over the normalized query."""

    def classify(self, normalized_query: str, entities: Sequence[EntityMatch]) -> SearchIntent:
        query = normalized_query
        if "how to" in query or "example" in query:
            return "find_example"
        if "guideline" in query or "best practice" in query:
            return "find_guideline"
        if "size" in query or "dimension" in query or "spec" in query:
            return "find_specification"
        if _VERSUS_RE.search(query) or "compare" in query:
            return "compare_platforms"
        if any(entity.type == "component" for entity in entities):
            return "find_component"
        return "general_search"


def normalize_query(query: str) -> str:
    return query.strip().lower()


def extract_entities(normalized_query: str) -> list[EntityMatch]:
    entities: list[EntityMatch] = []
    for term in COMPONENT_TERMS:
        if term in normalized_query:
            entities.append(
                EntityMatch(term, "component", ENTITY_CONFIDENCE["component"], term)
            )
    for platform in PLATFORM_TERMS:
        lowered = platform.lower()
        if _PLATFORM_RES[platform].search(normalized_query):
            entities.append(
                EntityMatch(lowered, "platform", ENTITY_CONFIDENCE["platform"], platform)
            )
    for term in PROPERTY_TERMS:
        if term in normalized_query:
            entities.append(
                EntityMatch(term, "property", ENTITY_CONFIDENCE["property"], term)
            )
    return entities


def infer_platform(entities: Sequence[EntityMatch]) -> Platform | None:
    for entity in entities:
        if entity.type == "platform":
            return entity.normalized_value  # type: ignore[return-value]
    return None


def infer_category(normalized_query: str) -> Category | None:
    for terms, category in CATEGORY_HINTS:
        if any(term in normalized_query for term in terms):
            return category
    return None


class QueryAnalyzer:
    """Turn a free-text query into a `QueryAnalysis`."""

    def __init__(
        self,
        tokenizer: Tokenizer | None = None,
        classifier: IntentClassifier | None = None,
        *,
        max_query_length: int = 500,
    ) -> None:
        self.tokenizer = tokenizer or HeuristicTokenizer()
        self.classifier = classifier or HeuristicIntentClassifier()
        self.max_query_length = max_query_length

    def validate(self, query: str) -> str:
        """Return the normalized query or raise `InvalidQuery`."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidQuery("Query must be a non-empty string.")
        if len(query) > self.max_query_length:
            raise InvalidQuery(
                f"Query too long: {len(query)} characters (maximum {self.max_query_length})."
            )
        return normalize_query(query)

    def analyze(
        self,
        query: str,
        platform: Platform | None = None,
        category: Category | None = None,
    ) -> QueryAnalysis:
        normalized = self.validate(query)
        entities = extract_entities(normalized)
        intent = self.classifier.classify(normalized, entities)
        keywords = self.tokenizer.keywords(normalized)

        analysis = QueryAnalysis(
            original_query=query,
            normalized_query=normalized,
            intent=intent,
            entities=tuple(entities),
            keywords=tuple(keywords),
            concepts=extract_concepts(normalized),
            platform=platform or infer_platform(entities),
            category=category or infer_category(normalized),
        )
        logger.debug(
            "Query analysis: intent=%s entities=%d keywords=%s",
            analysis.intent,
            len(analysis.entities),
            list(analysis.keywords),
        )
        return analysis


def analyze_query(
    query: str,
    platform: Platform | None = None,
    category: Category | None = None,
) -> QueryAnalysis:
    """Analyze a query with the default heuristic tokenizer and classifier."""
    return QueryAnalyzer().analyze(query, platform, category)
