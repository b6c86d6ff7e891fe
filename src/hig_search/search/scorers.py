"""
Lexical, structural and contextual relevance scorers.

Each scorer returns a value in [0, 1].
"""

from __future__ import annotations

from ..indexing.semantic_index import IndexMetadata
from ..models import QueryAnalysis, Section

TITLE_HIT_POINTS = 2.0
CONTENT_HIT_POINTS = 0.5
CONTENT_HIT_CAP = 2.0

STRUCTURE_BASE = 0.3
STRUCTURE_INTENT_FIT = 0.5
STRUCTURE_GENERAL = 0.2

PLATFORM_MATCH = 0.4
UNIVERSAL_PLATFORM = 0.2
CATEGORY_MATCH = 0.3
QUALITY_WEIGHT = 0.3


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def keyword_score(analysis: QueryAnalysis, section: Section) -> float:
    """Title hits earn 2 points, content hits 0.5 each up to 2, per keyword."""
    keywords = analysis.keywords
    if not keywords:
        return 0.0

    title = section.title.lower()
    content = section.content.lower()
    score = 0.0
    for keyword in keywords:
        term = keyword.lower()
        if term in title:
            score += TITLE_HIT_POINTS
        score += min(content.count(term) * CONTENT_HIT_POINTS, CONTENT_HIT_CAP)

    return _clamp(score / (len(keywords) * 2))


def structure_score(analysis: QueryAnalysis, section: Section) -> float:
    """Reward structured content that fits the query intent."""
    structured = section.structured_content
    if structured is None:
        return 0.0

    score = STRUCTURE_BASE
    intent = analysis.intent
    if intent == "find_guideline":
        if structured.guidelines:
            score += STRUCTURE_INTENT_FIT
    elif intent == "find_specification":
        if structured.specifications is not None:
            score += STRUCTURE_INTENT_FIT
    elif intent == "find_example":
        if structured.examples:
            score += STRUCTURE_INTENT_FIT
    else:
        score += STRUCTURE_GENERAL
    return _clamp(score)


def contextual_score(analysis: QueryAnalysis, metadata: IndexMetadata) -> float:
    """Platform and category fit plus a share of the upstream quality grade."""
    score = 0.0
    if analysis.platform is not None and metadata.platform == analysis.platform:
        score += PLATFORM_MATCH
    elif metadata.platform == "universal":
        score += UNIVERSAL_PLATFORM

    if analysis.category is not None and metadata.category == analysis.category:
        score += CATEGORY_MATCH

    score += metadata.quality_score * QUALITY_WEIGHT
    return _clamp(score)
