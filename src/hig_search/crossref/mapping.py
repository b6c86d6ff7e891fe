"""
Map design concepts to the technical symbols that implement them.

Three strategies contribute candidates: direct lookup of the concept in the
table, fuzzy conceptual matching over every concept, and platform-specific
links when both a design platform and candidate technical platforms are
given. Candidates are ranked by confidence and deduplicated by
`(design concept, symbol)`.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Sequence

from ..models import ComponentMapping, CrossReference, DesignGuidelineRef, TechnicalSymbolRef
from .table import MappingTable, load_mapping_table

logger = logging.getLogger(__name__)

MAX_CROSS_REFERENCES = 10
CONCEPTUAL_FACTOR = 0.7
PLATFORM_FACTOR = 0.8
LOW_CONFIDENCE = 0.3

_UI_PATTERNS = ("ui", "ns", "swiftui", "view", "controller", "button", "text", "image")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


@dataclass(frozen=True)
class ValidationReport:
    """Quality verdict for a single cross-reference."""

    is_valid: bool
    score: float
    issues: tuple[str, ...]


def normalize_component_name(name: str) -> str:
    lowered = _WHITESPACE_RE.sub(" ", name.lower())
    return _NON_ALNUM_RE.sub("", lowered).strip()


def are_conceptually_related(first: str, second: str) -> bool:
    """True when one symbol contains the other or both share a UI naming fragment."""
    a = first.lower()
    b = second.lower()
    if a in b or b in a:
        return True
    a_patterns = {pattern for pattern in _UI_PATTERNS if pattern in a}
    return any(pattern in b for pattern in a_patterns)


def infer_symbol_kind(symbol: str) -> str:
    if symbol.startswith(("UI", "NS")):
        return "class"
    if "View" in symbol or "Controller" in symbol:
        return "class"
    if symbol[:1].isupper():
        return "struct"
    return "unknown"


class CrossReferenceMapper:
    """Look up and rank design-to-implementation links from a concept table."""

    def __init__(
        self,
        table: MappingTable | None = None,
        *,
        max_results: int = MAX_CROSS_REFERENCES,
    ) -> None:
        self.table = table if table is not None else load_mapping_table()
        self.max_results = max_results

    def find_cross_references(
        self,
        design_title: str,
        technical_symbol: str = "",
        design_platform: str | None = None,
        technical_platforms: Sequence[str] | None = None,
    ) -> list[CrossReference]:
        if not normalize_component_name(design_title):
            return []

        candidates = self._direct(design_title, technical_symbol)
        candidates.extend(self._conceptual(design_title, technical_symbol))
        if design_platform and technical_platforms:
            candidates.extend(
                self._platform_specific(
                    design_title, technical_symbol, design_platform, technical_platforms
                )
            )

        ranked = self._deduplicate(candidates)
        logger.debug(
            "Cross references for %r/%r: %d candidates, %d kept",
            design_title,
            technical_symbol,
            len(candidates),
            len(ranked),
        )
        return ranked

    def get_component_mapping(self, component_name: str) -> ComponentMapping | None:
        name = normalize_component_name(component_name)
        implementations = self.table.implementations(name)
        if not implementations:
            return None

        display = name[:1].upper() + name[1:]
        return ComponentMapping(
            component_name=name,
            design_guidelines=(
                DesignGuidelineRef(
                    title=f"{display} Guidelines",
                    url=f"#hig/{name}",
                    platform="iOS",
                    relevance=0.95,
                ),
                DesignGuidelineRef(
                    title=f"{display} Best Practices",
                    url=f"#hig/{name}/best-practices",
                    platform="universal",
                    relevance=0.90,
                ),
            ),
            technical_symbols=tuple(
                TechnicalSymbolRef(
                    symbol=impl.symbol,
                    framework=impl.framework,
                    platform=impl.platform,
                    symbol_kind=infer_symbol_kind(impl.symbol),
                    relevance=impl.confidence,
                )
                for impl in implementations
            ),
        )

    def find_related_components(self, component_name: str) -> list[str]:
        return self.table.related(normalize_component_name(component_name))

    @staticmethod
    def cross_reference_suggestions(design_count: int, technical_count: int) -> list[str]:
        """Next steps for a caller holding *design_count* and *technical_count* results."""
        suggestions: list[str] = []
        if design_count == 0 and technical_count > 0:
            suggestions.append(
                "Consider reviewing Apple's Human Interface Guidelines for design best practices"
            )
            suggestions.append(
                "Look for related design patterns in the HIG that complement this "
                "technical implementation"
            )
        if technical_count == 0 and design_count > 0:
            suggestions.append("Explore technical documentation for implementation details")
            suggestions.append(
                "Search for framework-specific implementations of this design concept"
            )
        if design_count > 0 and technical_count > 0:
            suggestions.append("Compare design guidelines with technical capabilities")
            suggestions.append("Consider platform-specific implementation variations")
        return suggestions

    @staticmethod
    def validate_cross_reference(reference: CrossReference) -> ValidationReport:
        issues: list[str] = []
        score = reference.confidence

        if reference.confidence < LOW_CONFIDENCE:
            issues.append("Low confidence mapping")
            score -= 0.1
        if not reference.platforms:
            issues.append("No platform information")
            score -= 0.1
        if not reference.frameworks:
            issues.append("No framework information")
            score -= 0.05
        if len(reference.explanation) < 10:
            issues.append("Poor explanation quality")
            score -= 0.05

        return ValidationReport(
            is_valid=score >= 0.2 and len(issues) < 3,
            score=max(0.0, min(1.0, score)),
            issues=tuple(issues),
        )

    def _direct(self, design_title: str, technical_symbol: str) -> list[CrossReference]:
        concept = normalize_component_name(design_title)
        symbol_lower = technical_symbol.lower()
        references: list[CrossReference] = []
        for impl in self.table.implementations(concept):
            impl_lower = impl.symbol.lower()
            if symbol_lower not in impl_lower and impl_lower not in symbol_lower:
                continue
            references.append(
                CrossReference(
                    design_concept=design_title,
                    technical_symbol=impl.symbol,
                    confidence=impl.confidence,
                    mapping_type="direct",
                    explanation=(
                        f"{impl.symbol} is the {impl.framework} implementation of {concept} "
                        f"for {impl.platform}. {impl.usage_notes}"
                    ),
                    platforms=frozenset({impl.platform}),
                    frameworks=frozenset({impl.framework}),
                    design_url=f"#{concept}",
                    technical_url=f"#{impl.framework}/{impl.symbol}",
                )
            )
        return references

    def _conceptual(self, design_title: str, technical_symbol: str) -> list[CrossReference]:
        title_lower = design_title.lower()
        references: list[CrossReference] = []
        for concept, implementations in self.table.concepts.items():
            if concept not in title_lower and title_lower not in concept:
                continue
            for impl in implementations:
                if not are_conceptually_related(technical_symbol, impl.symbol):
                    continue
                references.append(
                    CrossReference(
                        design_concept=design_title,
                        technical_symbol=impl.symbol,
                        confidence=impl.confidence * CONCEPTUAL_FACTOR,
                        mapping_type="conceptual",
                        explanation=(
                            f"{impl.symbol} is conceptually related to {design_title}. "
                            f"{impl.usage_notes}"
                        ),
                        platforms=frozenset({impl.platform}),
                        frameworks=frozenset({impl.framework}),
                        design_url=f"#{concept}",
                        technical_url=f"#{impl.framework}/{impl.symbol}",
                    )
                )
        return references

    def _platform_specific(
        self,
        design_title: str,
        technical_symbol: str,
        design_platform: str,
        technical_platforms: Sequence[str],
    ) -> list[CrossReference]:
        if not technical_symbol:
            return []
        wanted = design_platform.lower()
        references: list[CrossReference] = []
        for platform in technical_platforms:
            if wanted not in platform.lower():
                continue
            references.append(
                CrossReference(
                    design_concept=design_title,
                    technical_symbol=technical_symbol,
                    confidence=self.table.platform_priority(platform) * PLATFORM_FACTOR,
                    mapping_type="platform-specific",
                    explanation=f"Platform-specific implementation for {platform}",
                    platforms=frozenset({platform}),
                    frameworks=frozenset({"Platform-specific"}),
                    design_url=f"#{design_platform}/{design_title}",
                    technical_url=f"#{platform}/{technical_symbol}",
                )
            )
        return references

    def _deduplicate(self, references: list[CrossReference]) -> list[CrossReference]:
        # Stable sort keeps strategy order (direct first) among equal confidences.
        ordered = sorted(references, key=lambda ref: -ref.confidence)
        seen: set[tuple[str, str]] = set()
        unique: list[CrossReference] = []
        for reference in ordered:
            key = (normalize_component_name(reference.design_concept), reference.technical_symbol)
            if key in seen:
                continue
            seen.add(key)
            unique.append(reference)
        return unique[: self.max_results]


_MAPPER: CrossReferenceMapper | None = None
_MAPPER_LOCK = threading.Lock()


def get_mapper() -> CrossReferenceMapper:
    """Return the process-wide mapper backed by the configured table."""
    global _MAPPER
    with _MAPPER_LOCK:
        if _MAPPER is None:
            _MAPPER = CrossReferenceMapper()
        return _MAPPER


def reset_mapper() -> None:
    global _MAPPER
    with _MAPPER_LOCK:
        _MAPPER = None


def get_component_mapping(component_name: str) -> ComponentMapping | None:
    return get_mapper().get_component_mapping(component_name)


def find_cross_references(
    design_title: str,
    technical_symbol: str = "",
    design_platform: str | None = None,
    technical_platforms: Sequence[str] | None = None,
) -> list[CrossReference]:
    """Rank cross-references for a design concept with the default mapper."""
    return get_mapper().find_cross_references(
        design_title, technical_symbol, design_platform, technical_platforms
    )
