"""
Data model shared by the indexing, search and cross-reference layers.

Input documents (`Section` and its parts) arrive from the acquisition
collaborator and are validated with pydantic. Everything the engine produces
per query is a frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

Platform: TypeAlias = Literal["iOS", "macOS", "watchOS", "tvOS", "visionOS", "universal"]
Category: TypeAlias = Literal[
    "foundations",
    "layout",
    "navigation",
    "presentation",
    "selection-and-input",
    "status",
    "system-capabilities",
    "visual-design",
    "icons-and-images",
    "color-and-materials",
    "typography",
    "motion",
    "technologies",
]
SearchIntent: TypeAlias = Literal[
    "find_example",
    "find_guideline",
    "find_specification",
    "compare_platforms",
    "find_component",
    "general_search",
]
EntityType: TypeAlias = Literal["component", "platform", "property"]
ResultType: TypeAlias = Literal["section", "component", "guideline", "pattern"]
MappingType: TypeAlias = Literal["direct", "conceptual", "platform-specific"]

PLATFORMS: tuple[Platform, ...] = ("iOS", "macOS", "watchOS", "tvOS", "visionOS", "universal")
CATEGORIES: tuple[Category, ...] = (
    "foundations",
    "layout",
    "navigation",
    "presentation",
    "selection-and-input",
    "status",
    "system-capabilities",
    "visual-design",
    "icons-and-images",
    "color-and-materials",
    "typography",
    "motion",
    "technologies",
)


class QualityMetrics(BaseModel):
    """Quality grade attached to a section by the upstream content grader"""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=1.0, description="Overall quality score")
    confidence: float = Field(default=1.0, ge=0.0, le=1.0, description="Confidence in the score")
    is_fallback_content: bool = Field(
        default=False, description="Content is a placeholder rather than authoritative text"
    )
    structure_score: float = Field(default=0.0, ge=0.0, le=1.0)
    heading_count: int = Field(default=0, ge=0)
    code_example_count: int = Field(default=0, ge=0)


class StructuredContent(BaseModel):
    """Structured breakdown of a section produced during normalization"""

    model_config = ConfigDict(frozen=True)

    overview: str = Field(default="", description="Short overview paragraph")
    guidelines: list[str] = Field(default_factory=list, description="Guideline bullets")
    examples: list[str] = Field(default_factory=list, description="Usage examples")
    specifications: dict[str, Any] | None = Field(
        default=None, description="Dimensions and other specification values"
    )


class Section(BaseModel):
    """A documentation section handed to the engine for indexing and ranking"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Stable section identifier")
    title: str = Field(description="Section title")
    url: str = Field(default="", description="Canonical URL of the section")
    platform: Platform = Field(description="Platform the section applies to")
    category: Category = Field(description="Guideline category")
    content: str = Field(default="", description="Cleaned section text")
    structured_content: StructuredContent | None = Field(default=None)
    quality: QualityMetrics | None = Field(default=None)
    last_updated: datetime | None = Field(default=None)

    @property
    def has_structured_content(self) -> bool:
        return self.structured_content is not None


@dataclass(frozen=True)
class EntityMatch:
    """A recognized span of a query tagged with a semantic type."""

    text: str
    type: EntityType
    confidence: float
    normalized_value: str


@dataclass(frozen=True)
class QueryAnalysis:
    """Structured view of a free-text query."""

    original_query: str
    normalized_query: str
    intent: SearchIntent
    entities: tuple[EntityMatch, ...]
    keywords: tuple[str, ...]
    concepts: frozenset[str]
    platform: Platform | None = None
    category: Category | None = None

    def has_entity(self, entity_type: EntityType) -> bool:
        return any(entity.type == entity_type for entity in self.entities)


@dataclass(frozen=True)
class RankedResult:
    """A scored section returned by the search engine."""

    section_id: str
    title: str
    url: str
    platform: Platform
    category: Category
    semantic_score: float
    keyword_score: float
    structure_score: float
    contextual_score: float
    combined_score: float
    matched_concepts: tuple[str, ...]
    snippet: str
    result_type: ResultType = "section"
    search_terms: tuple[str, ...] = ()
    semantic_available: bool = True


@dataclass(frozen=True)
class CrossReference:
    """A confidence-ranked link between a design concept and a technical symbol."""

    design_concept: str
    technical_symbol: str
    confidence: float
    mapping_type: MappingType
    explanation: str
    platforms: frozenset[str] = field(default_factory=frozenset)
    frameworks: frozenset[str] = field(default_factory=frozenset)
    design_url: str = ""
    technical_url: str = ""


@dataclass(frozen=True)
class DesignGuidelineRef:
    title: str
    url: str
    platform: str
    relevance: float


@dataclass(frozen=True)
class TechnicalSymbolRef:
    symbol: str
    framework: str
    platform: str
    symbol_kind: str
    relevance: float


@dataclass(frozen=True)
class ComponentMapping:
    """Design guidance and implementing symbols for one component concept."""

    component_name: str
    design_guidelines: tuple[DesignGuidelineRef, ...]
    technical_symbols: tuple[TechnicalSymbolRef, ...]
