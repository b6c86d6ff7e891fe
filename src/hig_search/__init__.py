"""
hig_search - hybrid relevance ranking for Human Interface Guidelines sections.

Sections are indexed into multi-slice embeddings and ranked against free-text
queries on semantic, keyword, structure and context signals. Glob patterns
and design-to-implementation cross-references are supported as well.

Example usage:
    >>> from hig_search import HybridSearchEngine, Section
    >>> engine = HybridSearchEngine()
    >>> results = engine.search("button guidelines", corpus, {"platform": "iOS"})
"""

from .config import BoostFactors, SearchConfig
from .crossref import (
    CrossReferenceMapper,
    MappingTableError,
    ValidationReport,
    find_cross_references,
    get_component_mapping,
)
from .embeddings import EmbeddingProvider, GenAIEmbeddingProvider, ProviderUnavailable
from .models import (
    ComponentMapping,
    CrossReference,
    EntityMatch,
    QualityMetrics,
    QueryAnalysis,
    RankedResult,
    Section,
    StructuredContent,
)
from .search import (
    HybridSearchEngine,
    InvalidFilter,
    InvalidPattern,
    InvalidQuery,
    PatternSearchResult,
    SearchFilters,
    analyze_query,
    get_engine,
    index_section,
    match_wildcard,
    reset_engine,
)

__all__ = [
    # Configuration
    "BoostFactors",
    "SearchConfig",
    # Models
    "ComponentMapping",
    "CrossReference",
    "EntityMatch",
    "QualityMetrics",
    "QueryAnalysis",
    "RankedResult",
    "Section",
    "StructuredContent",
    # Embeddings
    "EmbeddingProvider",
    "GenAIEmbeddingProvider",
    "ProviderUnavailable",
    # Search
    "HybridSearchEngine",
    "InvalidFilter",
    "InvalidPattern",
    "InvalidQuery",
    "PatternSearchResult",
    "SearchFilters",
    "analyze_query",
    "get_engine",
    "index_section",
    "match_wildcard",
    "reset_engine",
    # Cross-references
    "CrossReferenceMapper",
    "MappingTableError",
    "ValidationReport",
    "find_cross_references",
    "get_component_mapping",
]
