"""Search helpers for documentation sections."""

from .analysis import (
    HeuristicIntentClassifier,
    HeuristicTokenizer,
    IntentClassifier,
    InvalidQuery,
    QueryAnalyzer,
    Tokenizer,
    analyze_query,
)
from .filters import InvalidFilter, SearchFilters, parse_search_filters, supported_filter_values
from .query import (
    HybridSearchEngine,
    PatternSearchResult,
    get_engine,
    index_section,
    reset_engine,
    search,
)
from .ranker import SignalScores, rank_results
from .semantic import SemanticScorer, cosine_similarity
from .wildcard import (
    InvalidPattern,
    WildcardMatch,
    WildcardMatcher,
    WildcardPattern,
    match_wildcard,
)

__all__ = [
    "HeuristicIntentClassifier",
    "HeuristicTokenizer",
    "IntentClassifier",
    "InvalidQuery",
    "QueryAnalyzer",
    "Tokenizer",
    "analyze_query",
    "InvalidFilter",
    "SearchFilters",
    "parse_search_filters",
    "supported_filter_values",
    "HybridSearchEngine",
    "PatternSearchResult",
    "get_engine",
    "index_section",
    "reset_engine",
    "search",
    "SignalScores",
    "rank_results",
    "SemanticScorer",
    "cosine_similarity",
    "InvalidPattern",
    "WildcardMatch",
    "WildcardMatcher",
    "WildcardPattern",
    "match_wildcard",
]
