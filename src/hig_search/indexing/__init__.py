"""Indexing components for hig-search."""

from .pipeline import IndexingResult, SectionIndexer
from .semantic_index import (
    IndexMetadata,
    SectionEmbeddings,
    SemanticIndex,
    SemanticIndexEntry,
    extract_concepts,
)

__all__ = [
    "IndexingResult",
    "SectionIndexer",
    "IndexMetadata",
    "SectionEmbeddings",
    "SemanticIndex",
    "SemanticIndexEntry",
    "extract_concepts",
]
