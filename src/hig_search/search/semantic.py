"""
Vector similarity scoring against semantic index entries.
"""

from __future__ import annotations

import numpy as np

from ..indexing.semantic_index import SemanticIndexEntry

# Title is the sharpest relevance signal, raw body text the most diffuse.
SLICE_WEIGHTS: dict[str, float] = {
    "title": 0.4,
    "overview": 0.3,
    "guidelines": 0.2,
    "full_content": 0.1,
}


def cosine_similarity(a: np.ndarray | list[float], b: np.ndarray | list[float]) -> float:
    """Cosine of the angle between *a* and *b*.

    Mismatched lengths and zero vectors score 0.
    """
    vec_a = np.asarray(a, dtype=np.float64)
    vec_b = np.asarray(b, dtype=np.float64)
    if vec_a.shape != vec_b.shape:
        return 0.0
    norm_a = float(np.linalg.norm(vec_a))
    norm_b = float(np.linalg.norm(vec_b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def semantic_similarity(query_embedding: np.ndarray, entry: SemanticIndexEntry) -> float:
    """Weighted similarity of a query embedding against an entry's four slices."""
    embeddings = entry.embeddings
    score = (
        cosine_similarity(query_embedding, embeddings.title) * SLICE_WEIGHTS["title"]
        + cosine_similarity(query_embedding, embeddings.overview) * SLICE_WEIGHTS["overview"]
        + cosine_similarity(query_embedding, embeddings.guidelines) * SLICE_WEIGHTS["guidelines"]
        + cosine_similarity(query_embedding, embeddings.full_content)
        * SLICE_WEIGHTS["full_content"]
    )
    return min(max(score, 0.0), 1.0)


class SemanticScorer:
    """Score entries against one query embedding; yields 0 without one."""

    def __init__(self, query_embedding: np.ndarray | None) -> None:
        self.query_embedding = query_embedding

    @property
    def available(self) -> bool:
        return self.query_embedding is not None

    def score(self, entry: SemanticIndexEntry) -> float:
        if self.query_embedding is None:
            return 0.0
        return semantic_similarity(self.query_embedding, entry)
