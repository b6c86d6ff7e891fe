"""
In-memory semantic index: one entry per section id.

Entries are immutable once published. Re-indexing a section builds a new
entry and swaps it into the mapping under a lock, so readers never observe a
partially built entry and need no locking of their own.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

import numpy as np

from ..models import Category, Platform

CONCEPT_VOCABULARY: tuple[str, ...] = (
    "accessibility",
    "usability",
    "navigation",
    "interaction",
    "visual",
    "layout",
    "typography",
    "color",
    "spacing",
    "hierarchy",
    "consistency",
    "feedback",
    "affordance",
    "discoverability",
    "clarity",
    "focus",
    "simplicity",
)

EMBEDDING_SLICES: tuple[str, ...] = ("title", "overview", "guidelines", "full_content")


def extract_concepts(text: str) -> frozenset[str]:
    """Return the concept vocabulary terms mentioned in *text*."""
    lowered = text.lower()
    return frozenset(concept for concept in CONCEPT_VOCABULARY if concept in lowered)


def zero_vector(dim: int) -> np.ndarray:
    return np.zeros(dim, dtype=np.float32)


@dataclass(frozen=True)
class SectionEmbeddings:
    """Embeddings for the four text slices of a section."""

    title: np.ndarray
    overview: np.ndarray
    guidelines: np.ndarray
    full_content: np.ndarray

    @classmethod
    def zeros(cls, dim: int) -> "SectionEmbeddings":
        return cls(
            title=zero_vector(dim),
            overview=zero_vector(dim),
            guidelines=zero_vector(dim),
            full_content=zero_vector(dim),
        )


@dataclass(frozen=True)
class IndexMetadata:
    platform: Platform
    category: Category
    concepts: frozenset[str]
    quality_score: float
    last_updated: datetime


@dataclass(frozen=True)
class SemanticIndexEntry:
    """Precomputed embeddings and ranking metadata for one section."""

    section_id: str
    embeddings: SectionEmbeddings
    metadata: IndexMetadata
    content_sha256: str
    degraded: bool = False
    failed_slices: tuple[str, ...] = ()


class SemanticIndex:
    """Thread-safe mapping of section id to its published index entry."""

    def __init__(self) -> None:
        self._entries: dict[str, SemanticIndexEntry] = {}
        self._lock = threading.Lock()

    def publish(self, entry: SemanticIndexEntry) -> None:
        """Insert or atomically replace the entry for `entry.section_id`."""
        with self._lock:
            updated = dict(self._entries)
            updated[entry.section_id] = entry
            self._entries = updated

    def get(self, section_id: str) -> SemanticIndexEntry | None:
        return self._entries.get(section_id)

    def remove(self, section_id: str) -> bool:
        with self._lock:
            if section_id not in self._entries:
                return False
            updated = dict(self._entries)
            del updated[section_id]
            self._entries = updated
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries = {}

    def degraded_count(self) -> int:
        return sum(1 for entry in self._entries.values() if entry.degraded)

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SemanticIndexEntry]:
        return iter(list(self._entries.values()))
