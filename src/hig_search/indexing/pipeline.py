"""
Indexing pipeline orchestration.
"""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

import numpy as np

from ..embeddings import EmbeddingProvider
from ..models import Section
from .semantic_index import (
    EMBEDDING_SLICES,
    IndexMetadata,
    SectionEmbeddings,
    SemanticIndex,
    SemanticIndexEntry,
    extract_concepts,
    zero_vector,
)

logger = logging.getLogger(__name__)

DEFAULT_DIM = 768
DEFAULT_QUALITY_SCORE = 0.5
# Placeholder pages never count for more than this much quality.
FALLBACK_QUALITY_CAP = 0.2


@dataclass(frozen=True)
class IndexingResult:
    """Summary output for an indexing run."""

    indexed_sections: int
    degraded_sections: int
    failed_sections: int
    failed_ids: tuple[str, ...] = ()


class SectionIndexer:
    """Build semantic index entries for sections and publish them."""

    def __init__(
        self,
        index: SemanticIndex,
        embedding_provider: EmbeddingProvider | None = None,
        max_workers: int = 4,
    ) -> None:
        self.index = index
        self.embedding_provider = embedding_provider
        self._max_workers = max(max_workers, 1)

    @property
    def dim(self) -> int:
        if self.embedding_provider is None:
            return DEFAULT_DIM
        return self.embedding_provider.dim

    def provider_ready(self) -> bool:
        """Load the provider on first use; report whether it can embed."""
        if self.embedding_provider is None:
            return False
        return self.embedding_provider.load()

    def index_section(self, section: Section) -> SemanticIndexEntry:
        """Build a fresh entry for *section* and replace any previous one."""
        entry = self.build_entry(section)
        self.index.publish(entry)
        logger.debug(
            "Indexed section %s (%d concepts%s)",
            section.id,
            len(entry.metadata.concepts),
            ", degraded" if entry.degraded else "",
        )
        return entry

    def index_sections(self, sections: Iterable[Section]) -> IndexingResult:
        """Index many sections concurrently over a bounded worker pool."""
        pending = list(sections)
        if not pending:
            return IndexingResult(indexed_sections=0, degraded_sections=0, failed_sections=0)

        # Load once up front so workers don't race on the provider's first load.
        self.provider_ready()

        indexed = 0
        degraded = 0
        failed_ids: list[str] = []
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [(section, executor.submit(self.index_section, section)) for section in pending]
            for section, future in futures:
                try:
                    entry = future.result()
                except Exception as exc:
                    logger.warning("Failed to index section %s: %s", section.id, exc)
                    failed_ids.append(section.id)
                    continue
                indexed += 1
                if entry.degraded:
                    degraded += 1

        logger.info(
            "Indexed %d sections (%d degraded, %d failed)",
            indexed,
            degraded,
            len(failed_ids),
        )
        return IndexingResult(
            indexed_sections=indexed,
            degraded_sections=degraded,
            failed_sections=len(failed_ids),
            failed_ids=tuple(failed_ids),
        )

    def build_entry(self, section: Section) -> SemanticIndexEntry:
        embeddings, failed_slices, provider_ready = self._embed_slices(section)
        return SemanticIndexEntry(
            section_id=section.id,
            embeddings=embeddings,
            metadata=IndexMetadata(
                platform=section.platform,
                category=section.category,
                concepts=extract_concepts(section.content),
                quality_score=self._quality_score(section),
                last_updated=self._last_updated(section),
            ),
            content_sha256=self.fingerprint(section),
            degraded=not provider_ready or bool(failed_slices),
            failed_slices=failed_slices,
        )

    def embed_query(self, text: str) -> np.ndarray | None:
        """Embed a query. Returns None when no semantic signal is available."""
        if not self.provider_ready():
            return None
        try:
            values = self.embedding_provider.embed(text, task_type="RETRIEVAL_QUERY")
        except Exception as exc:
            logger.warning("Query embedding failed, scoring without semantics: %s", exc)
            return None
        return np.asarray(values, dtype=np.float32)

    def _embed_slices(
        self, section: Section
    ) -> tuple[SectionEmbeddings, tuple[str, ...], bool]:
        if not self.provider_ready():
            return SectionEmbeddings.zeros(self.dim), (), False

        texts = self._slice_texts(section)
        vectors: dict[str, np.ndarray] = {}
        failed: list[str] = []
        futures: dict[str, Future[list[float]]] = {}

        with ThreadPoolExecutor(max_workers=len(EMBEDDING_SLICES)) as executor:
            for name in EMBEDDING_SLICES:
                text = texts[name]
                if not text.strip():
                    vectors[name] = zero_vector(self.dim)
                    continue
                futures[name] = executor.submit(self.embedding_provider.embed, text)

            for name, future in futures.items():
                try:
                    vectors[name] = np.asarray(future.result(), dtype=np.float32)
                except Exception as exc:
                    logger.warning(
                        "Embedding %s slice of section %s failed: %s", name, section.id, exc
                    )
                    vectors[name] = zero_vector(self.dim)
                    failed.append(name)

        embeddings = SectionEmbeddings(
            title=vectors["title"],
            overview=vectors["overview"],
            guidelines=vectors["guidelines"],
            full_content=vectors["full_content"],
        )
        ordered_failures = tuple(name for name in EMBEDDING_SLICES if name in failed)
        return embeddings, ordered_failures, True

    @staticmethod
    def _slice_texts(section: Section) -> dict[str, str]:
        structured = section.structured_content
        return {
            "title": section.title,
            "overview": structured.overview if structured is not None else "",
            "guidelines": " ".join(structured.guidelines) if structured is not None else "",
            "full_content": section.content,
        }

    @staticmethod
    def _quality_score(section: Section) -> float:
        if section.quality is None:
            return DEFAULT_QUALITY_SCORE
        score = section.quality.score
        if section.quality.is_fallback_content:
            score = min(score, FALLBACK_QUALITY_CAP)
        return score

    @staticmethod
    def _last_updated(section: Section) -> datetime:
        if section.last_updated is None:
            return datetime.now(timezone.utc)
        if section.last_updated.tzinfo is None:
            return section.last_updated.replace(tzinfo=timezone.utc)
        return section.last_updated

    @staticmethod
    def fingerprint(section: Section) -> str:
        payload = section.model_dump_json()
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
