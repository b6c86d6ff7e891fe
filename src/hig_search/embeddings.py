"""
Embedding provider for vector-based semantic scoring.

Wraps the Google GenAI embedding API behind a small lifecycle interface
(`load` / `is_ready` / `embed` / `close`) so the indexer and the search engine
can receive any provider, including deterministic fakes in tests. Loading is a
one-time operation guarded by a timeout; a provider that fails to load stays
unavailable for the rest of the process and callers degrade to zero vectors.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Literal, Protocol, TypeAlias

from google.genai import Client as GenAIClient

from .config import semantic_disabled

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768
_DEFAULT_RPM = 60
_DEFAULT_LOAD_TIMEOUT = 8.0

ProviderState: TypeAlias = Literal["unloaded", "ready", "unavailable", "closed"]


class ProviderUnavailable(RuntimeError):
    """Raised when embeddings are requested from a provider that is not ready."""


class EmbeddingProvider(Protocol):
    """Protocol for text embedding backends used by indexing and search."""

    dim: int

    def load(self) -> bool:
        """Initialize the backend once. Return True when ready."""

    def is_ready(self) -> bool:
        """Return True when `embed` can be called."""

    def embed(self, text: str, *, task_type: str = "RETRIEVAL_DOCUMENT") -> list[float]:
        """Return a `dim`-length vector for *text*."""

    def close(self) -> None:
        """Release backend resources."""


class RateLimiter:
    """
    Fixed-window request counter.

    When the window's budget is spent, `acquire` blocks until the window
    resets instead of failing the request.
    """

    def __init__(
        self,
        requests_per_minute: int,
        *,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be > 0")
        self.requests_per_minute = requests_per_minute
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._window_start = clock()
        self._count = 0

    def acquire(self) -> float:
        """Reserve one request slot. Returns the number of seconds waited."""
        waited = 0.0
        with self._lock:
            now = self._clock()
            if now - self._window_start >= self.window_seconds:
                self._window_start = now
                self._count = 0
            if self._count >= self.requests_per_minute:
                waited = max(self.window_seconds - (now - self._window_start), 0.0)
                if waited > 0:
                    logger.info("Embedding rate limit reached, waiting %.1fs", waited)
                    self._sleep(waited)
                self._window_start = self._clock()
                self._count = 0
            self._count += 1
        return waited

    @property
    def remaining(self) -> int:
        with self._lock:
            if self._clock() - self._window_start >= self.window_seconds:
                return self.requests_per_minute
            return max(self.requests_per_minute - self._count, 0)


class GenAIEmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        requests_per_minute: int | None = None,
        load_timeout: float | None = None,
        client: Any | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.model = model or os.getenv("HIG_SEARCH_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("HIG_SEARCH_EMBEDDING_DIM", str(_DEFAULT_DIM)))
        self.load_timeout = load_timeout or float(
            os.getenv("HIG_SEARCH_EMBEDDING_LOAD_TIMEOUT", str(_DEFAULT_LOAD_TIMEOUT))
        )
        rpm = requests_per_minute or int(os.getenv("HIG_SEARCH_EMBEDDING_RPM", str(_DEFAULT_RPM)))
        self.rate_limiter = rate_limiter or RateLimiter(rpm)

        self._api_key = api_key
        self._client = client
        self._state: ProviderState = "unloaded"
        self._lock = threading.Lock()

    @property
    def state(self) -> ProviderState:
        return self._state

    def load(self) -> bool:
        with self._lock:
            if self._state != "unloaded":
                return self._state == "ready"
            if semantic_disabled():
                logger.info("Semantic scoring disabled via environment")
                self._state = "unavailable"
                return False

            executor = ThreadPoolExecutor(max_workers=1)
            future = executor.submit(self._initialize)
            try:
                future.result(timeout=self.load_timeout)
            except FutureTimeoutError:
                logger.warning(
                    "Embedding provider load timed out after %.1fs, using lexical ranking only",
                    self.load_timeout,
                )
                self._state = "unavailable"
            except Exception as exc:
                logger.warning("Embedding provider unavailable, using lexical ranking only: %s", exc)
                self._state = "unavailable"
            else:
                logger.info("Embedding provider ready (model=%s, dim=%d)", self.model, self.dim)
                self._state = "ready"
            finally:
                executor.shutdown(wait=False, cancel_futures=True)
            return self._state == "ready"

    def is_ready(self) -> bool:
        return self._state == "ready"

    def embed(self, text: str, *, task_type: str = "RETRIEVAL_DOCUMENT") -> list[float]:
        """Embed a single text. Empty text maps to the zero vector without an API call."""
        if not self.is_ready():
            raise ProviderUnavailable(f"Embedding provider is {self._state}")
        if not text.strip():
            return [0.0] * self.dim

        self.rate_limiter.acquire()
        result = self._client.models.embed_content(
            model=self.model,
            contents=[text],
            config={
                "task_type": task_type,
                "output_dimensionality": self.dim,
            },
        )
        return list(result.embeddings[0].values)

    def embed_query(self, query: str) -> list[float]:
        """Embed a single query text for retrieval."""
        return self.embed(query, task_type="RETRIEVAL_QUERY")

    def close(self) -> None:
        with self._lock:
            closer = getattr(self._client, "close", None)
            if callable(closer):
                closer()
            self._client = None
            self._state = "closed"

    def _initialize(self) -> None:
        if self._client is None:
            resolved_key = self._api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(api_key=resolved_key)
        # Probe once so a bad key or model surfaces during load, not mid-index.
        self.rate_limiter.acquire()
        self._client.models.embed_content(
            model=self.model,
            contents=["ready"],
            config={
                "task_type": "RETRIEVAL_QUERY",
                "output_dimensionality": self.dim,
            },
        )
