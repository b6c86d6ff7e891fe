from datetime import datetime
from typing import Any

from hig_search.models import QualityMetrics, Section, StructuredContent


class FakeEmbeddingProvider:
    """Deterministic provider: one dimension per vocabulary term plus a bias."""

    VOCABULARY = ("button", "navigation", "accessibility", "color", "typography", "layout")

    def __init__(self, *, ready: bool = True, fail_on: str | None = None) -> None:
        self.dim = len(self.VOCABULARY) + 1
        self.ready = ready
        self.fail_on = fail_on
        self.loads = 0
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def load(self) -> bool:
        self.loads += 1
        return self.ready

    def is_ready(self) -> bool:
        return self.ready

    def embed(self, text: str, *, task_type: str = "RETRIEVAL_DOCUMENT") -> list[float]:
        self.calls.append((text, task_type))
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("embedding backend error")
        lowered = text.lower()
        return [1.0 if term in lowered else 0.0 for term in self.VOCABULARY] + [1.0]

    def close(self) -> None:
        self.closed = True


def make_section(
    section_id: str,
    title: str,
    *,
    platform: str = "iOS",
    category: str = "selection-and-input",
    content: str = "",
    structured: dict[str, Any] | None = None,
    quality: dict[str, Any] | None = None,
    last_updated: datetime | None = None,
) -> Section:
    return Section(
        id=section_id,
        title=title,
        url=f"https://developer.apple.com/design/human-interface-guidelines/{section_id}",
        platform=platform,
        category=category,
        content=content,
        structured_content=StructuredContent(**structured) if structured is not None else None,
        quality=QualityMetrics(**quality) if quality is not None else None,
        last_updated=last_updated,
    )
