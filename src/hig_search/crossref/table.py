"""
Versioned concept table linking design concepts to implementing symbols.

The default table ships as package data. An alternate document can be
supplied explicitly or through `HIG_SEARCH_MAPPINGS_PATH`.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import resolve_mappings_path

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_PRIORITY = 0.5
_PACKAGED_TABLE = "concept_mappings.json"


class MappingTableError(ValueError):
    """Raised when a concept table document cannot be loaded."""


class Implementation(BaseModel):
    """One technical symbol implementing a design concept"""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1)
    framework: str = Field(default="")
    platform: str = Field(default="")
    confidence: float = Field(ge=0.0, le=1.0)
    usage_notes: str = Field(default="")


class MappingTable(BaseModel):
    """Concepts, their implementations, related concepts and platform priorities"""

    model_config = ConfigDict(frozen=True)

    version: str = Field(min_length=1, description="Table format/content version")
    concepts: dict[str, list[Implementation]] = Field(default_factory=dict)
    relationships: dict[str, list[str]] = Field(default_factory=dict)
    platform_priorities: dict[str, float] = Field(default_factory=dict)

    @field_validator("concepts", "relationships")
    @classmethod
    def _lowercase_keys(cls, value: dict) -> dict:
        return {key.strip().lower(): item for key, item in value.items()}

    def implementations(self, concept: str) -> list[Implementation]:
        return self.concepts.get(concept, [])

    def related(self, concept: str) -> list[str]:
        return list(self.relationships.get(concept, []))

    def platform_priority(self, platform: str) -> float:
        return self.platform_priorities.get(platform, DEFAULT_PLATFORM_PRIORITY)


def load_mapping_table(path: str | Path | None = None) -> MappingTable:
    """Load the concept table from *path*, the environment, or package data."""
    resolved = resolve_mappings_path(str(path) if path is not None else None)
    if resolved is None:
        source = f"package data {_PACKAGED_TABLE}"
        try:
            raw = (resources.files(__package__) / "data" / _PACKAGED_TABLE).read_text(
                encoding="utf-8"
            )
        except OSError as exc:
            raise MappingTableError(f"Cannot read {source}: {exc}") from exc
    else:
        source = str(resolved)
        try:
            raw = resolved.read_text(encoding="utf-8")
        except OSError as exc:
            raise MappingTableError(f"Cannot read mapping table {source}: {exc}") from exc

    try:
        table = MappingTable.model_validate_json(raw)
    except ValidationError as exc:
        raise MappingTableError(f"Invalid mapping table {source}: {exc}") from exc

    logger.debug(
        "Loaded mapping table %s version %s (%d concepts)",
        source,
        table.version,
        len(table.concepts),
    )
    return table
