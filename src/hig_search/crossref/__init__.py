"""Design concept to technical symbol cross-references."""

from .mapping import (
    CrossReferenceMapper,
    ValidationReport,
    find_cross_references,
    get_component_mapping,
    get_mapper,
    normalize_component_name,
    reset_mapper,
)
from .table import MappingTable, MappingTableError, load_mapping_table

__all__ = [
    "CrossReferenceMapper",
    "ValidationReport",
    "find_cross_references",
    "get_component_mapping",
    "get_mapper",
    "normalize_component_name",
    "reset_mapper",
    "MappingTable",
    "MappingTableError",
    "load_mapping_table",
]
