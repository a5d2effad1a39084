"""Mapping tables (requires polars)."""

from .frame import (
    EXPORT_FORMATS,
    MAPPING_SCHEMA,
    filter_informative,
    mappings_to_frame,
    read_mappings,
    write_mappings,
)

__all__ = [
    "MAPPING_SCHEMA",
    "EXPORT_FORMATS",
    "mappings_to_frame",
    "filter_informative",
    "read_mappings",
    "write_mappings",
]
