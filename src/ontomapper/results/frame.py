"""
Mapping tables - requires polars.

Conversion of search results to DataFrames, information-content pruning and
export.
"""

__all__ = [
    "MAPPING_SCHEMA",
    "EXPORT_FORMATS",
    "mappings_to_frame",
    "filter_informative",
    "read_mappings",
    "write_mappings",
]

from dataclasses import astuple
from pathlib import Path
from typing import Any, Callable, Dict, Iterable

import polars as pl

from ..config import CONFIG
from ..search.models import Mapping

MAPPING_SCHEMA: Dict[str, pl.DataType] = {
    "source_concept": pl.Int64,
    "source_info_content": pl.Float64,
    "dest_concept": pl.Int64,
    "dest_info_content": pl.Float64,
    "context_concept": pl.Int64,
    "context_info_content": pl.Float64,
    "bayes_factor": pl.Float64,
}

INFO_COLUMNS = ("source_info_content", "dest_info_content", "context_info_content")

EXPORT_FORMATS: Dict[str, Dict[str, Callable[..., Any]]] = {
    ".csv": {"write": lambda df, path: df.write_csv(path), "read": pl.read_csv},
    ".json": {"write": lambda df, path: df.write_json(path), "read": pl.read_json},
    ".parquet": {"write": lambda df, path: df.write_parquet(path), "read": pl.read_parquet},
}


def mappings_to_frame(mappings: Iterable[Mapping]) -> pl.DataFrame:
    """
    One row per mapping, in emission order.

    Example:
        >>> df = mappings_to_frame(result.mappings)
        >>> df.columns[:3]
        ['source_concept', 'source_info_content', 'dest_concept']
    """
    rows = [astuple(m) for m in mappings]
    if not rows:
        return pl.DataFrame(schema=MAPPING_SCHEMA)
    return pl.DataFrame(rows, schema=MAPPING_SCHEMA, orient="row")


def filter_informative(
    df: pl.DataFrame,
    cutoff: float = CONFIG["information_cutoff"],
) -> pl.DataFrame:
    """
    Keep mappings whose concepts are all specific enough.

    A row survives when each of its three information contents is strictly
    greater than cutoff × the column's maximum. Mappings between very
    general concepts (low information content) are dropped.

    Args:
        df: Mapping table as built by mappings_to_frame
        cutoff: Fraction of the per-column maximum, in [0, 1]

    Returns:
        Filtered DataFrame
    """
    if not 0 <= cutoff <= 1:
        raise ValueError(f"cutoff must be in [0, 1], got {cutoff}")
    if df.height == 0:
        return df

    conditions = [pl.col(c) > pl.col(c).max() * cutoff for c in INFO_COLUMNS]
    return df.filter(pl.all_horizontal(conditions))


def _format(path: Path) -> Dict[str, Callable[..., Any]]:
    fmt = EXPORT_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise ValueError(
            f"Unsupported mapping format {path.suffix!r}, "
            f"expected one of {sorted(EXPORT_FORMATS)}"
        )
    return fmt


def write_mappings(df: pl.DataFrame, path: str | Path) -> Path:
    """Write a mapping table; the format follows the file suffix."""
    path = Path(path)
    _format(path)["write"](df, path)
    return path


def read_mappings(path: str | Path) -> pl.DataFrame:
    path = Path(path)
    return _format(path)["read"](path)
