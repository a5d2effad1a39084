"""
In-memory inverted index implementing the count backend contract.

Every annotated element (a document, a record, a sample) carries a set of
concept ids. The index keeps one posting set per concept, so matching
queries are set intersections and differences.
"""

__all__ = ["InMemoryCountIndex", "read_annotations"]

from bisect import bisect_left
from collections import defaultdict
from pathlib import Path
from typing import Dict, Hashable, Iterable, Set, Tuple

import polars as pl


class InMemoryCountIndex:
    """
    Concept → annotated-elements index.

    Example:
        >>> index = InMemoryCountIndex([("doc1", 1), ("doc1", 10), ("doc2", 10)])
        >>> index.count(10)
        2
        >>> index.count_matching([10], [1])
        1
    """

    def __init__(self, annotations: Iterable[Tuple[Hashable, int]] = ()):
        postings: Dict[int, Set[Hashable]] = defaultdict(set)
        for element, concept in annotations:
            postings[int(concept)].add(element)
        self._postings = dict(postings)
        self._concepts = sorted(self._postings)

    @classmethod
    def from_frame(
        cls,
        df: pl.DataFrame,
        element_column: str = "element",
        concept_column: str = "concept",
    ) -> "InMemoryCountIndex":
        """Build the index from a two-column annotation table."""
        missing = [c for c in (element_column, concept_column) if c not in df.columns]
        if missing:
            raise ValueError(f"annotation table is missing columns: {missing}")
        pairs = (
            df.select(element_column, pl.col(concept_column).cast(pl.Int64))
            .drop_nulls()
            .unique()
        )
        return cls(pairs.iter_rows())

    def count(self, concept: int) -> int:
        return len(self._postings.get(int(concept), ()))

    def count_in_range(self, start: int, length: int) -> int:
        # A zero-length range is the single concept `start`
        stop = start + max(length, 1)
        lo = bisect_left(self._concepts, start)
        hi = bisect_left(self._concepts, stop)
        elements: Set[Hashable] = set()
        for concept in self._concepts[lo:hi]:
            elements |= self._postings[concept]
        return len(elements)

    def count_matching(self, required: Iterable[int], excluded: Iterable[int]) -> int:
        required = {int(c) for c in required}
        excluded = {int(c) for c in excluded}
        if not required:
            raise ValueError("count_matching needs at least one required concept")
        if required & excluded:
            return 0

        postings = sorted(
            (self._postings.get(c, set()) for c in required),
            key=len,
        )
        matched = set(postings[0])
        for posting in postings[1:]:
            matched &= posting
            if not matched:
                return 0
        for concept in excluded:
            matched -= self._postings.get(concept, set())
        return len(matched)


def read_annotations(path: str | Path) -> pl.DataFrame:
    """Read an (element, concept) table from csv, parquet or json."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix == ".json":
        return pl.read_json(path)
    if suffix in (".csv", ".tsv"):
        return pl.read_csv(path, separator="\t" if suffix == ".tsv" else ",")
    raise ValueError(f"Unsupported annotation format: {path.suffix}")
