"""
Records produced by a mapping search.
"""

from dataclasses import dataclass, field
from typing import List, Set, Tuple

__all__ = ["Mapping", "SearchStats", "SearchResult"]


@dataclass(frozen=True)
class Mapping:
    """A (source, destination) pair found dependent under a context concept."""

    source_concept: int
    source_info_content: float
    dest_concept: int
    dest_info_content: float
    context_concept: int
    context_info_content: float
    bayes_factor: float

    @property
    def triple(self) -> Tuple[int, int, int]:
        """(source, destination, context) concept ids."""
        return (self.source_concept, self.dest_concept, self.context_concept)


@dataclass
class SearchStats:
    """Counters collected while searching."""

    tables_scored: int = 0
    accepted: int = 0
    pruned: int = 0
    skipped: int = 0
    contexts_expanded: int = 0
    sources_expanded: int = 0
    # Destination marks stored in memos, each source node storing only its own
    marks_memoized: int = 0


@dataclass
class SearchResult:
    """
    Mappings emitted by one run, in emission order.

    status is "completed", "cancelled" or "failed". Mappings already emitted
    by a cancelled or failed run remain valid.
    """

    mappings: List[Mapping] = field(default_factory=list)
    stats: SearchStats = field(default_factory=SearchStats)
    status: str = "running"

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    def triples(self) -> Set[Tuple[int, int, int]]:
        return {m.triple for m in self.mappings}
