"""
Count backend contract.

The mapping search only ever reads co-occurrence counts through these three
queries. Implementations must be idempotent and free of visible side
effects; a failed query raises (any exception is reported to the search as
OracleUnavailable).
"""

__all__ = ["CountBackend"]

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class CountBackend(Protocol):
    """Counts of annotated elements, keyed by concept ids."""

    def count(self, concept: int) -> int:
        """Number of elements annotated with the concept."""
        ...

    def count_in_range(self, start: int, length: int) -> int:
        """Number of elements annotated with any concept in [start, start + length)."""
        ...

    def count_matching(self, required: Iterable[int], excluded: Iterable[int]) -> int:
        """Number of elements annotated with every required and no excluded concept."""
        ...
