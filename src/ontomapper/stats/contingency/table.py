"""
Contingency tables of ancestor × child co-occurrence under a context.

For k conditioning ancestors the table has 2·2^k cells. Instance i in
[0, 2^k) is a presence/absence pattern of the ancestors (bit j of i set =
ancestor j present):

    cell 2i + 1   context ∧ child  ∧ pattern i
    cell 2i       context ∧ ¬child ∧ pattern i

Cell 0 (no ancestor, no child) is never queried; it closes the table
against the context total:

    cell 0 = count(context) - Σ cells[1:]
"""

__all__ = ["ContingencyTableOracle", "instance_predicates"]

from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np

from ...errors import InvalidParameter, OracleUnavailable

if TYPE_CHECKING:
    from ...counts.backend import CountBackend


def instance_predicates(
    ancestors: Sequence[int],
    instance: int,
) -> tuple[list[int], list[int]]:
    """
    Split ancestors into (present, absent) according to an instance bitmask.

    Example:
        >>> instance_predicates([7, 8, 9], 0b101)
        ([7, 9], [8])
    """
    present = [a for bit, a in enumerate(ancestors) if instance >> bit & 1]
    absent = [a for bit, a in enumerate(ancestors) if not instance >> bit & 1]
    return present, absent


class ContingencyTableOracle:
    """
    Build contingency tables by issuing count queries against a backend.

    Any failing query aborts construction with OracleUnavailable; no partial
    table is ever returned.
    """

    def __init__(self, backend: "CountBackend"):
        self.backend = backend
        self.queries = 0

    def _query(self, name: str, *args) -> int:
        self.queries += 1
        try:
            value = getattr(self.backend, name)(*args)
            count = int(value)
        except OracleUnavailable:
            raise
        except Exception as e:
            raise OracleUnavailable(
                f"count backend {name}{args} failed: {type(e).__name__}: {e}"
            ) from e
        if count < 0:
            raise OracleUnavailable(f"count backend {name}{args} returned {value!r}")
        return count

    def concept_count(self, concept: int) -> int:
        return self._query("count", concept)

    def range_count(self, start: int, length: int) -> int:
        return self._query("count_in_range", start, length)

    def matching_count(self, required: Iterable[int], excluded: Iterable[int]) -> int:
        return self._query("count_matching", tuple(required), tuple(excluded))

    def build_table(
        self,
        ancestors: Sequence[int],
        child: int,
        context: int,
    ) -> np.ndarray:
        """
        Full 2·2^k contingency table for child given ancestors under context.

        Args:
            ancestors: The k conditioning concepts (k ≥ 1)
            child: Concept whose presence is the outcome
            context: Concept every counted element must carry

        Returns:
            int64 array of length 2·2^k

        Raises:
            InvalidParameter: If no ancestor is given
            OracleUnavailable: If any count query fails or returns a
                non-integer or negative count
        """
        ancestors = list(ancestors)
        if not ancestors:
            raise InvalidParameter("build_table needs at least one ancestor concept")

        instances = 2 ** len(ancestors)
        cells = [0] * (2 * instances)

        for instance in range(instances):
            present, absent = instance_predicates(ancestors, instance)
            cells[2 * instance + 1] = self.matching_count(
                [context, child, *present],
                absent,
            )
            if present:
                cells[2 * instance] = self.matching_count(
                    [context, *present],
                    [child, *absent],
                )

        context_total = self.concept_count(context)
        cells[0] = context_total - sum(cells[1:])
        return np.array(cells, dtype=np.int64)
