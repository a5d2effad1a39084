"""
Branch-and-bound mapping search over source, destination and context graphs.

The context graph is walked depth first. Under every context node the source
graph is walked depth first, and for every source node the destination graph
is walked level by level, scoring each (source, destination, context) triple
with the conditional-independence test:

- score ≤ min_threshold: the destination node is independent of the source
  under this context. It is marked and its whole subtree is skipped.
- score > accept_threshold: a Mapping is emitted and the children are scored.
- otherwise the result is undecided and the children are scored.

Marked sets are reused along both walks. Descending the source graph, a
source node inherits the marks of its source ancestors. Descending the
context graph, a source node also inherits what was marked for the same
source node under every coarser context on the current path (memoization).
Each source node stores only its own marks and a link to its parent's, so a
memo holds every mark once however deep the source graph is.
Both reuses rely on dependence never strengthening as concepts get more
specific.

All walks use explicit stacks and queues; ontologies routinely nest deeper
than the interpreter's recursion limit.
"""

__all__ = ["MappingSearch", "brute_force_mappings"]

from typing import (
    Callable,
    Container,
    Dict,
    FrozenSet,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Protocol,
    Set,
)

import numpy as np
from loguru import logger

from ..config import SearchParameters
from ..errors import MappingError, SearchFailed
from ..graph.ontology import OntologyGraph
from ..stats.contingency.table import ContingencyTableOracle
from ..stats.information import information_content
from .models import Mapping, SearchResult

_EMPTY: FrozenSet[int] = frozenset()


class MarkLevel(NamedTuple):
    """Destinations marked by one source node, linked to its parent on the path."""

    marks: FrozenSet[int]
    parent: Optional["MarkLevel"]


class CancelToken(Protocol):
    def is_set(self) -> bool:
        ...


class _Cancelled(Exception):
    pass


class MappingSearch:
    """
    Context-sensitive mapping search.

    Args:
        source: Ontology whose concepts are the conditioning ancestors
        destination: Ontology whose concepts are the test outcome
        context: Ontology whose concepts condition every count
        oracle: Contingency table oracle over a count backend
        parameters: Thresholds, smoothing and score type
        information: information_content(count, total) for Mapping scores
        scorer: Optional override of the table score, called as
            scorer(table, alpha); defaults to parameters.score_type

    Example:
        >>> search = MappingSearch(source, destination, context, oracle)
        >>> result = search.run()
        >>> result.status, len(result.mappings)
        ('completed', 42)
    """

    def __init__(
        self,
        source: OntologyGraph,
        destination: OntologyGraph,
        context: OntologyGraph,
        oracle: ContingencyTableOracle,
        parameters: Optional[SearchParameters] = None,
        information: Callable[[int, int], float] = information_content,
        scorer: Optional[Callable[[np.ndarray, float], float]] = None,
    ):
        self.source = source
        self.destination = destination
        self.context = context
        self.oracle = oracle
        self.parameters = parameters or SearchParameters()
        self.information = information
        self.scorer = scorer or self.parameters.score_type.score

    def run(self, cancel: Optional[CancelToken] = None) -> SearchResult:
        """
        Run the branch-and-bound search.

        Args:
            cancel: Anything with is_set(), e.g. threading.Event; checked
                every time a context or source node is popped

        Returns:
            SearchResult with status "completed" or "cancelled"

        Raises:
            SearchFailed: If the count backend fails; the partial result
                is attached as ``exc.result``
        """
        return _SearchRun(self, cancel).execute(exhaustive=False)

    def run_exhaustive(self, cancel: Optional[CancelToken] = None) -> SearchResult:
        """Score every context × source × destination triple, without pruning."""
        return _SearchRun(self, cancel).execute(exhaustive=True)


def brute_force_mappings(
    source: OntologyGraph,
    destination: OntologyGraph,
    context: OntologyGraph,
    oracle: ContingencyTableOracle,
    parameters: Optional[SearchParameters] = None,
    **kwargs,
) -> SearchResult:
    """Exhaustive counterpart of MappingSearch.run (worst case |S|·|C|·|D| tables)."""
    search = MappingSearch(source, destination, context, oracle, parameters, **kwargs)
    return search.run_exhaustive()


class _SearchRun:
    """State of a single run: result, count caches and the context memo path."""

    def __init__(self, search: MappingSearch, cancel: Optional[CancelToken]):
        self.search = search
        self.parameters = search.parameters
        self.cancel = cancel
        self.result = SearchResult()
        self.stats = self.result.stats
        self._totals: Dict[str, int] = {}
        self._concept_counts: Dict[int, int] = {}
        # One memo (source node -> its mark level) per context node on the path
        self._memo_path: List[Dict[int, MarkLevel]] = []

    def execute(self, exhaustive: bool) -> SearchResult:
        s = self.search
        logger.info(
            f"Mapping {s.source.name} → {s.destination.name} "
            f"under {s.context.name} ({'exhaustive' if exhaustive else 'branch and bound'}, "
            f"alpha={self.parameters.alpha}, min={self.parameters.min_threshold}, "
            f"accept={self.parameters.accept_threshold})"
        )
        try:
            self._totals = {
                role: s.oracle.range_count(graph.start_index, graph.length)
                for role, graph in (
                    ("source", s.source),
                    ("destination", s.destination),
                    ("context", s.context),
                )
            }
            if exhaustive:
                self._walk_exhaustive()
            else:
                self._walk_contexts()
        except _Cancelled:
            self.result.status = "cancelled"
            logger.warning(
                f"Search cancelled after {self.stats.tables_scored} tables, "
                f"{len(self.result.mappings)} mappings kept"
            )
            return self.result
        except MappingError as e:
            self.result.status = "failed"
            logger.error(
                f"Search failed after {self.stats.tables_scored} tables "
                f"({len(self.result.mappings)} mappings emitted): {e}"
            )
            raise SearchFailed(f"mapping search failed: {e}", result=self.result) from e

        self.result.status = "completed"
        logger.info(
            f"Search completed: {len(self.result.mappings)} mappings, "
            f"{self.stats.tables_scored} tables scored, "
            f"{self.stats.pruned} pruned, {self.stats.skipped} skipped"
        )
        return self.result

    def _check_cancel(self):
        if self.cancel is not None and self.cancel.is_set():
            raise _Cancelled()

    @staticmethod
    def _push(
        stack: List[int],
        on_stack: Set[int],
        nodes: Iterable[int],
        expanded: Set[int],
    ):
        # Reversed so the first child is popped first
        for node in reversed(tuple(nodes)):
            if node not in expanded and node not in on_stack:
                stack.append(node)
                on_stack.add(node)

    def _walk_contexts(self):
        graph = self.search.context
        stack: List[int] = []
        on_stack: Set[int] = set()
        expanded: Set[int] = set()
        self._push(stack, on_stack, graph.roots, expanded)

        while stack:
            self._check_cancel()
            node = stack[-1]
            if node in expanded:
                stack.pop()
                on_stack.discard(node)
                self._memo_path.pop()
                continue

            logger.debug(f"Context {node}: depth {len(self._memo_path)}")
            self._memo_path.append(self._walk_sources(node))
            self.stats.contexts_expanded += 1
            self._push(stack, on_stack, graph.children(node), expanded)
            expanded.add(node)

    def _inherited_marks(self, source_node: int) -> FrozenSet[int]:
        if not self.parameters.memoize:
            return _EMPTY
        inherited: Set[int] = set()
        for memo in self._memo_path:
            level = memo.get(source_node)
            while level is not None:
                inherited.update(level.marks)
                level = level.parent
        return frozenset(inherited)

    def _walk_sources(self, context_node: int) -> Dict[int, MarkLevel]:
        graph = self.search.source
        entry_roots = self.search.destination.entry_roots
        memo: Dict[int, MarkLevel] = {}

        stack: List[int] = []
        on_stack: Set[int] = set()
        expanded: Set[int] = set()
        # Levels of the source nodes on the current path, root first, and how
        # many of them mark each destination node
        path: List[MarkLevel] = []
        path_counts: Dict[int, int] = {}
        self._push(stack, on_stack, graph.roots, expanded)

        while stack:
            self._check_cancel()
            node = stack[-1]
            if node in expanded:
                stack.pop()
                on_stack.discard(node)
                for mark in path.pop().marks:
                    path_counts[mark] -= 1
                    if not path_counts[mark]:
                        del path_counts[mark]
                continue

            inherited = self._inherited_marks(node)
            marked = self._compute_marked_nodes(node, context_node, path_counts, inherited)

            level = MarkLevel(frozenset(marked), path[-1] if path else None)
            path.append(level)
            memo[node] = level
            for mark in marked:
                path_counts[mark] = path_counts.get(mark, 0) + 1
            self.stats.sources_expanded += 1
            self.stats.marks_memoized += len(marked)

            if all(r in path_counts or r in inherited for r in entry_roots):
                logger.debug(
                    f"Context {context_node}, source {node}: every destination "
                    f"root is independent, not descending"
                )
            else:
                self._push(stack, on_stack, graph.children(node), expanded)
            expanded.add(node)

        return memo

    def _compute_marked_nodes(
        self,
        source_node: int,
        context_node: int,
        path_marks: Container[int],
        inherited: Container[int],
    ) -> Set[int]:
        """
        Level-by-level walk of the destination graph for one (source, context).

        A node is scored only once all of its parents were scored and
        expanded, so nothing below a marked or skipped node is ever scored.
        Declared roots that have parents wait for them like any other node.

        Returns:
            Destination nodes marked independent in this walk
        """
        graph = self.search.destination
        min_threshold = self.parameters.min_threshold
        accept_threshold = self.parameters.accept_threshold

        marked: Set[int] = set()
        waiting: Dict[int, int] = {}
        frontier = list(graph.entry_roots)
        seen = set(frontier)

        while frontier:
            next_frontier = []
            for node in frontier:
                if node in path_marks or node in inherited:
                    self.stats.skipped += 1
                    continue

                score = self._score(source_node, node, context_node)
                if score <= min_threshold:
                    marked.add(node)
                    self.stats.pruned += 1
                    continue
                if score > accept_threshold:
                    self._emit(source_node, node, context_node, score)

                for child in graph.children(node):
                    if child in seen:
                        continue
                    left = waiting.get(child, len(graph.parents(child))) - 1
                    if left > 0:
                        waiting[child] = left
                    else:
                        waiting.pop(child, None)
                        seen.add(child)
                        next_frontier.append(child)
            frontier = next_frontier

        return marked

    def _walk_exhaustive(self):
        s = self.search
        destinations = s.destination.all_concepts()
        for context_node in s.context.all_concepts():
            self._check_cancel()
            for source_node in s.source.all_concepts():
                self._check_cancel()
                for dest_node in destinations:
                    score = self._score(source_node, dest_node, context_node)
                    if score > self.parameters.accept_threshold:
                        self._emit(source_node, dest_node, context_node, score)

    def _score(self, source_node: int, dest_node: int, context_node: int) -> float:
        table = self.search.oracle.build_table([source_node], dest_node, context_node)
        self.stats.tables_scored += 1
        return float(self.search.scorer(table, self.parameters.alpha))

    def _concept_count(self, concept: int) -> int:
        if concept not in self._concept_counts:
            self._concept_counts[concept] = self.search.oracle.concept_count(concept)
        return self._concept_counts[concept]

    def _emit(self, source_node: int, dest_node: int, context_node: int, score: float):
        information = self.search.information
        mapping = Mapping(
            source_concept=source_node,
            source_info_content=float(
                information(self._concept_count(source_node), self._totals["source"])
            ),
            dest_concept=dest_node,
            dest_info_content=float(
                information(self._concept_count(dest_node), self._totals["destination"])
            ),
            context_concept=context_node,
            context_info_content=float(
                information(self._concept_count(context_node), self._totals["context"])
            ),
            bayes_factor=score,
        )
        self.result.mappings.append(mapping)
        self.stats.accepted += 1
        logger.debug(
            f"Mapping {source_node} → {dest_node} | context {context_node}: {score:.3f}"
        )
