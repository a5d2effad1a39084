"""
In-memory ontology graph.

An ontology is a DAG of concept ids occupying the contiguous range
[start_index, start_index + length). Adjacency points from parent to
children. The graph is validated once on construction and never mutated
afterwards, so searches may share it freely.
"""

__all__ = ["OntologyGraph", "order_by_length"]

from typing import Dict, Iterable, List, Mapping, Tuple

from ..errors import MalformedGraph

_VISITING = 1
_DONE = 2


def _unique(nodes: Iterable[int]) -> Tuple[int, ...]:
    # Deduplicate, keeping first-seen order
    return tuple(dict.fromkeys(int(n) for n in nodes))


class OntologyGraph:
    """
    Immutable concept hierarchy of one ontology.

    Example:
        >>> graph = OntologyGraph("chain", 1, 3, {1: [2], 2: [3]}, roots=[1])
        >>> graph.topological_layers()
        [frozenset({1}), frozenset({2}), frozenset({3})]
    """

    def __init__(
        self,
        name: str,
        start_index: int,
        length: int,
        adjacency: Mapping[int, Iterable[int]],
        roots: Iterable[int],
    ):
        if length < 0:
            raise MalformedGraph(f"{name}: negative concept range length {length}")
        self.name = name
        self.start_index = int(start_index)
        self.length = int(length)
        self._children: Dict[int, Tuple[int, ...]] = {
            int(parent): _unique(children) for parent, children in adjacency.items()
        }
        self.roots: Tuple[int, ...] = _unique(roots)

        self._check_acyclic()
        self._layers = self._compute_layers()
        self.reachable = frozenset(n for layer in self._layers for n in layer)
        self._check_range()
        self._parents = self._compute_parents()

    def __repr__(self) -> str:
        return (
            f"OntologyGraph({self.name!r}, start_index={self.start_index}, "
            f"length={self.length}, roots={len(self.roots)})"
        )

    def in_range(self, concept: int) -> bool:
        return self.start_index <= concept < self.start_index + self.length

    def children(self, node: int) -> Tuple[int, ...]:
        """Children of a node in insertion order (empty for leaves)."""
        return self._children.get(node, ())

    def parents(self, node: int) -> Tuple[int, ...]:
        """Parents of a node among the concepts reachable from the roots."""
        return self._parents.get(node, ())

    @property
    def entry_roots(self) -> Tuple[int, ...]:
        """Declared roots that are not also the child of a reachable concept."""
        return tuple(r for r in self.roots if r not in self._parents)

    def topological_layers(self) -> List[frozenset]:
        """
        Breadth-first layering from the roots.

        Layer 0 holds the roots; layer i+1 holds the children of layer i not
        seen in any earlier layer. A node reachable at several depths is
        placed in the layer where it is first discovered, so for DAGs with
        cross-level edges this is not a strict topological order.
        """
        return [frozenset(layer) for layer in self._layers]

    def all_concepts(self) -> List[int]:
        """Every concept reachable from the roots, layer by layer."""
        return [node for layer in self._layers for node in layer]

    def _compute_layers(self) -> List[Tuple[int, ...]]:
        layers = []
        visited = set(self.roots)
        layer = self.roots
        while layer:
            layers.append(layer)
            next_layer = {}
            for node in layer:
                for child in self.children(node):
                    if child not in visited:
                        next_layer[child] = None
            visited.update(next_layer)
            layer = tuple(next_layer)
        return layers

    def _compute_parents(self) -> Dict[int, Tuple[int, ...]]:
        parents: Dict[int, List[int]] = {}
        for node in self.all_concepts():
            for child in self.children(node):
                parents.setdefault(child, []).append(node)
        return {child: tuple(p) for child, p in parents.items()}

    def _check_acyclic(self):
        """Iterative three-colour DFS over every adjacency entry."""
        state: Dict[int, int] = {}
        for start in (*self.roots, *self._children):
            if start in state:
                continue
            state[start] = _VISITING
            stack = [(start, iter(self.children(start)))]
            while stack:
                node, pending = stack[-1]
                child = next(pending, None)
                if child is None:
                    state[node] = _DONE
                    stack.pop()
                    continue
                seen = state.get(child)
                if seen == _VISITING:
                    raise MalformedGraph(
                        f"{self.name}: cycle detected through concept {child}"
                    )
                if seen is None:
                    state[child] = _VISITING
                    stack.append((child, iter(self.children(child))))

    def _check_range(self):
        outside = sorted(n for n in self.reachable if not self.in_range(n))
        if outside:
            raise MalformedGraph(
                f"{self.name}: {len(outside)} concept(s) outside "
                f"[{self.start_index}, {self.start_index + self.length}), "
                f"first: {outside[:5]}"
            )


def order_by_length(
    first: OntologyGraph,
    second: OntologyGraph,
) -> Tuple[OntologyGraph, OntologyGraph]:
    """Return the two ontologies with the one spanning fewer concepts first."""
    if first.length > second.length:
        return second, first
    return first, second
