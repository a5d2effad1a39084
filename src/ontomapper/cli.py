"""
Command line interface for ontomapper.

Usage:
    ontomapper run SOURCE.json DESTINATION.json CONTEXT.json ANNOTATIONS.csv [--output mappings.csv]
    ontomapper brute_force SOURCE.json DESTINATION.json CONTEXT.json ANNOTATIONS.csv
    ontomapper filter mappings.csv [--cutoff 0.5] [--output filtered.csv]
    ontomapper layers GRAPH.json

Graph files use the JsonGraphSource layout; the annotation table has one
(element, concept) pair per row.
"""

import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional, Union

import fire
from loguru import logger

from .config import CONFIG, SearchParameters
from .counts import InMemoryCountIndex, RetryingCountBackend, read_annotations
from .errors import SearchFailed
from .graph import load_graph_json, order_by_length
from .results import filter_informative, mappings_to_frame, read_mappings, write_mappings
from .search import MappingSearch
from .stats.contingency import ContingencyTableOracle

__all__ = ["main", "run", "brute_force", "filter_mappings", "layers"]

PathLike = Union[str, Path]


def _configure_logging(level: str):
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _build_search(
    source: PathLike,
    destination: PathLike,
    context: PathLike,
    annotations: PathLike,
    alpha: float,
    min_threshold: float,
    accept_threshold: float,
    score_type: str,
    memoize: bool,
    smaller_source_first: bool,
    retries: int,
) -> MappingSearch:
    source_graph = load_graph_json(source)
    destination_graph = load_graph_json(destination)
    context_graph = load_graph_json(context)
    if smaller_source_first:
        source_graph, destination_graph = order_by_length(source_graph, destination_graph)
    logger.info(
        f"Loaded {source_graph.name} ({len(source_graph.reachable)} concepts), "
        f"{destination_graph.name} ({len(destination_graph.reachable)}), "
        f"{context_graph.name} ({len(context_graph.reachable)})"
    )

    index = InMemoryCountIndex.from_frame(read_annotations(annotations))
    backend = RetryingCountBackend(index, max_retries=retries)
    parameters = SearchParameters(
        alpha=alpha,
        min_threshold=min_threshold,
        accept_threshold=accept_threshold,
        score_type=score_type,
        memoize=memoize,
    )
    return MappingSearch(
        source_graph,
        destination_graph,
        context_graph,
        ContingencyTableOracle(backend),
        parameters,
    )


def _execute(search: MappingSearch, output: PathLike, exhaustive: bool) -> str:
    # Ctrl-C stops the walk at the next node; mappings found so far are written
    cancel = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda *_: cancel.set())
    failed = False
    try:
        if exhaustive:
            result = search.run_exhaustive(cancel=cancel)
        else:
            result = search.run(cancel=cancel)
    except SearchFailed as e:
        result = e.result
        failed = True
    finally:
        signal.signal(signal.SIGINT, previous)

    path = write_mappings(mappings_to_frame(result.mappings), output)
    logger.info(f"Wrote {len(result.mappings)} mappings ({result.status}) to {path}")
    if failed:
        raise SystemExit(1)
    return str(path)


def run(
    source: PathLike,
    destination: PathLike,
    context: PathLike,
    annotations: PathLike,
    output: PathLike = "mappings.csv",
    alpha: float = CONFIG["alpha"],
    min_threshold: float = CONFIG["min_threshold"],
    accept_threshold: float = CONFIG["accept_threshold"],
    score_type: str = CONFIG["score_type"],
    memoize: bool = CONFIG["memoize"],
    smaller_source_first: bool = False,
    retries: int = CONFIG["max_retries"],
    log_level: str = CONFIG["log_level"],
) -> str:
    """Branch-and-bound mapping search; writes the mapping table to output."""
    _configure_logging(log_level)
    search = _build_search(
        source, destination, context, annotations,
        alpha, min_threshold, accept_threshold, score_type,
        memoize, smaller_source_first, retries,
    )
    return _execute(search, output, exhaustive=False)


def brute_force(
    source: PathLike,
    destination: PathLike,
    context: PathLike,
    annotations: PathLike,
    output: PathLike = "mappings_brute_force.csv",
    alpha: float = CONFIG["alpha"],
    accept_threshold: float = CONFIG["accept_threshold"],
    score_type: str = CONFIG["score_type"],
    smaller_source_first: bool = False,
    retries: int = CONFIG["max_retries"],
    log_level: str = CONFIG["log_level"],
) -> str:
    """Score every triple without pruning; slow, meant for cross-checks."""
    _configure_logging(log_level)
    search = _build_search(
        source, destination, context, annotations,
        alpha, min(CONFIG["min_threshold"], accept_threshold), accept_threshold,
        score_type, False, smaller_source_first, retries,
    )
    return _execute(search, output, exhaustive=True)


def filter_mappings(
    mappings: PathLike,
    output: Optional[PathLike] = None,
    cutoff: float = CONFIG["information_cutoff"],
    log_level: str = CONFIG["log_level"],
) -> str:
    """Drop mappings between general concepts (low information content)."""
    _configure_logging(log_level)
    mappings = Path(mappings)
    df = read_mappings(mappings)
    kept = filter_informative(df, cutoff)
    logger.info(f"Kept {kept.height} of {df.height} mappings (cutoff {cutoff})")
    if output is None:
        output = mappings.with_name(f"{mappings.stem}_filtered{mappings.suffix}")
    return str(write_mappings(kept, output))


def layers(graph: PathLike) -> List[int]:
    """Number of concepts in each breadth-first layer of a graph file."""
    return [len(layer) for layer in load_graph_json(graph).topological_layers()]


def main():
    fire.Fire(
        {
            "run": run,
            "brute_force": brute_force,
            "filter": filter_mappings,
            "layers": layers,
        }
    )


if __name__ == "__main__":
    main()
