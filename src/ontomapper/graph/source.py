"""
Graph sources: bulk-load an OntologyGraph from an edge table or a JSON file.
"""

__all__ = ["GraphSource", "JsonGraphSource", "graph_from_edges", "load_graph_json"]

import json
from pathlib import Path
from typing import Iterable, Optional, Protocol

import polars as pl

from ..errors import MalformedGraph
from .ontology import OntologyGraph


class GraphSource(Protocol):
    def load(self, ontology_id: str) -> OntologyGraph:
        ...


def graph_from_edges(
    name: str,
    start_index: int,
    length: int,
    edges: pl.DataFrame,
    roots: Optional[Iterable[int]] = None,
    parent_column: str = "parent",
    child_column: str = "child",
) -> OntologyGraph:
    """
    Build a graph from a (parent, child) edge table.

    Args:
        name: Ontology name
        start_index: First concept id of the ontology
        length: Number of concept ids in the ontology
        edges: One row per direct is-a edge
        roots: Top-level concepts; when omitted, every parent that never
            appears as a child is a root
        parent_column: Column holding parent ids
        child_column: Column holding child ids

    Returns:
        Validated OntologyGraph
    """
    missing = [c for c in (parent_column, child_column) if c not in edges.columns]
    if missing:
        raise MalformedGraph(f"{name}: edge table is missing columns: {missing}")

    edges = edges.select(
        pl.col(parent_column).cast(pl.Int64).alias("parent"),
        pl.col(child_column).cast(pl.Int64).alias("child"),
    ).drop_nulls()

    grouped = edges.group_by("parent", maintain_order=True).agg(pl.col("child"))
    adjacency = {parent: children for parent, children in grouped.iter_rows()}

    if roots is None:
        children = set(edges.get_column("child").to_list())
        roots = [p for p in adjacency if p not in children]

    return OntologyGraph(name, start_index, length, adjacency, roots)


class JsonGraphSource:
    """
    Load graphs from `<directory>/<ontology_id>.json`.

    File layout:
        {"name": "...", "start_index": 0, "length": 10,
         "roots": [0], "adjacency": {"0": [1, 2], "1": [3]}}
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, ontology_id: str) -> Path:
        return self.directory / f"{ontology_id}.json"

    def load(self, ontology_id: str) -> OntologyGraph:
        return load_graph_json(self.path_for(ontology_id))


def load_graph_json(path: str | Path) -> OntologyGraph:
    with open(path, "r") as f:
        data = json.load(f)
    try:
        adjacency = {int(k): v for k, v in data.get("adjacency", {}).items()}
        return OntologyGraph(
            data.get("name", Path(path).stem),
            data["start_index"],
            data["length"],
            adjacency,
            data["roots"],
        )
    except (KeyError, TypeError) as e:
        raise MalformedGraph(f"{path}: invalid graph file ({e})") from e
