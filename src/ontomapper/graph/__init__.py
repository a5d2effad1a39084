"""
Ontology graphs.

- ontology: OntologyGraph, order_by_length
- source:   GraphSource, JsonGraphSource, graph_from_edges, load_graph_json
"""

from .ontology import OntologyGraph, order_by_length
from .source import GraphSource, JsonGraphSource, graph_from_edges, load_graph_json

__all__ = [
    "OntologyGraph",
    "order_by_length",
    "GraphSource",
    "JsonGraphSource",
    "graph_from_edges",
    "load_graph_json",
]
