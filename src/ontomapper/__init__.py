"""
ontomapper - Context-sensitive mapping between ontologies.

Finds pairs of concepts from two ontologies that co-occur dependently on the
same annotated elements, conditioned on concepts of a third (context)
ontology. Dependence is decided by a Bayesian conditional-independence test
over co-occurrence counts; the search prunes whole destination subtrees once
a pair is found independent.

This package is organized into focused subpackages:

- graph/    Ontology DAGs
            - ontology: OntologyGraph, order_by_length
            - source: GraphSource, JsonGraphSource, graph_from_edges

- counts/   Count backends (requires polars for table loading)
            - backend: CountBackend protocol
            - memory: InMemoryCountIndex, read_annotations
            - retry: RetryingCountBackend

- stats/    Scoring (requires numpy)
            - bayesian: log_gamma, marginal_log_likelihood, bayes_factor,
              bdeu_score, ScoreType
            - contingency: ContingencyTableOracle
            - information: information_content

- search/   Branch-and-bound search
            - branch_bound: MappingSearch, brute_force_mappings
            - models: Mapping, SearchResult, SearchStats

- results/  Mapping tables (requires polars)
            - frame: mappings_to_frame, filter_informative, write_mappings

Usage:
    from ontomapper import InMemoryCountIndex, ContingencyTableOracle, MappingSearch
    from ontomapper.graph import load_graph_json

    oracle = ContingencyTableOracle(InMemoryCountIndex(pairs))
    result = MappingSearch(source, destination, context, oracle).run()
"""

__version__ = "0.0.1"

from ontomapper.config import CONFIG, SearchParameters
from ontomapper.counts import CountBackend, InMemoryCountIndex, RetryingCountBackend
from ontomapper.errors import (
    InvalidParameter,
    MalformedGraph,
    MappingError,
    OracleUnavailable,
    SearchFailed,
)
from ontomapper.graph import OntologyGraph, graph_from_edges, order_by_length
from ontomapper.search import (
    Mapping,
    MappingSearch,
    SearchResult,
    SearchStats,
    brute_force_mappings,
)
from ontomapper.stats import (
    ContingencyTableOracle,
    ScoreType,
    bayes_factor,
    information_content,
    log_gamma,
)

__all__ = [
    "__version__",
    # config
    "CONFIG",
    "SearchParameters",
    # errors
    "MappingError",
    "InvalidParameter",
    "OracleUnavailable",
    "MalformedGraph",
    "SearchFailed",
    # graph
    "OntologyGraph",
    "graph_from_edges",
    "order_by_length",
    # counts
    "CountBackend",
    "InMemoryCountIndex",
    "RetryingCountBackend",
    # stats
    "log_gamma",
    "bayes_factor",
    "ScoreType",
    "ContingencyTableOracle",
    "information_content",
    # search
    "MappingSearch",
    "brute_force_mappings",
    "Mapping",
    "SearchResult",
    "SearchStats",
]
