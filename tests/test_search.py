import math
import threading

import pytest

from ontomapper.config import SearchParameters
from ontomapper.counts import InMemoryCountIndex
from ontomapper.errors import OracleUnavailable, SearchFailed
from ontomapper.graph import OntologyGraph
from ontomapper.search import Mapping, MappingSearch, brute_force_mappings
from ontomapper.stats.contingency import ContingencyTableOracle

PARAMETERS = SearchParameters(min_threshold=0.0, accept_threshold=5.0)

SCENARIO_SCORES = {
    (1, 100, 10): 8.0,
    (1, 101, 10): -2.0,
    (1, 102, 10): -2.0,
}


def _search(source, destination, context, oracle, parameters=PARAMETERS):
    return MappingSearch(
        source, destination, context, oracle, parameters, scorer=oracle.score
    )


def test_end_to_end_single_mapping(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle(SCENARIO_SCORES)
    result = _search(source_graph, destination_graph, context_graph, oracle).run()

    ic = -math.log(10 / 100)
    assert result.status == "completed"
    assert result.mappings == [Mapping(1, ic, 100, ic, 10, ic, 8.0)]
    assert oracle.queried == [
        (1, 100, 10),
        (1, 101, 10),
        (1, 102, 10),
        (2, 100, 10),
    ]
    assert result.stats.pruned == 2
    assert result.stats.skipped == 2
    assert result.stats.tables_scored == 4


def test_source_child_skips_nodes_marked_under_parent(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle(SCENARIO_SCORES)
    _search(source_graph, destination_graph, context_graph, oracle).run()

    assert (2, 101, 10) not in oracle.queried
    assert (2, 102, 10) not in oracle.queried


def test_finer_context_reuses_marks_of_coarser_context(
    scripted_oracle, source_graph, destination_graph
):
    context = OntologyGraph("context", 10, 2, {10: [11]}, roots=[10])
    oracle = scripted_oracle(SCENARIO_SCORES)
    result = _search(source_graph, destination_graph, context, oracle).run()

    assert result.triples() == {(1, 100, 10)}
    under_11 = [t for t in oracle.queried if t[2] == 11]
    assert under_11 == [(1, 100, 11), (2, 100, 11)]


def test_sibling_context_does_not_inherit_marks(scripted_oracle, source_graph, destination_graph):
    # 10 → {11, 12}, 11 → 13
    context = OntologyGraph("context", 10, 4, {10: [11, 12], 11: [13]}, roots=[10])
    oracle = scripted_oracle({(1, 101, 11): -2.0})
    _search(source_graph, destination_graph, context, oracle).run()

    # marked under 11, so skipped below it
    assert (1, 101, 13) not in oracle.queried
    assert (2, 101, 13) not in oracle.queried
    assert (1, 102, 13) in oracle.queried
    # 12 is a sibling of 11, not a refinement
    assert (1, 101, 12) in oracle.queried
    assert (2, 101, 12) in oracle.queried


def test_memoization_disabled_queries_more(scripted_oracle, source_graph, destination_graph):
    context = OntologyGraph("context", 10, 2, {10: [11]}, roots=[10])
    oracle = scripted_oracle(SCENARIO_SCORES, key=lambda t: (t[0], t[1], 10))
    parameters = SearchParameters(memoize=False)
    result = _search(source_graph, destination_graph, context, oracle, parameters).run()

    assert (1, 101, 11) in oracle.queried
    assert result.triples() == {(1, 100, 10), (1, 100, 11)}


def test_memoization_does_not_change_mappings(scripted_oracle):
    source = OntologyGraph("source", 1, 4, {1: [2, 3], 2: [4], 3: [4]}, roots=[1])
    destination = OntologyGraph(
        "destination", 100, 6, {100: [101, 102], 101: [103, 104], 102: [105]}, roots=[100]
    )
    context = OntologyGraph("context", 10, 4, {10: [11, 12], 11: [13]}, roots=[10])
    # Context-independent scores: dependence never strengthens under a finer context
    scores = {
        (1, 100): 9.0,
        (1, 101): 6.0,
        (1, 102): -1.0,
        (2, 103): 7.0,
        (2, 104): -3.0,
        (3, 101): -0.5,
        (4, 100): 12.0,
    }

    def key(triple):
        return triple[:2]

    results = {}
    for memoize in (True, False):
        oracle = scripted_oracle(scores, key=key)
        search = _search(
            source, destination, context, oracle, SearchParameters(memoize=memoize)
        )
        results[memoize] = (search.run(), len(oracle.queried))

    (with_memo, memo_queries), (without_memo, plain_queries) = results[True], results[False]
    assert with_memo.triples() == without_memo.triples()
    assert with_memo.triples()
    assert memo_queries < plain_queries


def test_pruned_node_descendants_never_queried(scripted_oracle, source_graph, context_graph):
    # 200 → 201 → 202 plus the cross-level edge 200 → 202
    destination = OntologyGraph(
        "destination", 200, 3, {200: [201, 202], 201: [202]}, roots=[200]
    )
    oracle = scripted_oracle({(1, 201, 10): -1.0})
    _search(source_graph, destination, context_graph, oracle).run()

    assert (1, 201, 10) in oracle.queried
    assert (1, 202, 10) not in oracle.queried


def test_pruning_holds_across_roots(scripted_oracle, source_graph, context_graph):
    # 300 → 302 and 301 → 303 → 302
    destination = OntologyGraph(
        "destination", 300, 4, {300: [302], 301: [303], 303: [302]}, roots=[300, 301]
    )
    oracle = scripted_oracle({(1, 300, 10): 9.0, (1, 303, 10): -1.0})
    result = _search(source_graph, destination, context_graph, oracle).run()

    assert (1, 302, 10) not in oracle.queried
    assert (1, 300, 10) in result.triples()


def test_root_with_parent_waits_for_it(scripted_oracle, source_graph, context_graph):
    # 201 is declared a root but is also a child of 200
    destination = OntologyGraph("destination", 200, 2, {200: [201]}, roots=[200, 201])
    oracle = scripted_oracle({(1, 200, 10): -1.0})
    _search(source_graph, destination, context_graph, oracle).run()

    assert oracle.queried == [(1, 200, 10)]


def test_root_with_parent_scored_after_it(scripted_oracle, source_graph, context_graph):
    destination = OntologyGraph("destination", 200, 2, {200: [201]}, roots=[201, 200])
    oracle = scripted_oracle()
    _search(source_graph, destination, context_graph, oracle).run()

    assert [t for t in oracle.queried if t[0] == 1] == [(1, 200, 10), (1, 201, 10)]


def test_memo_stores_each_mark_once_on_deep_source(scripted_oracle, context_graph):
    depth = 300
    source = OntologyGraph(
        "source", 1, depth, {i: [i + 1] for i in range(1, depth)}, roots=[1]
    )
    # One destination root per source node; source i marks root 1000 + i
    destination = OntologyGraph(
        "destination", 1001, depth, {}, roots=range(1001, 1001 + depth)
    )
    oracle = scripted_oracle({(i, 1000 + i, 10): -1.0 for i in range(1, depth + 1)})
    result = _search(source, destination, context_graph, oracle).run()

    assert result.stats.pruned == depth
    assert result.stats.marks_memoized == depth
    assert result.stats.skipped == depth * (depth - 1) // 2
    assert result.stats.tables_scored == depth * (depth + 1) // 2


def test_shared_child_queried_once(scripted_oracle, source_graph, context_graph):
    destination = OntologyGraph(
        "destination", 200, 3, {200: [201, 202], 201: [202]}, roots=[200]
    )
    oracle = scripted_oracle()
    _search(source_graph, destination, context_graph, oracle).run()

    assert oracle.queried.count((1, 202, 10)) == 1


def test_source_children_not_walked_when_roots_independent(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle({(1, 100, 10): -1.0})
    result = _search(source_graph, destination_graph, context_graph, oracle).run()

    assert oracle.queried == [(1, 100, 10)]
    assert result.stats.sources_expanded == 1
    assert result.mappings == []


def test_threshold_boundaries(scripted_oracle, source_graph, destination_graph, context_graph):
    # equal to min prunes, equal to accept is undecided
    oracle = scripted_oracle({(1, 100, 10): 5.0, (1, 101, 10): 0.0})
    result = _search(source_graph, destination_graph, context_graph, oracle).run()

    assert result.mappings == []
    assert (2, 101, 10) not in oracle.queried
    assert (1, 102, 10) in oracle.queried


def test_cancel_before_start(scripted_oracle, source_graph, destination_graph, context_graph):
    cancel = threading.Event()
    cancel.set()
    oracle = scripted_oracle(SCENARIO_SCORES)
    result = _search(source_graph, destination_graph, context_graph, oracle).run(cancel)

    assert result.status == "cancelled"
    assert result.mappings == []
    assert oracle.queried == []


def test_cancel_keeps_emitted_mappings(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle(SCENARIO_SCORES)

    class CancelAfterFirstSource:
        def is_set(self):
            return len(oracle.queried) >= 3

    result = _search(source_graph, destination_graph, context_graph, oracle).run(
        CancelAfterFirstSource()
    )

    assert result.status == "cancelled"
    assert not result.completed
    assert result.triples() == {(1, 100, 10)}
    assert (2, 100, 10) not in oracle.queried


def test_oracle_failure_carries_partial_result(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle(SCENARIO_SCORES, fail_on=[(2, 100, 10)])

    with pytest.raises(SearchFailed) as info:
        _search(source_graph, destination_graph, context_graph, oracle).run()

    result = info.value.result
    assert result.status == "failed"
    assert result.triples() == {(1, 100, 10)}
    assert isinstance(info.value.__cause__, OracleUnavailable)


def test_backend_failure_surfaces_as_search_failed(
    source_graph, destination_graph, context_graph
):
    class BrokenBackend:
        def count(self, concept):
            return 5

        def count_in_range(self, start, length):
            return 5

        def count_matching(self, required, excluded):
            raise TimeoutError("backend timed out")

    oracle = ContingencyTableOracle(BrokenBackend())
    search = MappingSearch(source_graph, destination_graph, context_graph, oracle)

    with pytest.raises(SearchFailed) as info:
        search.run()
    assert info.value.result.mappings == []
    assert isinstance(info.value, RuntimeError)


def test_brute_force_scores_every_triple(
    scripted_oracle, source_graph, destination_graph, context_graph
):
    oracle = scripted_oracle(SCENARIO_SCORES)
    result = brute_force_mappings(
        source_graph, destination_graph, context_graph, oracle, PARAMETERS, scorer=oracle.score
    )

    assert len(oracle.queried) == 2 * 3 * 1
    assert result.triples() == {(1, 100, 10)}
    assert result.completed


@pytest.fixture
def annotated_index():
    """
    60 elements, all annotated with context 10.

    Source 1 and destination 100 always co-occur; source 2 and destination
    102 co-occur on a subset; 101 is spread evenly.
    """
    pairs = []
    for element in range(60):
        pairs.append((element, 10))
        if element < 20:
            pairs += [(element, 1), (element, 100)]
        if element < 8:
            pairs += [(element, 2), (element, 102)]
        if element % 2:
            pairs.append((element, 101))
    return InMemoryCountIndex(pairs)


def test_branch_and_bound_subset_of_brute_force(
    annotated_index, source_graph, destination_graph, context_graph
):
    oracle = ContingencyTableOracle(annotated_index)
    bb = MappingSearch(source_graph, destination_graph, context_graph, oracle).run()
    brute = brute_force_mappings(source_graph, destination_graph, context_graph, oracle)

    assert (1, 100, 10) in bb.triples()
    assert bb.triples() <= brute.triples()
    for mapping in bb.mappings:
        assert mapping.bayes_factor > PARAMETERS.accept_threshold


def test_no_pruning_matches_brute_force(
    annotated_index, source_graph, destination_graph, context_graph
):
    oracle = ContingencyTableOracle(annotated_index)
    parameters = SearchParameters(min_threshold=-math.inf)
    bb = MappingSearch(source_graph, destination_graph, context_graph, oracle, parameters).run()
    brute = brute_force_mappings(
        source_graph, destination_graph, context_graph, oracle, parameters
    )

    assert bb.triples() == brute.triples()


def test_information_content_of_emitted_mapping(
    annotated_index, source_graph, destination_graph, context_graph
):
    oracle = ContingencyTableOracle(annotated_index)
    result = MappingSearch(source_graph, destination_graph, context_graph, oracle).run()
    mapping = next(m for m in result.mappings if m.triple == (1, 100, 10))

    # every source-annotated element carries 1; half of the destination ones carry 100
    assert mapping.source_info_content == pytest.approx(0.0)
    assert mapping.dest_info_content == pytest.approx(math.log(2))
    assert mapping.context_info_content == pytest.approx(0.0)
