"""Shared fixtures: small graphs and a scripted oracle with fixed scores."""

import numpy as np
import pytest

from ontomapper.errors import OracleUnavailable
from ontomapper.graph import OntologyGraph


class ScriptedOracle:
    """
    Oracle stand-in whose "table" is just the (source, dest, context) triple.

    Pair it with ``scorer=oracle.score`` so each triple gets the Bayes factor
    listed in ``scores``. Every scored triple is recorded in ``queried``.
    """

    def __init__(self, scores=None, default=1.0, fail_on=(), key=None):
        self.scores = dict(scores or {})
        self.default = default
        self.fail_on = set(fail_on)
        # Optional projection of the triple used for score lookup
        self.key = key or (lambda triple: triple)
        self.queried = []

    def build_table(self, ancestors, child, context):
        triple = (ancestors[0], child, context)
        if triple in self.fail_on:
            raise OracleUnavailable(f"count backend down at {triple}")
        self.queried.append(triple)
        return np.array([*triple, 0], dtype=np.int64)

    def score(self, table, alpha):
        triple = tuple(int(v) for v in table[:3])
        return self.scores.get(self.key(triple), self.default)

    def range_count(self, start, length):
        return 100

    def concept_count(self, concept):
        return 10


@pytest.fixture
def scripted_oracle():
    return ScriptedOracle


@pytest.fixture
def source_graph():
    """1 → 2"""
    return OntologyGraph("source", 1, 2, {1: [2]}, roots=[1])


@pytest.fixture
def context_graph():
    """Single context concept 10."""
    return OntologyGraph("context", 10, 1, {}, roots=[10])


@pytest.fixture
def destination_graph():
    """100 → {101, 102}"""
    return OntologyGraph("destination", 100, 3, {100: [101, 102]}, roots=[100])
