"""Selectable model scores for the mapping search."""

__all__ = ["ScoreType"]

from enum import Enum
from typing import Callable

import numpy as np

from .bdeu import bdeu_score
from .dirichlet import bayes_factor


class ScoreType(Enum):
    """
    Score used to decide dependence of a (source, destination) pair.

    Each member carries its scoring function:

        ScoreType.CI.score(table, alpha)
        ScoreType.BDEU.score(table, ess)
    """

    CI = "ci"
    BDEU = "bdeu"

    @property
    def function(self) -> Callable[[np.ndarray, float], float]:
        return _SCORERS[self]

    def score(self, table, parameter: float) -> float:
        """Score a table; parameter is alpha for CI and ess for BDeu."""
        return self.function(table, parameter)


_SCORERS = {
    ScoreType.CI: bayes_factor,
    ScoreType.BDEU: bdeu_score,
}
