"""
Bayesian scoring of contingency tables.

- gamma:     log_gamma (Lanczos approximation)
- dirichlet: marginal_log_likelihood, dependence/independence scores, bayes_factor
- bdeu:      bdeu_score
- score:     ScoreType (CI or BDeu)
"""

from .bdeu import bdeu_score
from .dirichlet import (
    ancestor_marginal,
    bayes_factor,
    child_marginal,
    dependence_score,
    independence_score,
    marginal_log_likelihood,
)
from .gamma import log_gamma
from .score import ScoreType

__all__ = [
    "log_gamma",
    "marginal_log_likelihood",
    "dependence_score",
    "independence_score",
    "bayes_factor",
    "child_marginal",
    "ancestor_marginal",
    "bdeu_score",
    "ScoreType",
]
