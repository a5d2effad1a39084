"""
Statistics subpackage.

- bayesian/    log_gamma, marginal likelihoods, bayes_factor, bdeu_score, ScoreType
- contingency/ ContingencyTableOracle
- information  information_content
"""

from .bayesian import (
    ScoreType,
    bayes_factor,
    bdeu_score,
    dependence_score,
    independence_score,
    log_gamma,
    marginal_log_likelihood,
)
from .contingency import ContingencyTableOracle
from .information import information_content

__all__ = [
    "log_gamma",
    "marginal_log_likelihood",
    "dependence_score",
    "independence_score",
    "bayes_factor",
    "bdeu_score",
    "ScoreType",
    "ContingencyTableOracle",
    "information_content",
]
