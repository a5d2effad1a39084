"""BDeu score over the disjoint (child absent, child present) cell pairs."""

__all__ = ["bdeu_score"]

import numpy as np

from ...errors import InvalidParameter
from .dirichlet import as_counts, table_order
from .gamma import log_gamma


def bdeu_score(table, ess: float) -> float:
    """
    Bayesian Dirichlet equivalent uniform score of a contingency table.

    Each consecutive cell pair is one parent configuration j with counts
    (n_j0, n_j1). The equivalent sample size is spread uniformly over the q
    configurations and the two child states:

        Σ_j [lnΓ(ess/q) - lnΓ(ess/q + n_j)
             + Σ_k (lnΓ(ess/2q + n_jk) - lnΓ(ess/2q))]

    Args:
        table: Contingency table of length 2·2^k
        ess: Positive equivalent sample size

    Returns:
        BDeu log score
    """
    values = as_counts(table)
    table_order(values)
    if not np.isfinite(ess) or ess <= 0:
        raise InvalidParameter(f"ess must be a finite positive number, got {ess}")

    pairs = values.reshape(-1, 2)
    configurations = pairs.shape[0]
    alpha_j = ess / configurations
    alpha_jk = alpha_j / 2

    per_configuration = log_gamma(alpha_j) - log_gamma(alpha_j + pairs.sum(axis=1))
    per_cell = log_gamma(alpha_jk + pairs) - log_gamma(alpha_jk)
    return float(np.sum(per_configuration) + np.sum(per_cell))
