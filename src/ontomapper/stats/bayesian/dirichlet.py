"""
Dirichlet-multinomial scores for the conditional-independence test.

A contingency table holds 2·2^k counts: for each of the 2^k presence/absence
instances of the k conditioning ancestors, the cell pair
(child absent, child present). The dependence model scores the whole table
as one joint distribution; the independence model scores the child marginal
and each ancestor's own marginal separately. Their difference is the log
Bayes factor in favour of dependence.
"""

__all__ = [
    "marginal_log_likelihood",
    "dependence_score",
    "independence_score",
    "bayes_factor",
    "child_marginal",
    "ancestor_marginal",
    "as_counts",
    "table_order",
]

import numpy as np

from ...errors import InvalidParameter
from .gamma import log_gamma


def as_counts(counts) -> np.ndarray:
    """Validate and convert a count vector to a float array."""
    values = np.asarray(counts, dtype=np.float64)
    if values.ndim != 1 or values.size == 0:
        raise InvalidParameter(f"counts must be a non-empty 1-D sequence, got shape {values.shape}")
    if not np.all(np.isfinite(values)) or np.any(values < 0):
        raise InvalidParameter(f"counts must be finite and non-negative, got {counts!r}")
    return values


def _check_alpha(alpha: float) -> float:
    if not np.isfinite(alpha) or alpha <= 0:
        raise InvalidParameter(f"alpha must be a finite positive number, got {alpha}")
    return float(alpha)


def table_order(table) -> int:
    """
    Number of conditioning ancestors k of a 2·2^k table.

    Raises:
        InvalidParameter: If the length is not of the form 2·2^k
    """
    size = np.asarray(table).size
    instances = size // 2
    if size < 2 or size % 2 or instances & (instances - 1):
        raise InvalidParameter(f"table length must be 2·2^k, got {size}")
    return instances.bit_length() - 1


def marginal_log_likelihood(counts, alpha: float) -> float:
    """
    Dirichlet-multinomial marginal log-likelihood with symmetric smoothing.

    The prior mass alpha is split uniformly over the n cells:

        Σ_i [lnΓ(α/n + c_i) - lnΓ(α/n)] + lnΓ(α) - lnΓ(α + Σc)

    Args:
        counts: Non-negative cell counts
        alpha: Positive smoothing coefficient

    Returns:
        Marginal log-likelihood (finite)

    Example:
        >>> marginal_log_likelihood([0, 0], 2.0)
        0.0
    """
    values = as_counts(counts)
    alpha = _check_alpha(alpha)
    alpha_k = alpha / values.size

    cells = np.sum(log_gamma(alpha_k + values) - log_gamma(alpha_k))
    return float(cells + log_gamma(alpha) - log_gamma(alpha + values.sum()))


def dependence_score(table, alpha: float) -> float:
    """Score the full table as a single joint distribution."""
    table_order(table)
    return marginal_log_likelihood(table, alpha)


def child_marginal(table) -> np.ndarray:
    """Sum over all ancestor instances: [child absent, child present]."""
    values = as_counts(table)
    return np.array([values[0::2].sum(), values[1::2].sum()])


def ancestor_marginal(table, parent: int) -> np.ndarray:
    """
    Two-cell marginal of one conditioning ancestor.

    Consecutive blocks of 2^parent cells alternate between the ancestor's
    "absent" and "present" halves; parent runs from 1 to k.
    """
    values = as_counts(table)
    order = table_order(values)
    if not 1 <= parent <= order:
        raise InvalidParameter(f"parent must be in 1..{order}, got {parent}")
    blocks = values.reshape(-1, 2**parent).sum(axis=1)
    return np.array([blocks[0::2].sum(), blocks[1::2].sum()])


def independence_score(table, alpha: float) -> float:
    """
    Score the model where the child and every ancestor are independent.

    Sum of the child marginal's likelihood and one likelihood per ancestor
    marginal.
    """
    order = table_order(table)
    score = marginal_log_likelihood(child_marginal(table), alpha)
    for parent in range(1, order + 1):
        score += marginal_log_likelihood(ancestor_marginal(table, parent), alpha)
    return score


def bayes_factor(table, alpha: float) -> float:
    """
    Log Bayes factor of dependence against independence.

    Positive values are evidence the child depends on the ancestors under
    the context; values near zero or negative are evidence of independence.

    Example:
        >>> bayes_factor([1016, 28, 95, 6], 2.0) == bayes_factor([1016, 28, 95, 6], 2.0)
        True
    """
    return dependence_score(table, alpha) - independence_score(table, alpha)
