"""Information content of a concept from its occurrence frequency."""

__all__ = ["information_content"]

import numpy as np


def information_content(
    concept_count: np.ndarray | int,
    total_count: np.ndarray | int,
) -> np.ndarray | float:
    """
    Compute information content IC = -ln(count / total).

    Rare concepts are more specific and carry more information; IC is
    monotonically non-increasing in count / total. Counts are floored at 1
    so unseen concepts get the maximal finite value instead of infinity.

    Args:
        concept_count: Number of elements annotated with the concept
        total_count: Number of elements annotated with any concept of
            the concept's ontology

    Returns:
        Information content in nats (≥ 0 when count ≤ total)

    Example:
        >>> information_content(10, 1000)
        4.605...  # -ln(0.01)
    """
    count = np.maximum(np.asarray(concept_count, dtype=np.float64), 1.0)
    total = np.maximum(np.asarray(total_count, dtype=np.float64), 1.0)
    result = -np.log(count / total)
    if np.ndim(result) == 0:
        return float(result)
    return result
