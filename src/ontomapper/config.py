"""
Search configuration and defaults.

All tunables are centralized in CONFIG; SearchParameters reads its defaults
from there and validates itself on construction.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

from .errors import InvalidParameter
from .stats.bayesian.score import ScoreType

__all__ = ["CONFIG", "SearchParameters"]

# ====================================================================
# SEARCH CONFIGURATION
# ====================================================================

CONFIG: Dict[str, Any] = {
    # Bayesian test
    "alpha": 2.0,  # Dirichlet smoothing, split uniformly across table cells
    "min_threshold": 0.0,  # Bayes factor at or below this prunes the destination subtree
    "accept_threshold": 5.0,  # Bayes factor above this emits a mapping
    "score_type": "ci",  # "ci" (conditional-independence Bayes factor) or "bdeu"
    "memoize": True,  # Reuse pruned sets from coarser context nodes
    # Count backend adapter
    "max_retries": 3,  # Attempts per count query before giving up
    "retry_backoff": 0.5,  # Base seconds for exponential backoff between attempts
    # Post-processing
    "information_cutoff": 0.5,  # Keep mappings above this fraction of the max information content
    # CLI
    "log_level": "INFO",
}


@dataclass(frozen=True)
class SearchParameters:
    """Tunable parameters of a mapping search."""

    alpha: float = CONFIG["alpha"]
    min_threshold: float = CONFIG["min_threshold"]
    accept_threshold: float = CONFIG["accept_threshold"]
    score_type: ScoreType = ScoreType(CONFIG["score_type"])
    memoize: bool = CONFIG["memoize"]

    def __post_init__(self):
        if not (math.isfinite(self.alpha) and self.alpha > 0):
            raise InvalidParameter(f"alpha must be a finite positive number, got {self.alpha}")
        if math.isnan(self.min_threshold) or math.isnan(self.accept_threshold):
            raise InvalidParameter("thresholds must be numbers, got NaN")
        if self.min_threshold > self.accept_threshold:
            raise InvalidParameter(
                f"min_threshold ({self.min_threshold}) must not exceed "
                f"accept_threshold ({self.accept_threshold})"
            )
        if not isinstance(self.score_type, ScoreType):
            # Plain string form, as used in CONFIG and on the CLI
            try:
                score_type = ScoreType(str(self.score_type).lower())
            except ValueError as exc:
                raise InvalidParameter(
                    f"unknown score type: {self.score_type!r}"
                ) from exc
            object.__setattr__(self, "score_type", score_type)
