import math

import pytest

from ontomapper.config import CONFIG, SearchParameters
from ontomapper.errors import InvalidParameter
from ontomapper.stats.bayesian import ScoreType


def test_defaults():
    parameters = SearchParameters()
    assert parameters.alpha == CONFIG["alpha"] == 2.0
    assert parameters.min_threshold == 0.0
    assert parameters.accept_threshold == 5.0
    assert parameters.score_type is ScoreType.CI
    assert parameters.memoize is True


def test_score_type_from_string():
    assert SearchParameters(score_type="BDEU").score_type is ScoreType.BDEU


@pytest.mark.parametrize(
    "kwargs",
    [
        {"alpha": 0.0},
        {"alpha": -2.0},
        {"alpha": math.nan},
        {"alpha": math.inf},
        {"min_threshold": 6.0, "accept_threshold": 5.0},
        {"min_threshold": math.nan},
        {"score_type": "chi2"},
    ],
)
def test_invalid_parameters(kwargs):
    with pytest.raises(InvalidParameter):
        SearchParameters(**kwargs)


def test_equal_thresholds_allowed():
    parameters = SearchParameters(min_threshold=3.0, accept_threshold=3.0)
    assert parameters.min_threshold == parameters.accept_threshold


def test_parameters_are_frozen():
    with pytest.raises(AttributeError):
        SearchParameters().alpha = 1.0
