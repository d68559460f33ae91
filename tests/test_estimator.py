import numpy as np
import pytest

from mc_forecast.errors import InsufficientDataError, SchemaError
from mc_forecast.estimator import ColumnStatistics, estimate
from tests.conftest import series_from_closes


def test_five_day_scenario(five_day_series):
    stats = estimate(five_day_series)
    log_returns = np.log(np.array([102, 101, 103, 104]) / np.array([100, 102, 101, 103]))

    assert isinstance(stats, ColumnStatistics)
    assert stats.n_observations == 4
    assert stats.mean > 0
    assert stats.mean == pytest.approx(log_returns.mean())
    assert stats.variance == pytest.approx(np.var(log_returns, ddof=1))
    assert stats.deviation == pytest.approx(np.std(log_returns, ddof=1))


def test_drift_formula(synthetic_series):
    stats = estimate(synthetic_series)
    assert stats.drift == stats.mean - 0.5 * stats.variance


def test_deviation_is_root_of_variance(synthetic_series):
    stats = estimate(synthetic_series)
    assert stats.deviation ** 2 == pytest.approx(stats.variance)


def test_missing_first_value_ignored(synthetic_series):
    stats = estimate(synthetic_series)
    assert stats.n_observations == len(synthetic_series) - 1
    assert np.isfinite(stats.mean)


def test_repeatable(synthetic_series):
    assert estimate(synthetic_series) == estimate(synthetic_series)


@pytest.mark.parametrize("closes", [[100.0], [100.0, 101.0]])
def test_too_few_observations(closes):
    with pytest.raises(InsufficientDataError) as exc_info:
        estimate(series_from_closes(closes))
    assert exc_info.value.stage == "estimate"


def test_unknown_column(five_day_series):
    with pytest.raises(SchemaError, match="volume"):
        estimate(five_day_series, column="volume")
