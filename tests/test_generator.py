import numpy as np
import pytest

from mc_forecast.distributions import NormalDistribution, StudentTDistribution
from mc_forecast.errors import EmptyResultError
from mc_forecast.generator import generate, uniform_open_interval
from mc_forecast.estimator import estimate


def test_shape_and_positive():
    factors = generate(30, 500, NormalDistribution(), drift=0.0005, deviation=0.02, seed=1)
    assert factors.shape == (30, 500)
    assert np.all(factors > 0)


def test_positive_with_extreme_shocks():
    factors = generate(50, 2000, StudentTDistribution(df=4), drift=-0.01, deviation=0.05, seed=3)
    assert np.all(factors > 0)


def test_seed_reproducibility(five_day_series):
    stats = estimate(five_day_series)
    f1 = generate(1, 10_000, NormalDistribution(), stats.drift, stats.deviation, seed=2024)
    f2 = generate(1, 10_000, NormalDistribution(), stats.drift, stats.deviation, seed=2024)
    np.testing.assert_array_equal(f1, f2)


def test_different_seeds_differ():
    f1 = generate(10, 100, NormalDistribution(), 0.0, 0.02, seed=1)
    f2 = generate(10, 100, NormalDistribution(), 0.0, 0.02, seed=2)
    assert not np.allclose(f1, f2)


def test_log_factors_centered_on_drift():
    factors = generate(10, 10_000, NormalDistribution(), drift=0.001, deviation=0.015, seed=9)
    log_f = np.log(factors)
    assert log_f.mean() == pytest.approx(0.001, abs=5e-4)
    assert log_f.std() == pytest.approx(0.015, rel=0.02)


def test_zero_deviation_is_pure_drift():
    factors = generate(5, 7, NormalDistribution(), drift=0.01, deviation=0.0, seed=0)
    np.testing.assert_allclose(factors, np.exp(0.01))


def test_read_only():
    factors = generate(2, 2, NormalDistribution(), 0.0, 0.01, seed=0)
    with pytest.raises(ValueError):
        factors[0, 0] = 1.0


@pytest.mark.parametrize("horizon, iterations", [(0, 10), (10, 0), (-1, 5)])
def test_zero_sized_request(horizon, iterations):
    with pytest.raises(EmptyResultError) as exc_info:
        generate(horizon, iterations, NormalDistribution(), 0.0, 0.01, seed=0)
    assert exc_info.value.stage == "generate"


def test_negative_deviation():
    with pytest.raises(ValueError, match="non-negative"):
        generate(2, 2, NormalDistribution(), 0.0, -0.01)


def test_accepts_rng():
    rng_a = np.random.default_rng(5)
    rng_b = np.random.default_rng(5)
    np.testing.assert_array_equal(
        generate(3, 4, NormalDistribution(), 0.0, 0.01, rng=rng_a),
        generate(3, 4, NormalDistribution(), 0.0, 0.01, rng=rng_b),
    )


class _ZerosFirst:
    """Stand-in generator whose first draw contains exact zeros."""

    def __init__(self):
        self.calls = 0

    def random(self, shape):
        self.calls += 1
        if self.calls == 1:
            return np.array([[0.0, 0.5], [0.25, 0.0]])
        return np.full(shape, 0.75)


def test_uniform_redraws_exact_zeros():
    rng = _ZerosFirst()
    u = uniform_open_interval(rng, (2, 2))
    np.testing.assert_array_equal(u, [[0.75, 0.5], [0.25, 0.75]])
    assert rng.calls == 2


def test_uniform_open_interval_bounds():
    u = uniform_open_interval(np.random.default_rng(0), (100, 100))
    assert np.all((u > 0) & (u < 1))
