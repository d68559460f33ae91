"""
Random daily return factors.

Each cell is exp(drift + deviation * F^-1(u)) for an independent uniform
draw u in (0, 1). Rows are days forward, columns are iterations.
"""

import logging

import numpy as np

from mc_forecast.distributions import Distribution, NormalDistribution
from mc_forecast.errors import EmptyResultError

logger = logging.getLogger(__name__)


def _check_size(name: str, value) -> int:
    if isinstance(value, bool) or int(value) != value or value <= 0:
        raise EmptyResultError(
            f"{name} must be a positive integer, got {value}",
            stage="generate", value=value,
        )
    return int(value)


def uniform_open_interval(rng: np.random.Generator, shape) -> np.ndarray:
    """Uniform samples in (0, 1); exact zeros from [0, 1) are redrawn."""
    u = rng.random(shape)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def generate(
    horizon: int,
    iterations: int,
    distribution: Distribution | None = None,
    drift: float = 0.0,
    deviation: float = 0.0,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Build the (horizon, iterations) matrix of multiplicative return factors.

    Pass ``seed`` (or a ready ``rng``) for reproducible output; with
    neither, every call draws fresh entropy.
    """
    horizon = _check_size("horizon", horizon)
    iterations = _check_size("iterations", iterations)
    if deviation < 0:
        raise ValueError(f"deviation must be non-negative, got {deviation}")

    distribution = distribution or NormalDistribution()
    rng = rng if rng is not None else np.random.default_rng(seed)

    u = uniform_open_interval(rng, (horizon, iterations))
    shocks = np.asarray(distribution.inverse_cdf(u), dtype=float)
    factors = np.exp(drift + deviation * shocks)
    factors.flags.writeable = False

    logger.debug(
        "Generated %d x %d return factors (drift=%.6f, deviation=%.6f)",
        horizon, iterations, drift, deviation,
    )
    return factors
