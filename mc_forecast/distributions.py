"""
Probability distributions used to turn uniform draws into return shocks.

Anything with an ``inverse_cdf(p)`` method accepting a float or an array
of probabilities in (0, 1) can drive the generator.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np
from scipy import stats

from mc_forecast.errors import DomainError


@runtime_checkable
class Distribution(Protocol):
    def inverse_cdf(self, p): ...


def check_probabilities(p) -> np.ndarray:
    """Reject anything outside the open interval (0, 1). No clamping."""
    arr = np.asarray(p, dtype=float)
    bad = ~np.isfinite(arr) | (arr <= 0.0) | (arr >= 1.0)
    if np.any(bad):
        offending = float(arr[bad].flat[0]) if arr.ndim else float(arr)
        raise DomainError(
            f"probability must lie in (0, 1), got {offending}",
            stage="inverse_cdf", value=offending,
        )
    return arr


def _unwrap(result, p):
    return float(result) if np.ndim(p) == 0 else result


@dataclass(frozen=True)
class NormalDistribution:
    mean: float = 0.0
    scale: float = 1.0

    def inverse_cdf(self, p):
        arr = check_probabilities(p)
        return _unwrap(stats.norm.ppf(arr, loc=self.mean, scale=self.scale), p)


@dataclass(frozen=True)
class StudentTDistribution:
    """Student-t shocks for fatter tails. ``df`` must be positive."""
    df: float = 5.0
    scale: float = 1.0

    def __post_init__(self):
        if self.df <= 0:
            raise ValueError(f"df must be positive, got {self.df}")

    def inverse_cdf(self, p):
        arr = check_probabilities(p)
        return _unwrap(stats.t.ppf(arr, self.df, scale=self.scale), p)


DISTRIBUTIONS = {
    "normal": NormalDistribution,
    "student-t": StudentTDistribution,
}


def get_distribution(name: str, **params) -> Distribution:
    try:
        cls = DISTRIBUTIONS[name]
    except KeyError:
        raise ValueError(
            f"unknown distribution {name!r}, choose from {sorted(DISTRIBUTIONS)}"
        ) from None
    return cls(**params)
