"""
Drift and volatility of daily log-returns.

Variance and deviation are sample statistics (ddof=1) and deviation is
always the square root of the reported variance.
"""

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from mc_forecast.errors import InsufficientDataError, SchemaError

MIN_OBSERVATIONS = 2


@dataclass(frozen=True)
class ColumnStatistics:
    variance: float
    deviation: float
    mean: float
    drift: float                 # mean - 0.5 * variance
    n_observations: int


def estimate(series: pd.DataFrame, column: str = "log_return") -> ColumnStatistics:
    if column not in series.columns:
        raise SchemaError(
            f"series has no '{column}' column", stage="estimate", value=column,
        )

    values = series[column].to_numpy(dtype=float)
    values = values[~np.isnan(values)]
    n = len(values)
    if n < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            f"need at least {MIN_OBSERVATIONS} {column} observations, got {n}",
            stage="estimate", value=n,
        )

    variance = float(np.var(values, ddof=1))
    mean = float(np.mean(values))
    return ColumnStatistics(
        variance=variance,
        deviation=math.sqrt(variance),
        mean=mean,
        drift=mean - 0.5 * variance,
        n_observations=n,
    )
