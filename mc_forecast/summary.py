"""
Percentile summary of simulated price paths.

Percentiles use linear interpolation between order statistics: for n
sorted values the q-th percentile sits at position (n - 1) * q / 100 and
falls between the two neighbouring values in proportion. When both
neighbours are equal, including both overflowed to inf, that value is
returned as is, so overflowed tails never turn into NaN.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from mc_forecast.errors import EmptyResultError

PERCENTILE_METHOD = "linear"      # see linear_percentile for the inf rule
WORST_PCT = 5
AVERAGE_PCT = 50
BEST_PCT = 95


@dataclass(frozen=True)
class SimulationSummary:
    symbol: str
    starting_price: float
    horizon: int
    iterations: int
    worst_case: float
    worst_case_pct: float
    average_case: float
    average_case_pct: float
    best_case: float
    best_case_pct: float


def pct_change(value: float, starting_price: float) -> float:
    return (value - starting_price) * 100 / starting_price


def _check_paths(prices) -> np.ndarray:
    arr = np.asarray(prices, dtype=float)
    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise EmptyResultError(
            f"price paths must have at least one day and one iteration, got shape {arr.shape}",
            stage="summarize", value=arr.shape,
        )
    return arr


def linear_percentile(values: np.ndarray, q, axis: int | None = None):
    """np.percentile(method="linear") that keeps inf where both neighbours are inf."""
    lower = np.percentile(values, q, axis=axis, method="lower")
    upper = np.percentile(values, q, axis=axis, method="higher")
    with np.errstate(invalid="ignore"):
        interpolated = np.percentile(values, q, axis=axis, method=PERCENTILE_METHOD)
    # inf upper neighbour over a finite lower one interpolates to inf
    interpolated = np.where(np.isinf(upper), upper, interpolated)
    return np.where(lower == upper, lower, interpolated)


def summarize(prices, starting_price: float, symbol: str = "") -> SimulationSummary:
    """Worst/average/best case = P5/P50/P95 of the final day's prices."""
    arr = _check_paths(prices)
    final = arr[-1]
    worst, average, best = linear_percentile(final, [WORST_PCT, AVERAGE_PCT, BEST_PCT])
    return SimulationSummary(
        symbol=symbol,
        starting_price=float(starting_price),
        horizon=arr.shape[0] - 1,
        iterations=arr.shape[1],
        worst_case=float(worst),
        worst_case_pct=pct_change(float(worst), starting_price),
        average_case=float(average),
        average_case_pct=pct_change(float(average), starting_price),
        best_case=float(best),
        best_case_pct=pct_change(float(best), starting_price),
    )


def percentile_paths(
    prices,
    percentiles: tuple[int, ...] = (WORST_PCT, AVERAGE_PCT, BEST_PCT),
) -> dict[int, np.ndarray]:
    """Cross-iteration percentile for every day, keyed by percentile."""
    arr = _check_paths(prices)
    return {
        p: linear_percentile(arr, p, axis=1)
        for p in percentiles
    }


def describe_paths(prices) -> pd.DataFrame:
    """Per-day count, mean, stddev, min, 5%, 50%, 95% and max."""
    arr = _check_paths(prices)
    q = percentile_paths(arr)
    with np.errstate(invalid="ignore", over="ignore"):
        mean = arr.mean(axis=1)
        stddev = arr.std(axis=1, ddof=1) if arr.shape[1] > 1 else np.full(arr.shape[0], np.nan)
    return pd.DataFrame({
        "count": np.full(arr.shape[0], arr.shape[1]),
        "mean": mean,
        "stddev": stddev,
        "min": arr.min(axis=1),
        "5%": q[WORST_PCT],
        "50%": q[AVERAGE_PCT],
        "95%": q[BEST_PCT],
        "max": arr.max(axis=1),
    }, index=pd.RangeIndex(arr.shape[0], name="day"))


def format_summary(summary: SimulationSummary) -> str:
    lines = [
        f"Simulation estimation summary for {summary.symbol} symbol.",
        f"Length of Simulation: {summary.horizon}",
        f"Number of iterations: {summary.iterations}",
        f"Starting Price: {summary.starting_price:8.2f}",
        f"Estimated Market Price (worst)  : {summary.worst_case:8.2f},{summary.worst_case_pct:8.2f}",
        f"Estimated Market Price (average): {summary.average_case:8.2f},{summary.average_case_pct:8.2f}",
        f"Estimated Market Price (best)   : {summary.best_case:8.2f},{summary.best_case_pct:8.2f}",
    ]
    return "\n".join(lines)
