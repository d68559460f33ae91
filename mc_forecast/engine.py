"""
Monte Carlo price forecast pipeline.

Model: S(t+1) = S(t) * exp(drift + deviation * Z),  drift = mean - 0.5 * var
where mean/var are the sample moments of historical daily log-returns and
Z = F^-1(u) for a uniform draw u and a pluggable distribution F.

Stages: estimate -> generate -> build -> summarize.
"""

import logging
import threading
from dataclasses import dataclass

import numpy as np
import pandas as pd

from mc_forecast import builder, generator
from mc_forecast.data import load_price_history
from mc_forecast.distributions import Distribution, NormalDistribution
from mc_forecast.errors import (
    EmptyResultError,
    SchemaError,
    SimulationCancelled,
    SimulationError,
)
from mc_forecast.estimator import ColumnStatistics, estimate
from mc_forecast.summary import SimulationSummary, summarize

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    symbol: str
    statistics: ColumnStatistics
    return_factors: np.ndarray   # (horizon, iterations)
    paths: np.ndarray            # (horizon + 1, iterations), row 0 = starting price
    summary: SimulationSummary
    starting_price: float
    horizon: int
    iterations: int
    seed: int | None


class MonteCarloSimulation:
    """Forecast one symbol's price distribution from its daily history."""

    def __init__(
        self,
        symbol: str,
        distribution: Distribution | None = None,
        seed: int | None = None,
        workers: int = 1,
        cancel_event: threading.Event | None = None,
    ):
        if workers <= 0:
            raise ValueError(f"workers must be positive, got {workers}")
        self.symbol = symbol
        self.distribution = distribution or NormalDistribution()
        self.seed = seed
        self.workers = workers
        self.cancel_event = cancel_event

    def _check_cancelled(self, stage: str) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise SimulationCancelled(f"cancelled before {stage}", stage=stage)

    def _stage(self, name: str, func, *args, **kwargs):
        self._check_cancelled(name)
        logger.debug("%s: %s started", self.symbol, name)
        try:
            out = func(*args, **kwargs)
        except SimulationError as exc:
            if exc.stage is None:
                exc.stage = name
            logger.error("%s: %s failed: %s", self.symbol, name, exc)
            raise
        logger.debug("%s: %s finished", self.symbol, name)
        return out

    def run(self, series: pd.DataFrame, horizon: int, iterations: int) -> SimulationResult:
        """Run every stage on a derived series (see data.derive_returns)."""
        for name, value in (("horizon", horizon), ("iterations", iterations)):
            if value <= 0:
                raise EmptyResultError(
                    f"{name} must be positive, got {value}",
                    stage="request", value=value,
                )
        if len(series) == 0:
            raise EmptyResultError("price history is empty", stage="request")
        if "close" not in series.columns:
            raise SchemaError("series has no 'close' column", stage="request", value="close")
        starting_price = float(series["close"].iloc[-1])
        if not np.isfinite(starting_price) or starting_price <= 0:
            raise SchemaError(
                f"last close must be a positive price, got {starting_price}",
                stage="request", value=starting_price,
            )

        stats = self._stage("estimate", estimate, series)
        logger.info(
            "%s: %d log-returns, mean=%.6f, deviation=%.6f, drift=%.6f, last close=%.2f",
            self.symbol, stats.n_observations, stats.mean, stats.deviation,
            stats.drift, starting_price,
        )

        factors = self._stage(
            "generate", generator.generate,
            horizon, iterations, self.distribution,
            stats.drift, stats.deviation, seed=self.seed,
        )
        paths = self._stage(
            "build", builder.build,
            factors, starting_price,
            workers=self.workers, cancel_event=self.cancel_event,
        )
        summary = self._stage(
            "summarize", summarize, paths, starting_price, symbol=self.symbol,
        )
        logger.info(
            "%s: simulated %d paths x %d days, median final %.2f",
            self.symbol, iterations, horizon, summary.average_case,
        )

        return SimulationResult(
            symbol=self.symbol,
            statistics=stats,
            return_factors=factors,
            paths=paths,
            summary=summary,
            starting_price=starting_price,
            horizon=horizon,
            iterations=iterations,
            seed=self.seed,
        )

    def run_from_csv(self, data_dir, horizon: int, iterations: int) -> SimulationResult:
        series = self._stage("load", load_price_history, data_dir, self.symbol)
        return self.run(series, horizon, iterations)
