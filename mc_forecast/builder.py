"""
Price paths from return factors.

The fold over time is strictly ordered: day t needs day t-1. Only the
iteration axis is split, each worker owning a contiguous block of columns.
"""

import concurrent.futures
import logging
import math
import threading

import numpy as np

from mc_forecast.errors import EmptyResultError, SimulationCancelled

logger = logging.getLogger(__name__)

MIN_CHUNK_COLUMNS = 256


def column_chunks(iterations: int, workers: int) -> list[tuple[int, int]]:
    """Split [0, iterations) into at most ``workers`` contiguous blocks."""
    workers = max(1, min(workers, math.ceil(iterations / MIN_CHUNK_COLUMNS)))
    size = math.ceil(iterations / workers)
    return [(start, min(start + size, iterations))
            for start in range(0, iterations, size)]


def _fold(
    paths: np.ndarray,
    factors: np.ndarray,
    start: int,
    end: int,
    cancel_event: threading.Event | None,
) -> None:
    cols = slice(start, end)
    with np.errstate(over="ignore", under="ignore"):
        for t in range(1, paths.shape[0]):
            if cancel_event is not None and cancel_event.is_set():
                raise SimulationCancelled(
                    f"cancelled at day {t} of {paths.shape[0] - 1}",
                    stage="build", value=t,
                )
            np.multiply(paths[t - 1, cols], factors[t - 1, cols], out=paths[t, cols])


def build(
    return_factors: np.ndarray,
    starting_price: float,
    workers: int = 1,
    cancel_event: threading.Event | None = None,
) -> np.ndarray:
    """
    Compound ``starting_price`` through every row of ``return_factors``.

    Returns a (horizon + 1, iterations) matrix: row 0 is the starting
    price, row t is row t-1 times factor row t-1. Prices that overflow to
    inf or underflow to 0 are left as they are.
    """
    factors = np.asarray(return_factors, dtype=float)
    if factors.ndim != 2 or 0 in factors.shape:
        raise EmptyResultError(
            f"return factors must be a non-empty 2-D matrix, got shape {factors.shape}",
            stage="build", value=factors.shape,
        )
    if not math.isfinite(starting_price) or starting_price <= 0:
        raise ValueError(f"starting_price must be positive, got {starting_price}")

    horizon, iterations = factors.shape
    paths = np.empty((horizon + 1, iterations), dtype=float)
    paths[0, :] = starting_price

    chunks = column_chunks(iterations, workers)
    if len(chunks) == 1:
        _fold(paths, factors, 0, iterations, cancel_event)
    else:
        logger.debug("Building %d paths on %d workers", iterations, len(chunks))
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(chunks)) as executor:
            futures = [
                executor.submit(_fold, paths, factors, start, end, cancel_event)
                for start, end in chunks
            ]
            for future in concurrent.futures.as_completed(futures):
                future.result()

    paths.flags.writeable = False
    return paths
