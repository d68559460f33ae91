import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from mc_forecast.data import derive_returns, save_price_history


def generate_synthetic_ohlcv(days=250, base_price=100.0, seed=42):
    """Generate a synthetic OHLCV table in the loader's schema."""
    np.random.seed(seed)
    returns = np.random.normal(0.0005, 0.02, days)
    closes = base_price * np.cumprod(1 + returns)
    opens = closes * (1 + np.random.normal(0, 0.005, days))
    highs = np.maximum(opens, closes) * (1 + np.abs(np.random.normal(0, 0.01, days)))
    lows = np.minimum(opens, closes) * (1 - np.abs(np.random.normal(0, 0.01, days)))
    volume = np.random.randint(100_000, 1_000_000, days)

    return pd.DataFrame({
        "date": pd.bdate_range(start="2023-01-02", periods=days),
        "open": opens,
        "high": highs,
        "low": lows,
        "close": closes,
        "adj_close": closes,
        "volume": volume,
    })


def series_from_closes(closes):
    """Derived series for a plain list of closing prices."""
    df = pd.DataFrame({
        "date": pd.bdate_range(start="2024-01-01", periods=len(closes)),
        "close": np.asarray(closes, dtype=float),
    })
    return derive_returns(df)


@pytest.fixture
def synthetic_ohlcv():
    return generate_synthetic_ohlcv()


@pytest.fixture
def synthetic_series():
    return derive_returns(generate_synthetic_ohlcv())


@pytest.fixture
def five_day_series():
    return series_from_closes([100, 102, 101, 103, 104])


@pytest.fixture
def data_dir(tmp_path):
    """Folder holding TEST.csv with 250 synthetic days."""
    save_price_history(generate_synthetic_ohlcv(), tmp_path, "TEST")
    return tmp_path


@pytest.fixture
def write_csv(tmp_path):
    def _write(text, symbol="RAW"):
        (tmp_path / f"{symbol}.csv").write_text(text)
        return tmp_path
    return _write
