"""
Daily price history for a single symbol.

CSV files live at ``<data_dir>/<SYMBOL>.csv`` with a header row:

    date,open,high,low,close,adjClose,volume

Rows are validated against that fixed schema, sorted by date and extended
with day-over-day change, percentage change and log-return columns.
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from mc_forecast.errors import SchemaError

logger = logging.getLogger(__name__)

PRICE_COLUMNS = ["open", "high", "low", "close", "adj_close"]
SCHEMA_COLUMNS = ["date", *PRICE_COLUMNS, "volume"]
UNUSED_COLUMNS = ["open", "high", "low", "volume"]

# header spellings seen in exported files -> canonical name
_HEADER_ALIASES = {
    "adjclose": "adj_close",
    "adj close": "adj_close",
    "adj_close": "adj_close",
}


def _canonical(name) -> str:
    key = str(name).strip().lower()
    return _HEADER_ALIASES.get(key, key)


def stock_file_path(data_dir, symbol: str) -> Path:
    return Path(data_dir) / f"{symbol}.csv"


def _first_bad(raw: pd.Series, bad: pd.Series):
    return raw[bad].iloc[0]


def validate_schema(df: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce a raw table to the fixed OHLCV schema.

    Raises SchemaError for missing columns, empty tables, unparseable dates,
    missing or non-numeric prices, non-positive closes, non-integer volumes
    and duplicate dates. Nothing is silently coerced to a default.
    """
    df = df.rename(columns=_canonical)
    missing = [c for c in SCHEMA_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(
            f"missing required columns: {', '.join(missing)}",
            stage="load", value=missing,
        )
    if len(df) == 0:
        raise SchemaError("price history has no rows", stage="load")

    out = pd.DataFrame(index=df.index)

    raw_dates = df["date"]
    if pd.api.types.is_datetime64_any_dtype(raw_dates):
        dates = raw_dates
    else:
        dates = pd.to_datetime(raw_dates, format="%Y-%m-%d", errors="coerce")
    bad = dates.isna()
    if bad.any():
        raise SchemaError(
            f"unparseable date {_first_bad(raw_dates, bad)!r}",
            stage="load", value=_first_bad(raw_dates, bad),
        )
    out["date"] = dates

    for col in PRICE_COLUMNS:
        raw = df[col]
        values = pd.to_numeric(raw, errors="coerce").astype("float64")
        bad = values.isna() | ~np.isfinite(values)
        if bad.any():
            raise SchemaError(
                f"column '{col}' has malformed value {_first_bad(raw, bad)!r}",
                stage="load", value=_first_bad(raw, bad),
            )
        out[col] = values

    non_positive = out["close"] <= 0
    if non_positive.any():
        raise SchemaError(
            f"column 'close' must be positive, got {out['close'][non_positive].iloc[0]}",
            stage="load", value=float(out["close"][non_positive].iloc[0]),
        )

    raw_volume = df["volume"]
    volume = pd.to_numeric(raw_volume, errors="coerce")
    bad = volume.isna() | ~np.isfinite(volume) | (volume != np.round(volume))
    if bad.any():
        raise SchemaError(
            f"column 'volume' has non-integer value {_first_bad(raw_volume, bad)!r}",
            stage="load", value=_first_bad(raw_volume, bad),
        )
    out["volume"] = volume.astype("int64")

    dupes = out["date"].duplicated()
    if dupes.any():
        day = out["date"][dupes].iloc[0]
        raise SchemaError(
            f"duplicate date {day.date()}", stage="load", value=day,
        )

    return out.sort_values("date").reset_index(drop=True)


def derive_returns(df: pd.DataFrame) -> pd.DataFrame:
    """Add change, pct_change and log_return; the first row has no prior day."""
    out = df.sort_values("date").reset_index(drop=True).copy()
    prev_close = out["close"].shift(1)
    out["change"] = out["close"] - prev_close
    out["pct_change"] = out["change"] / prev_close
    out["log_return"] = np.log1p(out["pct_change"])
    return out


def load_price_history(
    data_dir,
    symbol: str,
    drop_unused: bool = True,
) -> pd.DataFrame:
    """
    Read ``<data_dir>/<symbol>.csv`` and derive returns.

    Returns DataFrame with columns: date, close, adj_close, change,
    pct_change, log_return (plus open/high/low/volume when drop_unused
    is False). Ordered ascending by date.
    """
    path = stock_file_path(data_dir, symbol)
    try:
        raw = pd.read_csv(path, sep=",", dtype=str, skipinitialspace=True)
    except FileNotFoundError as exc:
        raise SchemaError(f"no price file at {path}", stage="load", value=str(path)) from exc
    except pd.errors.EmptyDataError as exc:
        raise SchemaError(f"price file {path} is empty", stage="load", value=str(path)) from exc

    series = derive_returns(validate_schema(raw))
    if drop_unused:
        series = series.drop(columns=UNUSED_COLUMNS)

    logger.info(
        "Loaded %d rows for %s: %s to %s",
        len(series), symbol,
        series["date"].iloc[0].date(), series["date"].iloc[-1].date(),
    )
    return series


def fetch_price_history(symbol: str, start: str, end: str) -> pd.DataFrame:
    """
    Download daily bars from Yahoo Finance in the loader's schema.

    Returns the validated OHLCV table (no derived columns) so it can be
    written with save_price_history and read back through the CSV loader.
    """
    import yfinance as yf

    df = yf.download(symbol, start=start, end=end, auto_adjust=False, progress=False)
    if df is None or df.empty:
        raise SchemaError(
            f"no bars returned for {symbol} between {start} and {end}",
            stage="load", value=symbol,
        )
    if hasattr(df.columns, "levels") and len(df.columns.levels) > 1:
        df.columns = df.columns.droplevel(1)

    df = df.reset_index()
    if "Date" not in df.columns and "index" in df.columns:
        df = df.rename(columns={"index": "Date"})
    df["Date"] = pd.to_datetime(df["Date"])
    if df["Date"].dt.tz is not None:
        df["Date"] = df["Date"].dt.tz_localize(None)

    logger.info("Downloaded %d bars for %s", len(df), symbol)
    return validate_schema(df)


def save_price_history(df: pd.DataFrame, data_dir, symbol: str) -> Path:
    """Write an OHLCV table to ``<data_dir>/<symbol>.csv``."""
    path = stock_file_path(data_dir, symbol)
    path.parent.mkdir(parents=True, exist_ok=True)
    out = df[SCHEMA_COLUMNS].rename(columns={"adj_close": "adjClose"})
    out.to_csv(path, index=False, date_format="%Y-%m-%d")
    logger.info("Wrote %d rows to %s", len(out), path)
    return path
