"""
Technical indicators as pure functions over a close (or OHLC) series.
Windows longer than the series produce all-NaN output, never an error.
"""

from __future__ import annotations
import logging
from typing import Iterable

import numpy as np
import pandas as pd

logger = logging.getLogger("strategy_lab.indicators")

MA_TYPES = ("SMA", "EMA")


def _insufficient(prices: pd.Series, needed: int, name: str) -> bool:
    if len(prices) < needed:
        logger.warning("Insufficient data for %s. Need %d points, have %d", name, needed, len(prices))
        return True
    return False


def _seeded_smoothing(values: pd.Series, n: int, alpha: float, first: int) -> pd.Series:
    """
    Recursive smoothing seeded with the simple mean of values[first:first+n].
    Output is NaN before index first+n-1.
    """
    seeded = pd.Series(np.nan, index=values.index, dtype=float)
    start = first + n - 1
    seeded.iloc[start] = values.iloc[first:first + n].mean()
    seeded.iloc[start + 1:] = values.iloc[start + 1:].to_numpy(dtype=float)
    return seeded.ewm(alpha=alpha, adjust=False).mean()


def sma(prices: pd.Series, n: int = 20) -> pd.Series:
    prices = pd.Series(prices, dtype=float)
    if _insufficient(prices, n, "SMA"):
        return pd.Series(np.nan, index=prices.index)
    return prices.rolling(n).mean()


def ema(prices: pd.Series, n: int = 20) -> pd.Series:
    """EMA with alpha 2/(n+1), seeded by the SMA of the first n prices."""
    prices = pd.Series(prices, dtype=float)
    if _insufficient(prices, n, "EMA"):
        return pd.Series(np.nan, index=prices.index)
    return _seeded_smoothing(prices, n, 2.0 / (n + 1), first=0)


def moving_average(prices: pd.Series, n: int, ma_type: str = "SMA") -> pd.Series:
    ma_type = ma_type.upper()
    if ma_type == "SMA":
        return sma(prices, n)
    if ma_type == "EMA":
        return ema(prices, n)
    raise ValueError(f"Unsupported moving average type: {ma_type}")


def rsi(prices: pd.Series, n: int = 14) -> pd.Series:
    """
    Wilder RSI (0-100). First value at index n.
    A window with no losses reads 100; a completely flat window is NaN.
    """
    prices = pd.Series(prices, dtype=float)
    if _insufficient(prices, n + 1, "RSI"):
        return pd.Series(np.nan, index=prices.index)
    delta = prices.diff()
    up = delta.clip(lower=0)
    down = (-delta).clip(lower=0)
    avg_up = _seeded_smoothing(up, n, 1.0 / n, first=1)
    avg_down = _seeded_smoothing(down, n, 1.0 / n, first=1)
    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_up / avg_down
    out = 100 - (100 / (1 + rs))
    out[(avg_down == 0) & (avg_up > 0)] = 100.0
    return out


def macd(prices: pd.Series, n_fast: int = 12, n_slow: int = 26, n_signal: int = 9) -> pd.DataFrame:
    """MACD line, signal line, histogram."""
    prices = pd.Series(prices, dtype=float)
    if _insufficient(prices, n_slow + n_signal, "MACD"):
        empty = pd.Series(np.nan, index=prices.index)
        return pd.DataFrame({"macd": empty, "signal": empty, "histogram": empty})
    line = ema(prices, n_fast) - ema(prices, n_slow)
    signal = _seeded_smoothing(line, n_signal, 2.0 / (n_signal + 1), first=n_slow - 1)
    return pd.DataFrame({"macd": line, "signal": signal, "histogram": line - signal})


def bollinger_bands(prices: pd.Series, n: int = 20, k: float = 2.0) -> pd.DataFrame:
    prices = pd.Series(prices, dtype=float)
    if _insufficient(prices, n, "Bollinger Bands"):
        empty = pd.Series(np.nan, index=prices.index)
        return pd.DataFrame({"upper": empty, "middle": empty, "lower": empty, "pct_b": empty})
    middle = prices.rolling(n).mean()
    # population std, as most charting packages do
    std = prices.rolling(n).std(ddof=0)
    upper = middle + k * std
    lower = middle - k * std
    width = (upper - lower).replace(0, np.nan)
    return pd.DataFrame({"upper": upper, "middle": middle, "lower": lower, "pct_b": (prices - lower) / width})


def atr(df: pd.DataFrame, n: int = 14) -> pd.Series:
    """Average true range (rolling mean of true range)."""
    high_low = df["high"] - df["low"]
    high_close = (df["high"] - df["close"].shift()).abs()
    low_close = (df["low"] - df["close"].shift()).abs()
    tr = pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)
    return tr.rolling(n).mean()


def add_moving_averages(df: pd.DataFrame, periods: Iterable[int] = (10, 20, 50), ma_type: str = "SMA") -> pd.DataFrame:
    """Add `sma_N` / `ema_N` columns. Returns a copy."""
    df = df.copy()
    for period in periods:
        df[f"{ma_type.lower()}_{period}"] = moving_average(df["close"], period, ma_type)
        logger.debug("Added %s with period %d", ma_type.upper(), period)
    return df


def add_rsi(df: pd.DataFrame, n: int = 14, column: str = "rsi") -> pd.DataFrame:
    df = df.copy()
    df[column] = rsi(df["close"], n)
    return df


def add_macd(df: pd.DataFrame, n_fast: int = 12, n_slow: int = 26, n_signal: int = 9) -> pd.DataFrame:
    df = df.copy()
    m = macd(df["close"], n_fast, n_slow, n_signal)
    df["macd"] = m["macd"]
    df["macd_signal"] = m["signal"]
    df["macd_histogram"] = m["histogram"]
    return df


def add_bollinger_bands(df: pd.DataFrame, n: int = 20, k: float = 2.0) -> pd.DataFrame:
    df = df.copy()
    bb = bollinger_bands(df["close"], n, k)
    df["bb_upper"] = bb["upper"]
    df["bb_middle"] = bb["middle"]
    df["bb_lower"] = bb["lower"]
    df["bb_pctb"] = bb["pct_b"]
    return df


def add_all_indicators(
    df: pd.DataFrame,
    ma_periods: Iterable[int] = (10, 20, 50),
    rsi_period: int = 14,
    bb_period: int = 20,
) -> pd.DataFrame:
    """SMA + EMA for each period, RSI, MACD, Bollinger Bands, and ATR when OHLC is present."""
    ma_periods = tuple(ma_periods)
    df = add_moving_averages(df, ma_periods, "SMA")
    df = add_moving_averages(df, ma_periods, "EMA")
    df = add_rsi(df, rsi_period)
    df = add_macd(df)
    df = add_bollinger_bands(df, bb_period)
    if {"high", "low"}.issubset(df.columns):
        df["atr"] = atr(df)
    logger.info("Added all technical indicators (%d columns)", len(df.columns))
    return df
