"""
Price series helpers: validation, PriceBar <-> DataFrame, CSV loading.
The core never fetches data; callers hand in an ordered, de-duplicated series.
"""

from __future__ import annotations
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, List, Sequence, Union

import pandas as pd

from strategy_lab.core.errors import InvalidDataError
from strategy_lab.core.types import PriceBar

logger = logging.getLogger("strategy_lab.data")

REQUIRED_COLUMNS = ("timestamp", "close")
OHLCV_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")

BarsLike = Union[pd.DataFrame, Sequence[PriceBar]]


def bars_to_frame(bars: Iterable[PriceBar]) -> pd.DataFrame:
    """Convert PriceBar records to an OHLCV DataFrame with a RangeIndex."""
    rows = [asdict(b) for b in bars]
    if not rows:
        return pd.DataFrame(columns=list(OHLCV_COLUMNS))
    return pd.DataFrame(rows, columns=list(OHLCV_COLUMNS))


def frame_to_bars(df: pd.DataFrame) -> List[PriceBar]:
    validate_bars(df, required=OHLCV_COLUMNS)
    return [
        PriceBar(
            timestamp=row.timestamp,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


def validate_bars(df: pd.DataFrame, required: Sequence[str] = REQUIRED_COLUMNS) -> None:
    """Raise InvalidDataError if any required column is absent."""
    missing = [c for c in required if c not in df.columns]
    if missing:
        logger.error("Missing required columns: %s", ", ".join(missing))
        raise InvalidDataError(f"missing required columns: {', '.join(missing)}")


def as_frame(bars: BarsLike) -> pd.DataFrame:
    """
    Normalize input to a validated DataFrame copy (RangeIndex).
    Accepts a DataFrame or a sequence of PriceBar. A time index named
    `timestamp` is moved back into a column.
    """
    if isinstance(bars, pd.DataFrame):
        keep_index = bars.index.name == "timestamp" and "timestamp" not in bars.columns
        df = bars.reset_index(drop=not keep_index).copy()
    else:
        df = bars_to_frame(bars)
    validate_bars(df)
    return df


def load_price_csv(path: Path, time_column: str = "timestamp") -> pd.DataFrame:
    """
    Load an OHLCV CSV. Accepts `time` as an alias for `timestamp`.
    Sorted ascending; duplicate timestamps are kept (caller's job to dedupe).
    """
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    if time_column not in df.columns and "time" in df.columns:
        df = df.rename(columns={"time": time_column})
    validate_bars(df)
    df[time_column] = pd.to_datetime(df[time_column])
    df = df.sort_values(time_column, kind="stable").reset_index(drop=True)
    logger.info("Loaded %d bars from %s (%s .. %s)", len(df), path, df[time_column].min(), df[time_column].max())
    return df
