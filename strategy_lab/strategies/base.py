"""Abstract strategy: indicators + per-bar BUY/SELL/HOLD signals."""

from __future__ import annotations
import logging
import numbers
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd

from strategy_lab.core.data import BarsLike, as_frame, validate_bars
from strategy_lab.core.errors import ParameterValidationError
from strategy_lab.core.types import Signal

logger = logging.getLogger("strategy_lab.strategies")


def require_period(value: Any, label: str) -> int:
    """Indicator window: a positive integer (bool and float are rejected)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        raise ParameterValidationError(f"{label} must be a positive integer, got {value!r}")
    return int(value)


def require_number(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or np.isnan(value):
        raise ParameterValidationError(f"{label} must be a number, got {value!r}")
    return float(value)


class BaseStrategy(ABC):
    """
    Strategy computes any missing indicator columns, then maps every bar to a
    signal and a strength in [-1, 1]. Concrete strategies are frozen
    dataclasses, so parameters cannot change after construction.
    """

    key: str = "base"
    name: str = "Base Strategy"

    @property
    def description(self) -> str:
        return self.name

    @property
    def parameters(self) -> Dict[str, Any]:
        return asdict(self)

    @abstractmethod
    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return a copy of df with the indicator columns this strategy reads."""

    @abstractmethod
    def compute_signals(self, df: pd.DataFrame) -> Tuple[pd.Series, pd.Series]:
        """Return boolean (buy, sell) masks aligned with df. Strength via signal_strength()."""

    def signal_strength(self, df: pd.DataFrame, buy: pd.Series, sell: pd.Series) -> pd.Series:
        return pd.Series(np.select([buy, sell], [1.0, -1.0], default=0.0), index=df.index)

    def generate_signals(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add `signal` and `signal_strength` columns. Does not modify the input."""
        validate_bars(df)
        df = self.compute_indicators(df)
        buy, sell = self.compute_signals(df)
        buy = buy.fillna(False).astype(bool)
        sell = sell.fillna(False).astype(bool) & ~buy
        df["signal"] = np.select([buy, sell], [Signal.BUY.value, Signal.SELL.value], default=Signal.HOLD.value)
        df["signal_strength"] = self.signal_strength(df, buy, sell)
        logger.info(
            "%s: generated %d BUY and %d SELL signals over %d bars",
            self.name, int(buy.sum()), int(sell.sum()), len(df),
        )
        return df


def generate_signals(strategy: BaseStrategy, bars: BarsLike) -> pd.DataFrame:
    """Signal a price series (DataFrame or PriceBar sequence) with the given strategy."""
    return strategy.generate_signals(as_frame(bars))
