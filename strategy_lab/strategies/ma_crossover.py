"""
Moving average crossover: BUY when the fast MA crosses above the slow MA,
SELL when it crosses below. A tie on the previous bar counts as "not yet
crossed", so the signal fires on the first bar that is strictly across.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

import pandas as pd

from strategy_lab.core.errors import ParameterValidationError
from strategy_lab.indicators.technical import MA_TYPES, add_moving_averages
from strategy_lab.strategies.base import BaseStrategy, require_period
from strategy_lab.strategies.registry import register_strategy


@register_strategy("ma_crossover")
@dataclass(frozen=True)
class MovingAverageCrossover(BaseStrategy):
    fast_period: int = 10
    slow_period: int = 20
    ma_type: str = "SMA"

    name = "Moving Average Crossover"

    def __post_init__(self) -> None:
        if not isinstance(self.ma_type, str) or self.ma_type.upper() not in MA_TYPES:
            raise ParameterValidationError(f"ma_type must be one of {MA_TYPES}, got {self.ma_type!r}")
        object.__setattr__(self, "ma_type", self.ma_type.upper())
        require_period(self.fast_period, "fast_period")
        require_period(self.slow_period, "slow_period")
        if self.fast_period >= self.slow_period:
            raise ParameterValidationError(
                f"fast_period ({self.fast_period}) must be < slow_period ({self.slow_period})"
            )

    @property
    def description(self) -> str:
        fast = f"{self.ma_type}{self.fast_period}"
        slow = f"{self.ma_type}{self.slow_period}"
        return f"Buy when {fast} crosses above {slow}, sell when it crosses below"

    @property
    def fast_column(self) -> str:
        return f"{self.ma_type.lower()}_{self.fast_period}"

    @property
    def slow_column(self) -> str:
        return f"{self.ma_type.lower()}_{self.slow_period}"

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [p for p, c in ((self.fast_period, self.fast_column), (self.slow_period, self.slow_column))
                   if c not in df.columns]
        if not missing:
            return df.copy()
        return add_moving_averages(df, missing, self.ma_type)

    def compute_signals(self, df: pd.DataFrame) -> Tuple[pd.Series, pd.Series]:
        fast = df[self.fast_column].astype(float)
        slow = df[self.slow_column].astype(float)
        prev_fast = fast.shift(1)
        prev_slow = slow.shift(1)
        # any NaN at i or i-1 (warm-up, index 0) means no signal
        valid = fast.notna() & slow.notna() & prev_fast.notna() & prev_slow.notna()
        buy = valid & (prev_fast <= prev_slow) & (fast > slow)
        sell = valid & (prev_fast >= prev_slow) & (fast < slow)
        return buy, sell
