"""
RSI mean reversion: BUY at or below the oversold level, SELL at or above
the overbought level. Strength grows with distance past the threshold.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd

from strategy_lab.core.errors import ParameterValidationError
from strategy_lab.indicators.technical import add_rsi
from strategy_lab.strategies.base import BaseStrategy, require_number, require_period
from strategy_lab.strategies.registry import register_strategy

DEFAULT_RSI_PERIOD = 14


@register_strategy("rsi_mean_reversion")
@dataclass(frozen=True)
class RSIMeanReversion(BaseStrategy):
    period: int = DEFAULT_RSI_PERIOD
    oversold: float = 30.0
    overbought: float = 70.0

    name = "RSI Mean Reversion"

    def __post_init__(self) -> None:
        require_period(self.period, "RSI period")
        require_number(self.oversold, "oversold")
        require_number(self.overbought, "overbought")
        if not 0 < self.oversold < 100 or not 0 < self.overbought < 100:
            raise ParameterValidationError("RSI thresholds must lie strictly between 0 and 100")
        if self.oversold >= self.overbought:
            raise ParameterValidationError(
                f"oversold ({self.oversold}) must be < overbought ({self.overbought})"
            )

    @property
    def description(self) -> str:
        return f"Buy when RSI <= {self.oversold:g}, sell when RSI >= {self.overbought:g}"

    def rsi_column(self, df: pd.DataFrame) -> str:
        column = f"rsi_{self.period}"
        # a bare `rsi` column from the indicator pipeline is the default-period RSI
        if column not in df.columns and self.period == DEFAULT_RSI_PERIOD and "rsi" in df.columns:
            return "rsi"
        return column

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        column = self.rsi_column(df)
        if column in df.columns:
            return df.copy()
        return add_rsi(df, self.period, column=column)

    def compute_signals(self, df: pd.DataFrame) -> Tuple[pd.Series, pd.Series]:
        values = df[self.rsi_column(df)].astype(float)
        buy = values.notna() & (values <= self.oversold)
        sell = values.notna() & (values >= self.overbought)
        return buy, sell

    def signal_strength(self, df: pd.DataFrame, buy: pd.Series, sell: pd.Series) -> pd.Series:
        values = df[self.rsi_column(df)].astype(float)
        buy_strength = (self.oversold - values) / self.oversold
        sell_strength = -(values - self.overbought) / (100 - self.overbought)
        return pd.Series(np.select([buy, sell], [buy_strength, sell_strength], default=0.0), index=df.index)
