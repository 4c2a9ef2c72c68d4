"""
Trade simulator: single-position FLAT/LONG state machine over a signaled series.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

import pandas as pd

from strategy_lab.core.data import validate_bars
from strategy_lab.core.types import Signal, Trade

logger = logging.getLogger("strategy_lab.backtest")


class PositionState(str, Enum):
    FLAT = "FLAT"
    LONG = "LONG"


@dataclass(frozen=True)
class SimulationResult:
    trades: Tuple[Trade, ...]
    final_cash: float
    final_position: float
    final_value: float


class TradeSimulator:
    """
    Walks the bars once in order:
      FLAT + BUY (cash > 0) -> spend cash * position_size_fraction at the close; LONG
      LONG + SELL           -> sell the whole position at the close; FLAT
    Everything else (HOLD, BUY while LONG, SELL while FLAT) is a no-op.
    An open position at the last bar is not closed; it is marked at the last close.
    """

    def __init__(self, initial_capital: float = 10000.0, position_size_fraction: float = 0.95, symbol: str = ""):
        self.initial_capital = initial_capital
        self.position_size_fraction = position_size_fraction
        self.symbol = symbol

    def run(self, df: pd.DataFrame) -> SimulationResult:
        """df needs timestamp, close and signal columns (output of generate_signals)."""
        validate_bars(df, required=("timestamp", "close", "signal"))
        cash = self.initial_capital
        quantity = 0.0
        state = PositionState.FLAT
        trades: List[Trade] = []

        for ts, price, signal in zip(df["timestamp"], df["close"], df["signal"]):
            if pd.isna(signal) or pd.isna(price):
                continue
            price = float(price)

            if signal == Signal.BUY and state == PositionState.FLAT and cash > 0:
                spend = cash * self.position_size_fraction
                quantity = spend / price
                cash -= spend
                state = PositionState.LONG
                trades.append(Trade(
                    timestamp=ts,
                    action=Signal.BUY,
                    price=price,
                    quantity=quantity,
                    cash_flow=-spend,
                    portfolio_value_after=cash + quantity * price,
                    symbol=self.symbol,
                ))
                logger.debug("BUY %.8f units at %.4f", quantity, price)

            elif signal == Signal.SELL and state == PositionState.LONG:
                proceeds = quantity * price
                cash += proceeds
                trades.append(Trade(
                    timestamp=ts,
                    action=Signal.SELL,
                    price=price,
                    quantity=quantity,
                    cash_flow=proceeds,
                    portfolio_value_after=cash,
                    symbol=self.symbol,
                ))
                logger.debug("SELL %.8f units at %.4f", quantity, price)
                quantity = 0.0
                state = PositionState.FLAT

        last_close = float(df["close"].iloc[-1]) if len(df) else 0.0
        final_value = cash + quantity * last_close
        return SimulationResult(
            trades=tuple(trades),
            final_cash=cash,
            final_position=quantity,
            final_value=final_value,
        )


def simulate_trades(
    df: pd.DataFrame,
    initial_capital: float = 10000.0,
    position_size_fraction: float = 0.95,
    symbol: str = "",
) -> SimulationResult:
    return TradeSimulator(initial_capital, position_size_fraction, symbol).run(df)
