"""
Core data types for bars, signals, trades and positions.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class ExitReason(str, Enum):
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    SIGNAL = "signal"
    END_OF_SESSION = "end_of_session"
    MANUAL = "manual"


@dataclass(frozen=True)
class PriceBar:
    """OHLCV candle for one symbol at one interval."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3.0


@dataclass(frozen=True)
class Trade:
    """
    Executed ledger entry. Never mutated: cost adjustments produce a copy
    with a different portfolio_value_after, price and quantity stay as filled.
    """
    timestamp: Any
    action: Signal
    price: float
    quantity: float
    cash_flow: float
    portfolio_value_after: float
    symbol: str = ""
    reason: str = ""

    @property
    def notional(self) -> float:
        return abs(self.cash_flow)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "action": self.action.value,
            "price": self.price,
            "quantity": self.quantity,
            "cash_flow": self.cash_flow,
            "portfolio_value_after": self.portfolio_value_after,
            "symbol": self.symbol,
            "reason": self.reason,
        }


@dataclass
class Position:
    """Open long position (paper trading). Owned by the portfolio."""
    symbol: str
    quantity: float
    entry_price: float
    entry_time: Any
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    last_price: float = 0.0
    unrealized_pnl: float = 0.0

    def __post_init__(self) -> None:
        if not self.last_price:
            self.last_price = self.entry_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.entry_price

    @property
    def value(self) -> float:
        return self.quantity * self.last_price

    @property
    def unrealized_pnl_pct(self) -> float:
        if self.cost_basis == 0:
            return 0.0
        return self.unrealized_pnl / self.cost_basis * 100.0

    @property
    def risk_amount(self) -> float:
        """Loss if the stop is hit; 0 without a stop."""
        if self.stop_loss is None:
            return 0.0
        return max(0.0, (self.entry_price - self.stop_loss) * self.quantity)

    def mark(self, price: float) -> None:
        self.last_price = price
        self.unrealized_pnl = self.value - self.cost_basis
