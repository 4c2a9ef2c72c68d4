"""
Paper portfolio: cash, at most one long position per symbol, append-only trade history.
Invariant: cash + sum(position.value) == total_value(); cash never goes negative.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from strategy_lab.core.errors import InsufficientFundsError
from strategy_lab.core.types import ExitReason, Position, Signal, Trade

logger = logging.getLogger("strategy_lab.paper")


@dataclass
class PerformanceCounters:
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_profit: float = 0.0
    total_loss: float = 0.0

    @property
    def closed_trades(self) -> int:
        return self.winning_trades + self.losing_trades


class Portfolio:
    def __init__(self, initial_capital: float = 10000.0):
        self.initial_capital = initial_capital
        self.cash = initial_capital
        self.positions: Dict[str, Position] = {}
        self._history: List[Trade] = []
        self.performance = PerformanceCounters()

    @property
    def trade_history(self) -> tuple:
        return tuple(self._history)

    def total_value(self) -> float:
        """Cash plus open positions at their last marked price."""
        return self.cash + sum(p.value for p in self.positions.values())

    def mark(self, symbol: str, price: float) -> Optional[Position]:
        position = self.positions.get(symbol)
        if position is not None:
            position.mark(price)
        return position

    def _debit(self, amount: float) -> None:
        if amount > self.cash:
            raise InsufficientFundsError(amount, self.cash)
        self.cash -= amount

    def open_position(
        self,
        symbol: str,
        quantity: float,
        price: float,
        timestamp: Any,
        stop_loss: Optional[float] = None,
        take_profit: Optional[float] = None,
    ) -> Optional[Position]:
        """Buy. Returns None (logged, no state change) if unaffordable or already open."""
        if symbol in self.positions:
            logger.warning("Position already open for %s", symbol)
            return None
        cost = quantity * price
        try:
            self._debit(cost)
        except InsufficientFundsError as e:
            logger.warning("Insufficient cash for %s: %s", symbol, e)
            return None
        position = Position(
            symbol=symbol,
            quantity=quantity,
            entry_price=price,
            entry_time=timestamp,
            stop_loss=stop_loss,
            take_profit=take_profit,
        )
        self.positions[symbol] = position
        self._history.append(Trade(
            timestamp=timestamp,
            action=Signal.BUY,
            price=price,
            quantity=quantity,
            cash_flow=-cost,
            portfolio_value_after=self.total_value(),
            symbol=symbol,
        ))
        self.performance.total_trades += 1
        logger.info("OPENED %s: %.8f units @ %.4f, cost %.2f", symbol, quantity, price, cost)
        return position

    def close_position(
        self,
        symbol: str,
        price: float,
        timestamp: Any,
        reason: ExitReason = ExitReason.MANUAL,
    ) -> Optional[Trade]:
        """Sell the whole position. Returns None if nothing is open for symbol."""
        position = self.positions.pop(symbol, None)
        if position is None:
            logger.warning("No open position for %s", symbol)
            return None
        proceeds = position.quantity * price
        profit = proceeds - position.cost_basis
        self.cash += proceeds
        trade = Trade(
            timestamp=timestamp,
            action=Signal.SELL,
            price=price,
            quantity=position.quantity,
            cash_flow=proceeds,
            portfolio_value_after=self.total_value(),
            symbol=symbol,
            reason=reason.value,
        )
        self._history.append(trade)
        perf = self.performance
        perf.total_trades += 1
        if profit > 0:
            perf.winning_trades += 1
            perf.total_profit += profit
        else:
            perf.losing_trades += 1
            perf.total_loss += abs(profit)
        logger.info("CLOSED %s @ %.4f, P/L %.2f, reason: %s", symbol, price, profit, reason.value)
        return trade
