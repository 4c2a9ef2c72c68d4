"""
Performance metrics: equity curve, Sharpe, max drawdown, win rate, profit factor.
Pure functions over a trade ledger; running them twice gives identical results.
"""

from __future__ import annotations
from collections import defaultdict, deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, List, Sequence

import numpy as np
import pandas as pd

from strategy_lab.core.types import Signal, Trade


@dataclass(frozen=True)
class RoundTrip:
    """A BUY matched with the SELL that closed it."""
    symbol: str
    entry_time: Any
    exit_time: Any
    buy_price: float
    sell_price: float
    quantity: float

    @property
    def profit(self) -> float:
        return (self.sell_price - self.buy_price) * self.quantity


@dataclass(frozen=True)
class PerformanceReport:
    """Aggregate performance metrics. win_rate and max_drawdown are percentages."""
    initial_capital: float
    final_value: float
    total_return: float
    total_return_pct: float
    num_trades: int
    num_completed_trades: int
    win_rate: float
    profit_factor: float
    sharpe_ratio: float
    max_drawdown: float
    max_drawdown_value: float
    avg_win: float
    avg_loss: float
    largest_win: float
    largest_loss: float
    avg_trade: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def equity_returns(equity: Sequence[float]) -> np.ndarray:
    """returns[i] = (equity[i] - equity[i-1]) / equity[i-1]."""
    arr = np.asarray(equity, dtype=float)
    if len(arr) < 2:
        return np.array([], dtype=float)
    prev = arr[:-1]
    return np.diff(arr) / np.where(prev != 0, prev, np.nan)


def sharpe_ratio(returns: Sequence[float], periods_per_year: float = 252.0) -> float:
    """Annualized Sharpe (sample std). 0 when std is 0 or there are fewer than 2 returns."""
    arr = np.asarray(returns, dtype=float)
    arr = arr[~np.isnan(arr)]
    if len(arr) < 2:
        return 0.0
    std = arr.std(ddof=1)
    if std <= 1e-12:
        return 0.0
    return float(arr.mean() / std * np.sqrt(periods_per_year))


def max_drawdown(equity: Sequence[float]) -> float:
    """Max drawdown in percent, non-positive (e.g. -15.0 = 15% below the running peak)."""
    if len(equity) == 0:
        return 0.0
    arr = np.asarray(equity, dtype=float)
    peak = np.maximum.accumulate(arr)
    dd = (arr - peak) / np.where(peak != 0, peak, 1)
    return float(np.min(dd)) * 100.0


def max_drawdown_value(equity: Sequence[float]) -> float:
    """Largest dollar drop from the running peak (non-positive)."""
    if len(equity) == 0:
        return 0.0
    arr = np.asarray(equity, dtype=float)
    return float(np.min(arr - np.maximum.accumulate(arr)))


def win_rate(pnls: Sequence[float]) -> float:
    """Percent of round trips with positive PnL."""
    if len(pnls) == 0:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls) * 100.0


def profit_factor(pnls: Sequence[float]) -> float:
    """Gross profit / gross loss. NaN if there are no losses, 0 if there are no trades."""
    if len(pnls) == 0:
        return 0.0
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return float("nan")
    return wins / losses


def expectancy(pnls: Sequence[float]) -> float:
    """Average PnL per round trip."""
    if len(pnls) == 0:
        return 0.0
    return sum(pnls) / len(pnls)


def pair_round_trips(trades: Sequence[Trade]) -> List[RoundTrip]:
    """
    Match each SELL with the oldest open BUY of the same symbol (FIFO).
    For a single-symbol alternating ledger this is the i-th BUY with the i-th SELL;
    unmatched trailing BUYs are left out. The SELL's quantity is not used:
    profit is measured on the BUY quantity.
    """
    open_buys: Dict[str, Deque[Trade]] = defaultdict(deque)
    trips: List[RoundTrip] = []
    for t in trades:
        if t.action == Signal.BUY:
            open_buys[t.symbol].append(t)
        elif t.action == Signal.SELL and open_buys[t.symbol]:
            buy = open_buys[t.symbol].popleft()
            trips.append(RoundTrip(
                symbol=t.symbol,
                entry_time=buy.timestamp,
                exit_time=t.timestamp,
                buy_price=buy.price,
                sell_price=t.price,
                quantity=buy.quantity,
            ))
    return trips


def build_equity_curve(trades: Sequence[Trade], timestamps: Sequence[Any], initial_capital: float) -> pd.DataFrame:
    """
    Step function over every bar: initial capital until the first trade, then each
    trade's recorded portfolio value from its bar up to the next trade's bar.
    """
    ts = pd.Series(list(timestamps))
    values = np.full(len(ts), float(initial_capital))
    for t in trades:
        hits = np.flatnonzero((ts >= t.timestamp).to_numpy())
        if len(hits):
            values[hits[0]:] = t.portfolio_value_after
    return pd.DataFrame({"timestamp": ts, "portfolio_value": values})


def compute_performance(
    trades: Sequence[Trade],
    equity: Sequence[float],
    initial_capital: float,
    final_value: float,
    periods_per_year: float = 252.0,
) -> PerformanceReport:
    """Full report from a ledger, its equity values and the (cost-adjusted) final value."""
    trips = pair_round_trips(trades)
    pnls = [r.profit for r in trips]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    total_return = final_value - initial_capital
    return PerformanceReport(
        initial_capital=initial_capital,
        final_value=final_value,
        total_return=total_return,
        total_return_pct=total_return / initial_capital * 100.0 if initial_capital else 0.0,
        num_trades=len(trades),
        num_completed_trades=len(trips),
        win_rate=win_rate(pnls),
        profit_factor=profit_factor(pnls),
        sharpe_ratio=sharpe_ratio(equity_returns(equity), periods_per_year),
        max_drawdown=max_drawdown(equity),
        max_drawdown_value=max_drawdown_value(equity),
        avg_win=float(np.mean(wins)) if wins else 0.0,
        avg_loss=float(np.mean(losses)) if losses else 0.0,
        largest_win=max(wins) if wins else 0.0,
        largest_loss=min(losses) if losses else 0.0,
        avg_trade=expectancy(pnls),
    )
