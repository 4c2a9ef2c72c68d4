"""
Paper-trading session: replays a price series bar by bar like a live feed.
Unlike the backtest simulator, open positions carry a stop-loss and
take-profit that are checked on every bar, and anything still open at the
end of the session is force-closed.
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from strategy_lab.analytics.metrics import PerformanceReport, compute_performance
from strategy_lab.core.config import BacktestConfig
from strategy_lab.core.data import BarsLike, as_frame
from strategy_lab.core.types import ExitReason, Signal
from strategy_lab.paper_trading.portfolio import Portfolio
from strategy_lab.risk.manager import RiskManager
from strategy_lab.strategies.base import BaseStrategy

logger = logging.getLogger("strategy_lab.paper")


@dataclass
class PaperTradingResult:
    portfolio: Portfolio
    equity_curve: pd.DataFrame
    report: PerformanceReport
    exit_reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def final_value(self) -> float:
        return self.report.final_value

    @property
    def total_return(self) -> float:
        return self.report.total_return

    @property
    def total_return_pct(self) -> float:
        return self.report.total_return_pct

    @property
    def win_rate(self) -> float:
        """Percent of closed round trips that made money."""
        return self.report.win_rate


class PaperTradingSession:
    """
    Per bar, with a position open: mark it, ratchet the trailing stop (if
    enabled), then close on stop-loss, else take-profit, else a SELL signal.
    A BUY opens a position only when flat, affordable and within the
    portfolio risk cap; rejections are logged no-ops.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        config: Optional[BacktestConfig] = None,
        risk_manager: Optional[RiskManager] = None,
    ):
        self.strategy = strategy
        self.config = config or BacktestConfig()
        self.risk_manager = risk_manager or RiskManager()

    def _manage_open_position(self, portfolio: Portfolio, symbol: str, price: float, ts: Any, signal: Any) -> None:
        position = portfolio.mark(symbol, price)
        if position is None:
            return
        position.stop_loss = self.risk_manager.update_trailing_stop(position, price)
        if position.stop_loss is not None and price <= position.stop_loss:
            logger.info("Stop-loss triggered for %s at %.4f (stop %.4f)", symbol, price, position.stop_loss)
            portfolio.close_position(symbol, price, ts, ExitReason.STOP_LOSS)
        elif position.take_profit is not None and price >= position.take_profit:
            logger.info("Take-profit triggered for %s at %.4f (target %.4f)", symbol, price, position.take_profit)
            portfolio.close_position(symbol, price, ts, ExitReason.TAKE_PROFIT)
        elif signal == Signal.SELL:
            portfolio.close_position(symbol, price, ts, ExitReason.SIGNAL)

    def _try_open(self, portfolio: Portfolio, symbol: str, price: float, ts: Any) -> None:
        quantity = portfolio.cash * self.config.position_size_fraction / price
        levels = self.risk_manager.protective_levels(price)
        check = self.risk_manager.validate_new_position(
            symbol, quantity, price, levels.stop_loss, portfolio.positions.values(), portfolio.total_value()
        )
        if not check.allowed:
            logger.warning("Entry rejected for %s at %.4f: %s", symbol, price, check.reason)
            return
        portfolio.open_position(symbol, quantity, price, ts, levels.stop_loss, levels.take_profit)

    def run(self, bars: BarsLike, symbol: str = "") -> PaperTradingResult:
        symbol = symbol or "ASSET"
        logger.info("Starting paper trading session: %s on %s", self.strategy.name, symbol)
        data = self.strategy.generate_signals(as_frame(bars))
        portfolio = Portfolio(self.config.initial_capital)
        values: List[float] = []
        last_price: Optional[float] = None
        last_ts: Any = None

        for ts, price, signal in zip(data["timestamp"], data["close"], data["signal"]):
            if pd.isna(signal) or pd.isna(price):
                values.append(values[-1] if values else portfolio.initial_capital)
                continue
            price = float(price)
            last_price, last_ts = price, ts

            if symbol in portfolio.positions:
                self._manage_open_position(portfolio, symbol, price, ts, signal)
            if signal == Signal.BUY and symbol not in portfolio.positions and portfolio.cash > 0:
                self._try_open(portfolio, symbol, price, ts)
            values.append(portfolio.total_value())

        if last_price is not None:
            for open_symbol in list(portfolio.positions):
                portfolio.close_position(open_symbol, last_price, last_ts, ExitReason.END_OF_SESSION)

        equity = pd.DataFrame({"timestamp": data["timestamp"].to_numpy(), "portfolio_value": values})
        final_value = portfolio.total_value()
        report = compute_performance(
            portfolio.trade_history, values, portfolio.initial_capital, final_value, self.config.periods_per_year
        )
        reasons = Counter(t.reason for t in portfolio.trade_history if t.action == Signal.SELL)
        logger.info(
            "Paper trading session complete: final $%.2f (%.2f%%)",
            final_value, report.total_return_pct,
        )
        return PaperTradingResult(portfolio=portfolio, equity_curve=equity, report=report, exit_reasons=dict(reasons))


def format_paper_report(result: PaperTradingResult) -> str:
    perf = result.portfolio.performance
    m = result.report
    lines = [
        "--- Paper Trading Results ---",
        f"Initial capital:  ${result.portfolio.initial_capital:,.2f}",
        f"Final value:      ${m.final_value:,.2f}",
        f"Total return:     ${m.total_return:,.2f} ({m.total_return_pct:.2f}%)",
        f"Trades:           {perf.total_trades} (closed: {perf.closed_trades}, wins: {perf.winning_trades}, losses: {perf.losing_trades})",
        f"Win rate:         {m.win_rate:.2f}%",
        f"Total profit:     ${perf.total_profit:,.2f}",
        f"Total loss:       ${perf.total_loss:,.2f}",
        f"Max drawdown:     {m.max_drawdown:.2f}%",
        f"Exit reasons:     {', '.join(f'{k}={v}' for k, v in sorted(result.exit_reasons.items())) or 'none'}",
        f"Open positions:   {len(result.portfolio.positions)}",
    ]
    return "\n".join(lines)
