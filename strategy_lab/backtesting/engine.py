"""
Backtest engine: signals -> simulated ledger -> transaction costs -> equity curve -> report.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from strategy_lab.analytics.metrics import PerformanceReport, build_equity_curve, compute_performance
from strategy_lab.backtesting.costs import TransactionCosts, apply_transaction_costs
from strategy_lab.backtesting.simulator import TradeSimulator
from strategy_lab.core.config import BacktestConfig
from strategy_lab.core.data import BarsLike, as_frame
from strategy_lab.core.types import Trade
from strategy_lab.strategies.base import BaseStrategy

logger = logging.getLogger("strategy_lab.backtest")


@dataclass
class BacktestResult:
    """Backtest output bundle consumed by reporting and persistence."""
    strategy_name: str
    parameters: Dict[str, Any]
    signals: pd.DataFrame
    trades: Tuple[Trade, ...]
    equity_curve: pd.DataFrame
    report: PerformanceReport
    costs: TransactionCosts = field(default_factory=TransactionCosts)
    final_position: float = 0.0

    def trades_frame(self) -> pd.DataFrame:
        return pd.DataFrame([t.to_dict() for t in self.trades])

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly bundle (timestamps as ISO strings, NaN as None)."""
        def clean(value: Any) -> Any:
            if isinstance(value, np.generic):
                value = value.item()
            if isinstance(value, float) and math.isnan(value):
                return None
            if hasattr(value, "isoformat"):
                return value.isoformat()
            return value

        return {
            "strategy_name": self.strategy_name,
            "parameters": {k: clean(v) for k, v in self.parameters.items()},
            "performance": {k: clean(v) for k, v in self.report.to_dict().items()},
            "transaction_costs": self.costs.to_dict(),
            "trades": [{k: clean(v) for k, v in t.to_dict().items()} for t in self.trades],
            "equity_curve": [
                {"timestamp": clean(ts), "portfolio_value": float(v)}
                for ts, v in zip(self.equity_curve["timestamp"], self.equity_curve["portfolio_value"])
            ],
        }


class BacktestEngine:
    """
    Runs a strategy over a full price series. Each run owns its ledger;
    nothing is shared between runs.
    """

    def __init__(self, strategy: BaseStrategy, config: Optional[BacktestConfig] = None):
        self.strategy = strategy
        self.config = config or BacktestConfig()

    def run(self, bars: BarsLike, symbol: str = "") -> BacktestResult:
        df = as_frame(bars)
        cfg = self.config
        if len(df):
            logger.info(
                "Backtest %s on %d bars (%s .. %s), capital $%.2f",
                self.strategy.name, len(df), df["timestamp"].iloc[0], df["timestamp"].iloc[-1], cfg.initial_capital,
            )
        signals = self.strategy.generate_signals(df)
        sim = TradeSimulator(cfg.initial_capital, cfg.position_size_fraction, symbol).run(signals)
        trades, final_value, costs = apply_transaction_costs(
            sim.trades, sim.final_value, cfg.commission_rate, cfg.slippage_rate
        )
        equity = build_equity_curve(trades, signals["timestamp"], cfg.initial_capital)
        report = compute_performance(
            trades, equity["portfolio_value"], cfg.initial_capital, final_value, cfg.periods_per_year
        )
        logger.info(
            "Backtest complete: %d trades, return %.2f%%, final $%.2f",
            report.num_trades, report.total_return_pct, report.final_value,
        )
        return BacktestResult(
            strategy_name=self.strategy.name,
            parameters=self.strategy.parameters,
            signals=signals,
            trades=trades,
            equity_curve=equity,
            report=report,
            costs=costs,
            final_position=sim.final_position,
        )


def run_backtest(strategy: BaseStrategy, bars: BarsLike, config: Optional[BacktestConfig] = None, symbol: str = "") -> BacktestResult:
    return BacktestEngine(strategy, config).run(bars, symbol)


def compare_strategies(
    strategies: Iterable[BaseStrategy],
    bars: BarsLike,
    config: Optional[BacktestConfig] = None,
) -> pd.DataFrame:
    """One row per strategy, best return first."""
    df = as_frame(bars)
    rows = []
    for strategy in strategies:
        r = run_backtest(strategy, df, config).report
        rows.append({
            "strategy_name": strategy.name,
            "description": strategy.description,
            "total_return": r.total_return,
            "return_pct": r.total_return_pct,
            "sharpe_ratio": r.sharpe_ratio,
            "max_drawdown": r.max_drawdown,
            "num_trades": r.num_completed_trades,
            "win_rate": r.win_rate,
            "profit_factor": r.profit_factor,
        })
    comparison = pd.DataFrame(rows)
    if comparison.empty:
        return comparison
    return comparison.sort_values("return_pct", ascending=False, kind="stable").reset_index(drop=True)


def format_report(result: BacktestResult) -> str:
    m = result.report
    lines = [
        "--- Backtest Results ---",
        f"Strategy:         {result.strategy_name}",
        f"Initial capital:  ${m.initial_capital:,.2f}",
        f"Final value:      ${m.final_value:,.2f}",
        f"Total return:     ${m.total_return:,.2f} ({m.total_return_pct:.2f}%)",
        f"Trades:           {m.num_trades} (completed: {m.num_completed_trades})",
    ]
    if m.num_completed_trades:
        lines += [
            f"Win rate:         {m.win_rate:.2f}%",
            f"Avg win / loss:   ${m.avg_win:,.2f} / ${m.avg_loss:,.2f}",
            f"Largest win/loss: ${m.largest_win:,.2f} / ${m.largest_loss:,.2f}",
        ]
    lines += [
        f"Sharpe ratio:     {m.sharpe_ratio:.2f}",
        f"Max drawdown:     {m.max_drawdown:.2f}%",
        f"Profit factor:    {m.profit_factor:.2f}",
        f"Commission:       ${result.costs.total_commission:,.2f}",
        f"Slippage:         ${result.costs.total_slippage:,.2f}",
        f"Total costs:      ${result.costs.total_costs:,.2f}",
    ]
    return "\n".join(lines)
