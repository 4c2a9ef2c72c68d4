"""Analytics: equity curve and performance metrics (Sharpe, MDD, win rate, etc.)."""

from strategy_lab.analytics.metrics import (
    PerformanceReport,
    RoundTrip,
    build_equity_curve,
    compute_performance,
    equity_returns,
    pair_round_trips,
    sharpe_ratio,
    max_drawdown,
    win_rate,
    profit_factor,
    expectancy,
)

__all__ = [
    "PerformanceReport",
    "RoundTrip",
    "build_equity_curve",
    "compute_performance",
    "equity_returns",
    "pair_round_trips",
    "sharpe_ratio",
    "max_drawdown",
    "win_rate",
    "profit_factor",
    "expectancy",
]
