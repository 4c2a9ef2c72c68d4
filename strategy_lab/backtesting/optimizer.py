"""
Exhaustive grid search over strategy parameters. Every valid combination is
backtested; invalid ones (e.g. fast >= slow) are skipped, not counted as failures.
"""

from __future__ import annotations
import itertools
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Type, Union

import pandas as pd

from strategy_lab.backtesting.engine import run_backtest
from strategy_lab.core.config import BacktestConfig
from strategy_lab.core.data import BarsLike, as_frame
from strategy_lab.core.errors import ParameterValidationError
from strategy_lab.strategies.base import BaseStrategy
from strategy_lab.strategies.registry import get_strategy_class

logger = logging.getLogger("strategy_lab.backtest.optimizer")

RESULT_COLUMNS = ("total_return", "total_return_pct", "num_trades", "win_rate", "sharpe_ratio", "max_drawdown")


def parameter_grid(param_grid: Mapping[str, Sequence[Any]]) -> Iterable[Dict[str, Any]]:
    """Cartesian product of the ranges, in key order then value order."""
    keys = list(param_grid)
    for values in itertools.product(*(param_grid[k] for k in keys)):
        yield dict(zip(keys, values))


def grid_search(
    strategy: Union[str, Type[BaseStrategy]],
    bars: BarsLike,
    param_grid: Mapping[str, Sequence[Any]],
    config: Optional[BacktestConfig] = None,
    fixed_params: Optional[Mapping[str, Any]] = None,
) -> pd.DataFrame:
    """
    Backtest every combination of param_grid; rows sorted by total_return_pct, best first.
    `num_trades` counts completed round trips.
    """
    strategy_cls = get_strategy_class(strategy) if isinstance(strategy, str) else strategy
    df = as_frame(bars)
    rows = []
    skipped = 0
    for params in parameter_grid(param_grid):
        full = {**(fixed_params or {}), **params}
        try:
            instance = strategy_cls(**full)
        except ParameterValidationError as e:
            skipped += 1
            logger.debug("Skipping %s: %s", params, e)
            continue
        logger.info("Testing %s %s", strategy_cls.name, params)
        # each trial gets its own copy of the series and its own ledger
        report = run_backtest(instance, df.copy(), config).report
        rows.append({
            **params,
            "total_return": report.total_return,
            "total_return_pct": report.total_return_pct,
            "num_trades": report.num_completed_trades,
            "win_rate": report.win_rate,
            "sharpe_ratio": report.sharpe_ratio,
            "max_drawdown": report.max_drawdown,
        })
    logger.info("Optimization complete: %d combinations tested, %d skipped", len(rows), skipped)
    if not rows:
        return pd.DataFrame(columns=[*param_grid, *RESULT_COLUMNS])
    results = pd.DataFrame(rows)
    return results.sort_values("total_return_pct", ascending=False, kind="stable").reset_index(drop=True)


def optimize_ma_crossover(
    bars: BarsLike,
    fast_range: Sequence[int] = (5, 10, 15, 20),
    slow_range: Sequence[int] = (20, 30, 50, 100),
    ma_type: str = "SMA",
    config: Optional[BacktestConfig] = None,
) -> pd.DataFrame:
    return grid_search(
        "ma_crossover", bars,
        {"fast_period": fast_range, "slow_period": slow_range},
        config, fixed_params={"ma_type": ma_type},
    )


def optimize_rsi(
    bars: BarsLike,
    periods: Sequence[int] = (7, 14, 21),
    oversold_levels: Sequence[float] = (20, 30, 40),
    overbought_levels: Sequence[float] = (60, 70, 80),
    config: Optional[BacktestConfig] = None,
) -> pd.DataFrame:
    return grid_search(
        "rsi_mean_reversion", bars,
        {"period": periods, "oversold": oversold_levels, "overbought": overbought_levels},
        config,
    )
