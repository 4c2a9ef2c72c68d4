"""Backtesting: trade simulator, transaction costs, engine, optimizer, persistence."""

from strategy_lab.backtesting.simulator import TradeSimulator, SimulationResult, simulate_trades
from strategy_lab.backtesting.costs import TransactionCosts, apply_transaction_costs
from strategy_lab.backtesting.engine import (
    BacktestEngine,
    BacktestResult,
    run_backtest,
    compare_strategies,
    format_report,
)
from strategy_lab.backtesting.optimizer import grid_search, optimize_ma_crossover, optimize_rsi
from strategy_lab.backtesting.storage import save_backtest_results, load_backtest_results, save_optimization_results

__all__ = [
    "TradeSimulator",
    "SimulationResult",
    "simulate_trades",
    "TransactionCosts",
    "apply_transaction_costs",
    "BacktestEngine",
    "BacktestResult",
    "run_backtest",
    "compare_strategies",
    "format_report",
    "grid_search",
    "optimize_ma_crossover",
    "optimize_rsi",
    "save_backtest_results",
    "load_backtest_results",
    "save_optimization_results",
]
