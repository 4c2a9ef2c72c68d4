#!/usr/bin/env python3
"""
Strategy Lab CLI: backtest | paper | optimize | compare
Usage:
  python main.py backtest --data prices.csv [--config config.yaml] [--strategy ma_crossover] [--save]
  python main.py paper --data prices.csv
  python main.py optimize --data prices.csv --strategy rsi_mean_reversion
  python main.py compare --data prices.csv
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from strategy_lab.core.config import Config, load_config
from strategy_lab.core.data import load_price_csv
from strategy_lab.core.errors import StrategyLabError
from strategy_lab.core.logger import setup_logging
from strategy_lab.backtesting.engine import BacktestEngine, compare_strategies, format_report
from strategy_lab.backtesting.optimizer import optimize_ma_crossover, optimize_rsi
from strategy_lab.backtesting.storage import save_backtest_results, save_optimization_results
from strategy_lab.paper_trading.session import PaperTradingSession, format_paper_report
from strategy_lab.risk.manager import RiskManager
from strategy_lab.strategies.registry import available_strategies, create_strategy

logger = logging.getLogger("strategy_lab")


def _strategy(config: Config, key: str | None):
    key = key or config.strategy.name
    params = config.strategy.parameters() if key == config.strategy.name else {}
    return create_strategy(key, **params)


def run_backtest(config: Config, df, key: str | None, save: bool) -> int:
    strategy = _strategy(config, key)
    result = BacktestEngine(strategy, config.backtest).run(df, symbol=config.strategy.symbol)
    print()
    print(format_report(result))
    if save:
        path = save_backtest_results(result, config.results_dir)
        print(f"\nResults saved to: {path}")
    return 0


def run_paper(config: Config, df, key: str | None) -> int:
    strategy = _strategy(config, key)
    session = PaperTradingSession(strategy, config.backtest, RiskManager(config.risk))
    result = session.run(df, symbol=config.strategy.symbol)
    print()
    print(format_paper_report(result))
    return 0


def run_optimize(config: Config, df, key: str | None, save: bool) -> int:
    key = key or config.strategy.name
    if key == "rsi_mean_reversion":
        results = optimize_rsi(df, config=config.backtest)
    else:
        results = optimize_ma_crossover(df, ma_type=config.strategy.ma_type, config=config.backtest)
    print("\n--- Top 5 parameter combinations ---")
    print(results.head(5).to_string(index=False))
    if save:
        path = save_optimization_results(results, config.results_dir, key)
        print(f"\nResults saved to: {path}")
    return 0


def run_compare(config: Config, df) -> int:
    strategies = [create_strategy(key) for key in available_strategies()]
    comparison = compare_strategies(strategies, df, config.backtest)
    print("\n--- Strategy comparison ---")
    print(comparison.to_string(index=False))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Strategy Lab CLI")
    parser.add_argument("mode", choices=["backtest", "paper", "optimize", "compare"])
    parser.add_argument("--data", type=Path, required=True, help="OHLCV CSV (timestamp, open, high, low, close, volume)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--strategy", choices=available_strategies(), default=None)
    parser.add_argument("--save", action="store_true", help="Persist results under results_dir")
    args = parser.parse_args()

    config = load_config(args.config, ROOT)
    setup_logging(config.logging.level, config.logging.log_dir, config.logging.log_file)
    try:
        df = load_price_csv(args.data)
        if args.mode == "backtest":
            return run_backtest(config, df, args.strategy, args.save)
        if args.mode == "paper":
            return run_paper(config, df, args.strategy)
        if args.mode == "optimize":
            return run_optimize(config, df, args.strategy, args.save)
        return run_compare(config, df)
    except (StrategyLabError, FileNotFoundError) as e:
        logger.error("%s failed: %s", args.mode, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
