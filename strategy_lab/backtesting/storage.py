"""Persist backtest and optimizer results, keyed by strategy name and run time."""

from __future__ import annotations
import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from strategy_lab.backtesting.engine import BacktestResult

logger = logging.getLogger("strategy_lab.backtest.storage")


def result_filename(strategy_name: str, when: Optional[datetime] = None) -> str:
    """'Moving Average Crossover' -> 'moving_average_crossover_20240102_030405'."""
    slug = re.sub(r"[^a-z0-9]+", "_", strategy_name.lower()).strip("_") or "strategy"
    return f"{slug}_{(when or datetime.now()).strftime('%Y%m%d_%H%M%S')}"


def save_backtest_results(result: BacktestResult, results_dir: Path, filename: Optional[str] = None) -> Path:
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / f"{filename or result_filename(result.strategy_name)}.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, default=str)
    logger.info("Backtest results saved to %s", path)
    return path


def load_backtest_results(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_optimization_results(results: pd.DataFrame, results_dir: Path, strategy_name: str) -> Path:
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / f"{result_filename(strategy_name)}_optimization.csv"
    results.to_csv(path, index=False)
    logger.info("Optimization results saved to %s", path)
    return path
