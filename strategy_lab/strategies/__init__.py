"""Strategies: base interface, registry and implementations."""

from strategy_lab.strategies.base import BaseStrategy, generate_signals
from strategy_lab.strategies.registry import (
    register_strategy,
    create_strategy,
    get_strategy_class,
    available_strategies,
)
from strategy_lab.strategies.ma_crossover import MovingAverageCrossover
from strategy_lab.strategies.rsi_mean_reversion import RSIMeanReversion

__all__ = [
    "BaseStrategy",
    "generate_signals",
    "register_strategy",
    "create_strategy",
    "get_strategy_class",
    "available_strategies",
    "MovingAverageCrossover",
    "RSIMeanReversion",
]
