"""Core: config, types, errors, data helpers, logging."""

from strategy_lab.core.config import load_config, Config, BacktestConfig, RiskConfig, StrategyConfig
from strategy_lab.core.types import Signal, Direction, ExitReason, PriceBar, Position, Trade
from strategy_lab.core.errors import (
    StrategyLabError,
    InvalidDataError,
    ParameterValidationError,
    InsufficientFundsError,
    DegenerateRiskInputError,
)
from strategy_lab.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "BacktestConfig",
    "RiskConfig",
    "StrategyConfig",
    "Signal",
    "Direction",
    "ExitReason",
    "PriceBar",
    "Position",
    "Trade",
    "StrategyLabError",
    "InvalidDataError",
    "ParameterValidationError",
    "InsufficientFundsError",
    "DegenerateRiskInputError",
    "setup_logging",
]
