"""Risk management: position sizing, protective levels, portfolio risk cap."""

from strategy_lab.risk.manager import RiskManager, RiskResult, ProtectiveLevels
from strategy_lab.risk.sizing import (
    position_size_fixed,
    position_size_kelly,
    position_size_atr,
    stop_loss_price,
    take_profit_price,
    risk_reward_ratio,
    trailing_stop,
    portfolio_risk,
    check_risk_limits,
    PositionRisk,
)

__all__ = [
    "RiskManager",
    "RiskResult",
    "ProtectiveLevels",
    "position_size_fixed",
    "position_size_kelly",
    "position_size_atr",
    "stop_loss_price",
    "take_profit_price",
    "risk_reward_ratio",
    "trailing_stop",
    "portfolio_risk",
    "check_risk_limits",
    "PositionRisk",
]
