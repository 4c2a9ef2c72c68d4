"""
Risk manager: binds RiskConfig to the sizing calculators.
Computes entry stops/targets, ratchets trailing stops and enforces the
portfolio risk cap for new positions.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from strategy_lab.core.config import RiskConfig
from strategy_lab.core.types import Direction, Position
from strategy_lab.risk import sizing

logger = logging.getLogger("strategy_lab.risk")


@dataclass
class RiskResult:
    """Result of risk check: allowed or rejected + reason."""
    allowed: bool
    quantity: float = 0.0
    reason: str = ""


@dataclass(frozen=True)
class ProtectiveLevels:
    stop_loss: float
    take_profit: float
    risk_reward: float


def _as_position_risk(position: Position) -> sizing.PositionRisk:
    return sizing.PositionRisk(position.symbol, position.value, position.risk_amount)


class RiskManager:
    """Stateless apart from its config; safe to share between sessions."""

    def __init__(self, config: Optional[RiskConfig] = None):
        self.config = config or RiskConfig()

    def protective_levels(self, entry_price: float, direction: Direction = Direction.LONG) -> ProtectiveLevels:
        stop = sizing.stop_loss_price(entry_price, self.config.stop_loss_pct, direction)
        target = sizing.take_profit_price(entry_price, self.config.take_profit_pct, direction)
        return ProtectiveLevels(stop, target, sizing.risk_reward_ratio(entry_price, stop, target))

    def update_trailing_stop(self, position: Position, current_price: float) -> Optional[float]:
        """New stop for the position; unchanged when trailing is off or no stop is set."""
        if self.config.trailing_stop_pct <= 0 or position.stop_loss is None:
            return position.stop_loss
        return sizing.trailing_stop(current_price, position.stop_loss, self.config.trailing_stop_pct, Direction.LONG)

    def kelly_size(self, capital: float, win_rate_pct: float, avg_win: float, avg_loss: float) -> sizing.KellySize:
        """Kelly sizing from backtest stats (win rate given in percent, as reported)."""
        return sizing.position_size_kelly(
            capital, win_rate_pct / 100.0, avg_win, avg_loss, self.config.max_kelly_fraction
        )

    def atr_size(self, capital: float, atr: float, price: float) -> sizing.AtrSize:
        return sizing.position_size_atr(capital, self.config.default_risk_pct, atr, price, self.config.atr_multiplier)

    def validate_new_position(
        self,
        symbol: str,
        quantity: float,
        entry_price: float,
        stop_loss: Optional[float],
        open_positions: Iterable[Position],
        capital: float,
    ) -> RiskResult:
        """
        Reject (no exception) if the proposed position would push total
        portfolio risk above max_portfolio_risk.
        """
        if quantity <= 0:
            return RiskResult(allowed=False, reason="non-positive quantity")
        risk_amount = 0.0 if stop_loss is None else max(0.0, (entry_price - stop_loss) * quantity)
        proposed = sizing.PositionRisk(symbol, quantity * entry_price, risk_amount)
        current: List[sizing.PositionRisk] = [_as_position_risk(p) for p in open_positions]
        if not sizing.check_risk_limits(proposed, current, capital, self.config.max_portfolio_risk):
            return RiskResult(allowed=False, reason="portfolio risk cap")
        return RiskResult(allowed=True, quantity=quantity)

    def risk_report(self, positions: Iterable[Position], capital: float) -> str:
        risk = sizing.portfolio_risk([_as_position_risk(p) for p in positions], capital)
        cap_pct = self.config.max_portfolio_risk * 100.0
        utilization = risk.portfolio_risk_pct / cap_pct * 100.0 if cap_pct > 0 else float("nan")
        status = "WARNING: portfolio risk exceeds maximum" if risk.portfolio_risk_pct > cap_pct else "Portfolio risk within limits"
        lines = [
            "--- Risk Report ---",
            f"Capital:          ${capital:,.2f}",
            f"Positions:        {risk.num_positions}",
            f"Total exposure:   ${risk.total_exposure:,.2f}",
            f"Total risk:       ${risk.total_risk:,.2f}",
            f"Portfolio risk:   {risk.portfolio_risk_pct:.2f}% (max {cap_pct:.2f}%)",
            f"Risk utilization: {utilization:.1f}%",
            f"Leverage:         {risk.leverage:.2f}x",
            status,
        ]
        return "\n".join(lines)
