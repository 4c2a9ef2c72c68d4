"""
Pure risk calculators: position size (fixed, Kelly, ATR), stop-loss and
take-profit levels, risk-reward, trailing stops and portfolio risk caps.

Degenerate inputs (zero capital, zero average loss, zero stop distance)
never divide by zero: each calculator falls back to a safe default and
logs a warning.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from strategy_lab.core.errors import DegenerateRiskInputError
from strategy_lab.core.types import Direction

logger = logging.getLogger("strategy_lab.risk")

FALLBACK_RISK_PCT = 0.02


def _require_positive(value: Optional[float], label: str) -> float:
    if value is None or (isinstance(value, float) and math.isnan(value)) or value <= 0:
        raise DegenerateRiskInputError(f"{label} must be positive, got {value}")
    return value


# ---------------------------------------------------------------------------
# Position sizing
# ---------------------------------------------------------------------------


def position_size_fixed(capital: float, risk_pct: float = FALLBACK_RISK_PCT) -> float:
    """Dollar size = capital * risk_pct."""
    size = capital * risk_pct
    logger.debug("Fixed position size: %.2f for capital %.2f", size, capital)
    return size


@dataclass(frozen=True)
class KellySize:
    position_size: float
    kelly_fraction: float
    win_loss_ratio: float
    fallback: bool = False


def position_size_kelly(
    capital: float,
    win_rate: Optional[float],
    avg_win: float,
    avg_loss: float,
    max_kelly_fraction: float = 0.5,
) -> KellySize:
    """
    Kelly: f = (p*b - q) / b with p = win_rate (0-1), q = 1 - p, b = avg_win / |avg_loss|.
    f is clamped to [0, max_kelly_fraction]. Zero average loss or an undefined/zero
    win rate falls back to 2% fixed sizing.
    """
    try:
        _require_positive(abs(avg_loss), "avg_loss")
        p = _require_positive(win_rate, "win_rate")
    except DegenerateRiskInputError as e:
        logger.warning("Invalid parameters for Kelly sizing (%s), using %.0f%% fixed", e, FALLBACK_RISK_PCT * 100)
        return KellySize(
            position_size=position_size_fixed(capital, FALLBACK_RISK_PCT),
            kelly_fraction=FALLBACK_RISK_PCT,
            win_loss_ratio=float("nan"),
            fallback=True,
        )
    b = avg_win / abs(avg_loss)
    q = 1.0 - p
    raw = (p * b - q) / b if b > 0 else 0.0
    fraction = min(max(raw, 0.0), max_kelly_fraction)
    logger.debug("Kelly fraction %.4f (raw %.4f), ratio %.3f", fraction, raw, b)
    return KellySize(position_size=capital * fraction, kelly_fraction=fraction, win_loss_ratio=b)


@dataclass(frozen=True)
class AtrSize:
    units: float
    position_value: float
    stop_distance: float
    fallback: bool = False


def position_size_atr(
    capital: float,
    risk_pct: float,
    atr: float,
    price: float,
    atr_multiplier: float = 2.0,
) -> AtrSize:
    """units = (capital * risk_pct) / (atr * multiplier): losing the stop distance costs risk_pct of capital."""
    stop_distance = atr * atr_multiplier
    try:
        _require_positive(stop_distance, "stop distance")
    except DegenerateRiskInputError as e:
        logger.warning("ATR sizing degenerate (%s), using %.0f%% fixed", e, FALLBACK_RISK_PCT * 100)
        value = position_size_fixed(capital, FALLBACK_RISK_PCT)
        units = value / price if price > 0 else 0.0
        return AtrSize(units=units, position_value=value, stop_distance=0.0, fallback=True)
    units = capital * risk_pct / stop_distance
    return AtrSize(units=units, position_value=units * price, stop_distance=stop_distance)


# ---------------------------------------------------------------------------
# Protective levels
# ---------------------------------------------------------------------------


def stop_loss_price(entry_price: float, stop_pct: float = 0.02, direction: Direction = Direction.LONG) -> float:
    if direction == Direction.LONG:
        return entry_price * (1 - stop_pct)
    return entry_price * (1 + stop_pct)


def take_profit_price(entry_price: float, profit_pct: float = 0.05, direction: Direction = Direction.LONG) -> float:
    if direction == Direction.LONG:
        return entry_price * (1 + profit_pct)
    return entry_price * (1 - profit_pct)


def risk_reward_ratio(entry_price: float, stop_loss: float, take_profit: float) -> float:
    """Reward / risk. NaN when the stop sits on the entry."""
    try:
        risk = _require_positive(abs(entry_price - stop_loss), "risk distance")
    except DegenerateRiskInputError:
        logger.warning("Risk is zero, cannot compute risk-reward ratio")
        return float("nan")
    return abs(take_profit - entry_price) / risk


def stop_loss_hit(current_price: float, stop_loss: float, direction: Direction = Direction.LONG) -> bool:
    if direction == Direction.LONG:
        return current_price <= stop_loss
    return current_price >= stop_loss


def take_profit_hit(current_price: float, take_profit: float, direction: Direction = Direction.LONG) -> bool:
    if direction == Direction.LONG:
        return current_price >= take_profit
    return current_price <= take_profit


def trailing_stop(
    current_price: float,
    current_stop: float,
    trail_pct: float = 0.02,
    direction: Direction = Direction.LONG,
) -> float:
    """Ratchet: the stop only ever moves up for LONG and down for SHORT."""
    if direction == Direction.LONG:
        new_stop = max(current_price * (1 - trail_pct), current_stop)
    else:
        new_stop = min(current_price * (1 + trail_pct), current_stop)
    if new_stop != current_stop:
        logger.debug("Trailing stop moved: %.6f -> %.6f", current_stop, new_stop)
    return new_stop


# ---------------------------------------------------------------------------
# Portfolio risk
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PositionRisk:
    """Exposure and at-risk amount of one (open or proposed) position."""
    symbol: str
    position_value: float
    risk_amount: float


@dataclass(frozen=True)
class PortfolioRisk:
    total_exposure: float
    total_risk: float
    portfolio_risk_pct: float
    num_positions: int
    leverage: float


def portfolio_risk(positions: Iterable[PositionRisk], total_capital: float) -> PortfolioRisk:
    """total_risk_pct = sum(risk_amount) / total_capital * 100. NaN pct/leverage on zero capital."""
    positions = list(positions)
    exposure = sum(p.position_value for p in positions)
    risk = sum(p.risk_amount for p in positions)
    try:
        capital = _require_positive(total_capital, "total capital")
    except DegenerateRiskInputError as e:
        logger.warning("Portfolio risk undefined: %s", e)
        return PortfolioRisk(exposure, risk, float("nan"), len(positions), float("nan"))
    return PortfolioRisk(
        total_exposure=exposure,
        total_risk=risk,
        portfolio_risk_pct=risk / capital * 100.0,
        num_positions=len(positions),
        leverage=exposure / capital,
    )


def max_position_size(
    capital: float,
    max_portfolio_risk: float = 0.10,
    current_positions: Sequence[PositionRisk] = (),
) -> float:
    """Dollar risk capacity left under the cap (0 when the cap is already used up)."""
    current = portfolio_risk(current_positions, capital)
    if math.isnan(current.portfolio_risk_pct):
        return 0.0
    remaining = max(0.0, max_portfolio_risk - current.portfolio_risk_pct / 100.0)
    return capital * remaining


def check_risk_limits(
    proposed: PositionRisk,
    current_positions: Sequence[PositionRisk],
    capital: float,
    max_risk: float = 0.10,
) -> bool:
    """True if adding `proposed` keeps total risk at or under max_risk (a fraction)."""
    new_risk = portfolio_risk([*current_positions, proposed], capital)
    within = not math.isnan(new_risk.portfolio_risk_pct) and new_risk.portfolio_risk_pct <= max_risk * 100.0
    if not within:
        logger.warning("Risk limit exceeded: %.2f%% > %.2f%%", new_risk.portfolio_risk_pct, max_risk * 100.0)
    return within
