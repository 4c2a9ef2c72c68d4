"""
Commission and slippage as a percentage of each trade's notional cash flow,
charged on entry and exit alike.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Sequence, Tuple

from strategy_lab.core.types import Trade

logger = logging.getLogger("strategy_lab.backtest.costs")


@dataclass(frozen=True)
class TransactionCosts:
    total_commission: float = 0.0
    total_slippage: float = 0.0

    @property
    def total_costs(self) -> float:
        return self.total_commission + self.total_slippage

    def to_dict(self) -> dict:
        return {
            "total_commission": self.total_commission,
            "total_slippage": self.total_slippage,
            "total_costs": self.total_costs,
        }


def apply_transaction_costs(
    trades: Sequence[Trade],
    final_value: float,
    commission_rate: float = 0.001,
    slippage_rate: float = 0.0005,
) -> Tuple[Tuple[Trade, ...], float, TransactionCosts]:
    """
    Returns (cost-adjusted ledger, cost-adjusted final value, costs).
    Each trade's portfolio_value_after is reduced by all costs paid up to and
    including that trade; price, quantity and cash_flow are left as filled.
    This differs on purpose from subtracting only the trade's own cost: with
    cumulative costs the equity curve (and so drawdown and Sharpe) ends on the
    cost-adjusted final value instead of drifting above it.
    The input ledger is not modified.
    """
    commission = 0.0
    slippage = 0.0
    adjusted = []
    for t in trades:
        commission += t.notional * commission_rate
        slippage += t.notional * slippage_rate
        adjusted.append(replace(t, portfolio_value_after=t.portfolio_value_after - commission - slippage))
    costs = TransactionCosts(total_commission=commission, total_slippage=slippage)
    if trades:
        logger.info("Transaction costs applied: $%.2f over %d trades", costs.total_costs, len(trades))
    return tuple(adjusted), final_value - costs.total_costs, costs
