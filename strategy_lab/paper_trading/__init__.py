"""Paper trading: simulated portfolio with stop-loss / take-profit management."""

from strategy_lab.paper_trading.portfolio import Portfolio, PerformanceCounters
from strategy_lab.paper_trading.session import PaperTradingSession, PaperTradingResult, format_paper_report

__all__ = [
    "Portfolio",
    "PerformanceCounters",
    "PaperTradingSession",
    "PaperTradingResult",
    "format_paper_report",
]
