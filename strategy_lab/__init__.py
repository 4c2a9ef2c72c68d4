"""Strategy Lab: backtest, paper-trade and optimize trading strategies on historical prices."""

__version__ = "0.1.0"
