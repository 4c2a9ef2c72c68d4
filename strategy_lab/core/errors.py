"""Error taxonomy. All of these are local and recoverable."""


class StrategyLabError(Exception):
    """Base class for errors raised by the backtesting core."""


class InvalidDataError(StrategyLabError, ValueError):
    """Price series is missing required columns."""


class ParameterValidationError(StrategyLabError, ValueError):
    """Strategy parameters are malformed (e.g. fast >= slow)."""


class InsufficientFundsError(StrategyLabError):
    """Cash does not cover the cost of an order."""

    def __init__(self, needed: float, available: float):
        super().__init__(f"need {needed:.2f}, have {available:.2f}")
        self.needed = needed
        self.available = available


class DegenerateRiskInputError(StrategyLabError):
    """Zero capital, zero average loss or zero risk distance in a sizing calculation."""
