"""Shared fixtures: synthetic price series and a strategy that replays fixed signals."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import pandas as pd
import pytest

from strategy_lab.strategies.base import BaseStrategy


@dataclass(frozen=True)
class ScriptedStrategy(BaseStrategy):
    """Emits the given BUY/SELL/HOLD sequence, one entry per bar."""
    script: Tuple[str, ...] = ()

    name = "Scripted"

    def compute_indicators(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.copy()

    def compute_signals(self, df: pd.DataFrame):
        s = pd.Series(list(self.script), index=df.index)
        return s == "BUY", s == "SELL"


def _make_bars(closes, start="2024-01-01"):
    closes = [float(c) for c in closes]
    return pd.DataFrame({
        "timestamp": pd.date_range(start, periods=len(closes), freq="D"),
        "open": closes,
        "high": [c * 1.01 for c in closes],
        "low": [c * 0.99 for c in closes],
        "close": closes,
        "volume": [1000.0] * len(closes),
    })


@pytest.fixture
def make_bars():
    return _make_bars


@pytest.fixture
def scripted():
    def build(*script):
        return ScriptedStrategy(script=tuple(script))
    return build


@pytest.fixture
def wave_bars():
    """150 daily bars of a drifting sine wave: plenty of MA crossovers and RSI extremes."""
    i = np.arange(150)
    return _make_bars(100 + 15 * np.sin(i / 6.0) + 0.05 * i)
