"""Unit tests for analytics.metrics."""

import math

import pandas as pd
import pytest
from strategy_lab.analytics.metrics import (
    build_equity_curve,
    compute_performance,
    equity_returns,
    sharpe_ratio,
    max_drawdown,
    max_drawdown_value,
    pair_round_trips,
    win_rate,
    profit_factor,
    expectancy,
)
from strategy_lab.core.types import Signal, Trade


def _trade(ts, action, price, qty, symbol="BTC", value=0.0):
    flow = -price * qty if action == Signal.BUY else price * qty
    return Trade(ts, action, price, qty, flow, value, symbol=symbol)


def test_sharpe_ratio_empty():
    assert sharpe_ratio([]) == 0.0
    assert sharpe_ratio([0.05]) == 0.0


def test_sharpe_ratio_constant():
    assert sharpe_ratio([0.01] * 10) == 0.0  # zero std


def test_sharpe_ratio_sample_std():
    # mean 0.02, sample std 0.01
    assert sharpe_ratio([0.01, 0.02, 0.03], periods_per_year=252) == pytest.approx(2 * math.sqrt(252))


def test_equity_returns():
    r = equity_returns([100.0, 110.0, 99.0])
    assert list(r) == pytest.approx([0.1, -0.1])
    assert len(equity_returns([100.0])) == 0


def test_win_rate():
    assert win_rate([1, -1, 1, 1]) == 75.0
    assert win_rate([]) == 0.0


def test_profit_factor():
    assert profit_factor([10, -5, 10, -5]) == 2.0
    assert math.isnan(profit_factor([10, 10]))
    assert profit_factor([-5, -5]) == 0.0
    assert profit_factor([]) == 0.0


def test_expectancy():
    assert expectancy([10, -5, 5]) == pytest.approx(10 / 3)
    assert expectancy([]) == 0.0


def test_max_drawdown():
    # equity 1 -> 1.2 -> 1.0 -> 1.1  =>  peak 1.2, dd (1.0-1.2)/1.2 = -16.67%
    cum = [1.0, 1.2, 1.0, 1.1]
    assert max_drawdown(cum) == pytest.approx(-16.666, rel=0.01)
    assert max_drawdown_value(cum) == pytest.approx(-0.2)
    assert max_drawdown([]) == 0.0
    assert max_drawdown([1.0, 2.0, 3.0]) == 0.0


def test_pair_round_trips_fifo_per_symbol():
    trades = [
        _trade(0, Signal.BUY, 100, 1, "BTC"),
        _trade(1, Signal.BUY, 10, 2, "ETH"),
        _trade(2, Signal.SELL, 12, 2, "ETH"),
        _trade(3, Signal.SELL, 90, 1, "BTC"),
        _trade(4, Signal.BUY, 95, 1, "BTC"),
    ]
    trips = pair_round_trips(trades)
    assert [(t.symbol, t.buy_price, t.sell_price) for t in trips] == [("ETH", 10, 12), ("BTC", 100, 90)]
    assert trips[0].profit == pytest.approx(4.0)
    assert trips[1].profit == pytest.approx(-10.0)


def test_pair_round_trips_ignores_sell_without_buy():
    assert pair_round_trips([_trade(0, Signal.SELL, 100, 1)]) == []


def test_build_equity_curve_steps():
    ts = pd.date_range("2024-01-01", periods=5, freq="D")
    trades = [
        _trade(ts[1], Signal.BUY, 100, 1, value=990.0),
        _trade(ts[3], Signal.SELL, 110, 1, value=1010.0),
    ]
    curve = build_equity_curve(trades, ts, 1000.0)
    assert list(curve.columns) == ["timestamp", "portfolio_value"]
    assert list(curve["portfolio_value"]) == [1000.0, 990.0, 990.0, 1010.0, 1010.0]


def test_compute_performance():
    trades = [
        _trade(0, Signal.BUY, 100, 1),
        _trade(1, Signal.SELL, 110, 1),
        _trade(2, Signal.BUY, 100, 1),
        _trade(3, Signal.SELL, 95, 1),
        _trade(4, Signal.BUY, 100, 1),
    ]
    m = compute_performance(trades, [1000.0, 1010.0, 1005.0], 1000.0, 1005.0)
    assert m.num_trades == 5
    assert m.num_completed_trades == 2
    assert m.win_rate == 50.0
    assert m.profit_factor == pytest.approx(2.0)
    assert m.avg_win == pytest.approx(10.0)
    assert m.avg_loss == pytest.approx(-5.0)
    assert m.avg_trade == pytest.approx(2.5)
    assert m.total_return == pytest.approx(5.0)
    assert m.total_return_pct == pytest.approx(0.5)
    assert m.max_drawdown <= 0
