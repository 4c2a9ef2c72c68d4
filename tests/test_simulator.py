"""Unit tests for backtesting.simulator and backtesting.costs."""

import numpy as np
import pytest
from strategy_lab.backtesting.costs import apply_transaction_costs
from strategy_lab.backtesting.simulator import simulate_trades
from strategy_lab.core.errors import InvalidDataError
from strategy_lab.core.types import Signal


def _signaled(make_bars, closes, signals):
    df = make_bars(closes)
    df["signal"] = signals
    return df


def test_buy_then_sell_example(make_bars):
    df = _signaled(make_bars, [100, 110, 90, 120], ["BUY", "HOLD", "SELL", "HOLD"])
    sim = simulate_trades(df, initial_capital=1000.0)
    buy, sell = sim.trades
    assert buy.action == Signal.BUY
    assert buy.quantity == pytest.approx(9.5)
    assert buy.cash_flow == pytest.approx(-950.0)
    assert buy.portfolio_value_after == pytest.approx(1000.0)
    assert sell.action == Signal.SELL
    assert sell.cash_flow == pytest.approx(855.0)
    assert sell.portfolio_value_after == pytest.approx(905.0)
    assert sim.final_cash == pytest.approx(905.0)
    assert sim.final_position == 0.0
    assert sim.final_value == pytest.approx(905.0)


def test_all_hold_gives_empty_ledger(make_bars):
    df = _signaled(make_bars, [100, 101, 102], ["HOLD"] * 3)
    sim = simulate_trades(df, initial_capital=1000.0)
    assert sim.trades == ()
    assert sim.final_value == 1000.0


def test_invalid_transitions_are_no_ops(make_bars):
    df = _signaled(
        make_bars, [100, 100, 100, 100, 100, 100],
        ["SELL", "BUY", "BUY", "SELL", "SELL", "BUY"],
    )
    sim = simulate_trades(df, initial_capital=1000.0)
    actions = [t.action for t in sim.trades]
    assert actions == [Signal.BUY, Signal.SELL, Signal.BUY]


def test_open_position_is_not_auto_closed(make_bars):
    df = _signaled(make_bars, [100, 120], ["BUY", "HOLD"])
    sim = simulate_trades(df, initial_capital=1000.0)
    assert len(sim.trades) == 1
    assert sim.final_position == pytest.approx(9.5)
    # 50 cash + 9.5 units marked at 120
    assert sim.final_value == pytest.approx(50.0 + 9.5 * 120)


def test_cash_never_negative(wave_bars):
    df = wave_bars.copy()
    df["signal"] = np.where(np.arange(len(df)) % 3 == 0, "BUY", np.where(np.arange(len(df)) % 3 == 1, "SELL", "HOLD"))
    sim = simulate_trades(df, initial_capital=1000.0, position_size_fraction=1.0)
    assert sim.final_cash >= 0
    assert len(sim.trades) % 2 == 0 or sim.final_position > 0


def test_requires_signal_column(make_bars):
    with pytest.raises(InvalidDataError):
        simulate_trades(make_bars([1, 2, 3]))


def test_transaction_costs_example(make_bars):
    df = _signaled(make_bars, [100, 110, 90, 120], ["BUY", "HOLD", "SELL", "HOLD"])
    sim = simulate_trades(df, initial_capital=1000.0)
    trades, final_value, costs = apply_transaction_costs(sim.trades, sim.final_value, 0.001, 0.0005)
    assert costs.total_commission == pytest.approx(1.805)
    assert costs.total_slippage == pytest.approx(0.9025)
    assert costs.total_costs == pytest.approx(2.7075)
    assert final_value == pytest.approx(905.0 - 2.7075)
    # cumulative: each entry carries every cost paid so far
    assert trades[0].portfolio_value_after == pytest.approx(1000.0 - 1.425)
    assert trades[1].portfolio_value_after == pytest.approx(905.0 - 2.7075)
    # prices and quantities stay as filled; input ledger untouched
    assert trades[1].price == sim.trades[1].price
    assert sim.trades[1].portfolio_value_after == pytest.approx(905.0)


def test_transaction_costs_empty_ledger():
    trades, final_value, costs = apply_transaction_costs((), 1000.0)
    assert trades == ()
    assert final_value == 1000.0
    assert costs.total_costs == 0.0
