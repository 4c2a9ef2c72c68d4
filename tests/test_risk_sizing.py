"""Unit tests for risk.sizing."""

import math

import pytest
from strategy_lab.core.types import Direction
from strategy_lab.risk.sizing import (
    PositionRisk,
    check_risk_limits,
    max_position_size,
    portfolio_risk,
    position_size_atr,
    position_size_fixed,
    position_size_kelly,
    risk_reward_ratio,
    stop_loss_hit,
    stop_loss_price,
    take_profit_hit,
    take_profit_price,
    trailing_stop,
)


def test_fixed_size():
    assert position_size_fixed(10000.0, 0.02) == pytest.approx(200.0)


def test_kelly_example():
    k = position_size_kelly(10000.0, 0.55, 500.0, 300.0, max_kelly_fraction=0.5)
    assert k.win_loss_ratio == pytest.approx(5 / 3)
    assert k.kelly_fraction == pytest.approx(0.28)
    assert k.position_size == pytest.approx(2800.0)
    assert k.fallback is False


def test_kelly_uses_absolute_loss():
    assert position_size_kelly(10000.0, 0.55, 500.0, -300.0).position_size == pytest.approx(2800.0)


def test_kelly_clamped():
    # b = 10, raw f = (0.9 * 10 - 0.1) / 10 = 0.89
    assert position_size_kelly(10000.0, 0.9, 1000.0, 100.0, 0.5).kelly_fraction == 0.5
    # negative edge -> no position
    assert position_size_kelly(10000.0, 0.2, 100.0, 100.0).position_size == 0.0


def test_kelly_degenerate_inputs_fall_back():
    for win_rate, avg_loss in ((0.55, 0.0), (None, 300.0), (0.0, 300.0)):
        k = position_size_kelly(10000.0, win_rate, 500.0, avg_loss)
        assert k.fallback is True
        assert k.position_size == pytest.approx(200.0)
        assert k.kelly_fraction == 0.02
        assert math.isnan(k.win_loss_ratio)


def test_atr_size():
    s = position_size_atr(10000.0, 0.02, atr=50.0, price=1000.0, atr_multiplier=2.0)
    assert s.stop_distance == 100.0
    assert s.units == pytest.approx(2.0)
    assert s.position_value == pytest.approx(2000.0)


def test_atr_size_zero_atr_falls_back():
    s = position_size_atr(10000.0, 0.02, atr=0.0, price=1000.0)
    assert s.fallback is True
    assert s.units == pytest.approx(0.2)


def test_stop_and_target_levels():
    assert stop_loss_price(90000.0, 0.02) == pytest.approx(88200.0)
    assert stop_loss_price(90000.0, 0.02, Direction.SHORT) == pytest.approx(91800.0)
    assert take_profit_price(100.0, 0.05) == pytest.approx(105.0)
    assert take_profit_price(100.0, 0.05, Direction.SHORT) == pytest.approx(95.0)


def test_risk_reward_ratio():
    assert risk_reward_ratio(100.0, 98.0, 105.0) == pytest.approx(2.5)
    assert math.isnan(risk_reward_ratio(100.0, 100.0, 105.0))


def test_hit_checks():
    assert stop_loss_hit(97.0, 98.0)
    assert stop_loss_hit(98.0, 98.0)
    assert not stop_loss_hit(99.0, 98.0)
    assert stop_loss_hit(103.0, 102.0, Direction.SHORT)
    assert take_profit_hit(105.0, 105.0)
    assert not take_profit_hit(104.0, 105.0)
    assert take_profit_hit(94.0, 95.0, Direction.SHORT)


def test_trailing_stop_ratchets():
    stop = stop_loss_price(90000.0, 0.02)
    stop = trailing_stop(95000.0, stop, 0.02)
    assert stop == pytest.approx(93100.0)
    # price dips: stop stays put
    stop = trailing_stop(91000.0, stop, 0.02)
    assert stop == pytest.approx(93100.0)


def test_trailing_stop_short_only_moves_down():
    assert trailing_stop(90.0, 105.0, 0.02, Direction.SHORT) == pytest.approx(91.8)
    assert trailing_stop(100.0, 91.8, 0.02, Direction.SHORT) == pytest.approx(91.8)


def test_portfolio_risk():
    positions = [PositionRisk("BTC", 5000.0, 100.0), PositionRisk("ETH", 3000.0, 200.0)]
    r = portfolio_risk(positions, 10000.0)
    assert r.total_exposure == 8000.0
    assert r.total_risk == 300.0
    assert r.portfolio_risk_pct == pytest.approx(3.0)
    assert r.num_positions == 2
    assert r.leverage == pytest.approx(0.8)


def test_portfolio_risk_zero_capital():
    r = portfolio_risk([PositionRisk("BTC", 100.0, 10.0)], 0.0)
    assert math.isnan(r.portfolio_risk_pct)
    assert math.isnan(r.leverage)


def test_check_risk_limits():
    current = [PositionRisk("BTC", 5000.0, 600.0)]
    assert not check_risk_limits(PositionRisk("ETH", 1000.0, 500.0), current, 10000.0, 0.10)
    assert check_risk_limits(PositionRisk("ETH", 1000.0, 300.0), current, 10000.0, 0.10)
    assert not check_risk_limits(PositionRisk("ETH", 1000.0, 1.0), [], 0.0, 0.10)


def test_max_position_size():
    assert max_position_size(10000.0, 0.10, [PositionRisk("BTC", 5000.0, 400.0)]) == pytest.approx(600.0)
    assert max_position_size(10000.0, 0.10, [PositionRisk("BTC", 5000.0, 2000.0)]) == 0.0
    assert max_position_size(0.0) == 0.0
