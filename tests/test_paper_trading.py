"""Unit tests for paper_trading (portfolio and session)."""

import pytest
from strategy_lab.core.config import BacktestConfig, RiskConfig
from strategy_lab.core.types import ExitReason, Signal
from strategy_lab.paper_trading import PaperTradingSession, Portfolio, format_paper_report
from strategy_lab.risk.manager import RiskManager

CAPITAL = BacktestConfig(initial_capital=1000.0)


def _session(strategy, **risk):
    return PaperTradingSession(strategy, CAPITAL, RiskManager(RiskConfig(**risk)))


def test_portfolio_open_and_mark():
    p = Portfolio(1000.0)
    pos = p.open_position("BTC", 5.0, 100.0, 0, stop_loss=98.0)
    assert pos is not None
    assert p.cash == pytest.approx(500.0)
    p.mark("BTC", 110.0)
    assert p.total_value() == pytest.approx(1050.0)
    assert p.trade_history[0].action == Signal.BUY


def test_portfolio_rejects_unaffordable_and_duplicate():
    p = Portfolio(1000.0)
    assert p.open_position("BTC", 20.0, 100.0, 0) is None
    assert p.cash == 1000.0
    assert p.trade_history == ()
    assert p.open_position("BTC", 1.0, 100.0, 0) is not None
    assert p.open_position("BTC", 1.0, 100.0, 1) is None
    assert len(p.trade_history) == 1


def test_portfolio_close():
    p = Portfolio(1000.0)
    assert p.close_position("BTC", 100.0, 0) is None
    p.open_position("BTC", 5.0, 100.0, 0)
    trade = p.close_position("BTC", 90.0, 1, ExitReason.STOP_LOSS)
    assert trade.reason == "stop_loss"
    assert p.cash == pytest.approx(950.0)
    assert p.positions == {}
    assert p.performance.losing_trades == 1
    assert p.performance.total_loss == pytest.approx(50.0)
    assert p.performance.total_trades == 2


def test_stop_loss_exit(make_bars, scripted):
    result = _session(scripted("BUY", "HOLD", "HOLD")).run(make_bars([100, 97, 99]))
    assert result.exit_reasons == {"stop_loss": 1}
    assert result.final_value == pytest.approx(50.0 + 9.5 * 97)
    assert result.win_rate == 0.0
    assert result.portfolio.performance.losing_trades == 1


def test_take_profit_exit(make_bars, scripted):
    result = _session(scripted("BUY", "HOLD")).run(make_bars([100, 106]))
    assert result.exit_reasons == {"take_profit": 1}
    assert result.final_value == pytest.approx(50.0 + 9.5 * 106)
    assert result.win_rate == 100.0


def test_signal_exit(make_bars, scripted):
    result = _session(scripted("BUY", "HOLD", "SELL")).run(make_bars([100, 101, 102]))
    assert result.exit_reasons == {"signal": 1}
    assert result.final_value == pytest.approx(50.0 + 9.5 * 102)


def test_open_position_force_closed_at_end(make_bars, scripted):
    result = _session(scripted("BUY", "HOLD")).run(make_bars([100, 101]))
    assert result.exit_reasons == {"end_of_session": 1}
    assert result.portfolio.positions == {}
    assert result.final_value == pytest.approx(50.0 + 9.5 * 101)
    assert len(result.equity_curve) == 2


def test_buy_while_long_is_ignored(make_bars, scripted):
    result = _session(scripted("BUY", "BUY", "HOLD")).run(make_bars([100, 101, 102]))
    actions = [t.action for t in result.portfolio.trade_history]
    assert actions == [Signal.BUY, Signal.SELL]


def test_reentry_on_stop_out_bar(make_bars, scripted):
    result = _session(scripted("BUY", "BUY")).run(make_bars([100, 97]))
    assert result.exit_reasons == {"stop_loss": 1, "end_of_session": 1}
    assert len(result.portfolio.trade_history) == 4


def test_entry_rejected_by_risk_cap(make_bars, scripted):
    # 50% stop on a 95% position is far over the 10% cap
    result = _session(scripted("BUY", "HOLD"), stop_loss_pct=0.5).run(make_bars([100, 101]))
    assert result.portfolio.trade_history == ()
    assert result.final_value == 1000.0


def test_trailing_stop_exit(make_bars, scripted):
    session = _session(scripted("BUY", "HOLD", "HOLD"), trailing_stop_pct=0.02, take_profit_pct=1.0)
    result = session.run(make_bars([100, 110, 107]))
    # stop ratchets to 107.8 on the 110 bar, then 107 hits it
    assert result.exit_reasons == {"stop_loss": 1}
    assert result.final_value == pytest.approx(50.0 + 9.5 * 107)


def test_cash_invariant(wave_bars):
    from strategy_lab.strategies import RSIMeanReversion

    result = PaperTradingSession(RSIMeanReversion(14, 35, 65), CAPITAL).run(wave_bars, symbol="BTC")
    p = result.portfolio
    assert p.cash >= 0
    assert p.total_value() == pytest.approx(p.cash + sum(pos.value for pos in p.positions.values()))
    assert len(result.equity_curve) == len(wave_bars)
    assert all(t.symbol == "BTC" for t in p.trade_history)


def test_format_paper_report(make_bars, scripted):
    result = _session(scripted("BUY", "HOLD")).run(make_bars([100, 106]))
    text = format_paper_report(result)
    assert "Paper Trading Results" in text
    assert "take_profit=1" in text
    assert "(closed: 1, wins: 1, losses: 0)" in text
