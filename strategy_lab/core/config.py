"""
Load configuration from config.yaml and .env. Env vars override the file.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


@dataclass(frozen=True)
class BacktestConfig:
    """Simulation and cost settings shared by backtests, paper sessions and the optimizer."""
    initial_capital: float = 10000.0
    commission_rate: float = 0.001
    slippage_rate: float = 0.0005
    position_size_fraction: float = 0.95
    periods_per_year: float = 252.0


@dataclass(frozen=True)
class RiskConfig:
    stop_loss_pct: float = 0.02
    take_profit_pct: float = 0.05
    trailing_stop_pct: float = 0.0  # 0 = off
    max_portfolio_risk: float = 0.10
    max_kelly_fraction: float = 0.5
    default_risk_pct: float = 0.02
    atr_multiplier: float = 2.0


@dataclass(frozen=True)
class StrategyConfig:
    name: str = "ma_crossover"
    symbol: str = "BTC"
    fast_period: int = 10
    slow_period: int = 20
    ma_type: str = "SMA"
    rsi_period: int = 14
    oversold: float = 30.0
    overbought: float = 70.0

    def parameters(self) -> dict[str, Any]:
        """Constructor kwargs for the configured strategy key."""
        if self.name == "rsi_mean_reversion":
            return {"period": self.rsi_period, "oversold": self.oversold, "overbought": self.overbought}
        return {"fast_period": self.fast_period, "slow_period": self.slow_period, "ma_type": self.ma_type}


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    log_dir: Path = Path("logs")
    log_file: str = "strategy_lab.log"


@dataclass(frozen=True)
class Config:
    """Unified configuration. Immutable after load; passed explicitly to components."""
    backtest: BacktestConfig = field(default_factory=BacktestConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    results_dir: Path = Path("results")


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> Config:
    """Load config.yaml and overlay with env. Returns Config dataclass."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, str(default)).strip()

    def env_int(key: str, default: int = 0) -> int:
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def env_float(key: str, default: float = 0.0) -> float:
        try:
            return float(os.getenv(key, str(default)))
        except ValueError:
            return default

    backtest = data.get("backtest", {}) or {}
    risk = data.get("risk", {}) or {}
    strategy = data.get("strategy", {}) or {}
    logging_section = data.get("logging", {}) or {}
    defaults_bt, defaults_risk, defaults_st = BacktestConfig(), RiskConfig(), StrategyConfig()

    return Config(
        backtest=BacktestConfig(
            initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", defaults_bt.initial_capital)),
            commission_rate=env_float("COMMISSION_RATE", backtest.get("commission_rate", defaults_bt.commission_rate)),
            slippage_rate=env_float("SLIPPAGE_RATE", backtest.get("slippage_rate", defaults_bt.slippage_rate)),
            position_size_fraction=env_float(
                "POSITION_SIZE_FRACTION", backtest.get("position_size_fraction", defaults_bt.position_size_fraction)
            ),
            periods_per_year=env_float("PERIODS_PER_YEAR", backtest.get("periods_per_year", defaults_bt.periods_per_year)),
        ),
        risk=RiskConfig(
            stop_loss_pct=env_float("STOP_LOSS_PCT", risk.get("stop_loss_pct", defaults_risk.stop_loss_pct)),
            take_profit_pct=env_float("TAKE_PROFIT_PCT", risk.get("take_profit_pct", defaults_risk.take_profit_pct)),
            trailing_stop_pct=env_float("TRAILING_STOP_PCT", risk.get("trailing_stop_pct", defaults_risk.trailing_stop_pct)),
            max_portfolio_risk=env_float("MAX_PORTFOLIO_RISK", risk.get("max_portfolio_risk", defaults_risk.max_portfolio_risk)),
            max_kelly_fraction=env_float("MAX_KELLY_FRACTION", risk.get("max_kelly_fraction", defaults_risk.max_kelly_fraction)),
            default_risk_pct=env_float("DEFAULT_RISK_PCT", risk.get("default_risk_pct", defaults_risk.default_risk_pct)),
            atr_multiplier=env_float("ATR_MULTIPLIER", risk.get("atr_multiplier", defaults_risk.atr_multiplier)),
        ),
        strategy=StrategyConfig(
            name=env("STRATEGY", strategy.get("name", defaults_st.name)),
            symbol=env("SYMBOL", strategy.get("symbol", defaults_st.symbol)).upper(),
            fast_period=env_int("FAST_PERIOD", strategy.get("fast_period", defaults_st.fast_period)),
            slow_period=env_int("SLOW_PERIOD", strategy.get("slow_period", defaults_st.slow_period)),
            ma_type=env("MA_TYPE", strategy.get("ma_type", defaults_st.ma_type)).upper(),
            rsi_period=env_int("RSI_PERIOD", strategy.get("rsi_period", defaults_st.rsi_period)),
            oversold=env_float("RSI_OVERSOLD", strategy.get("oversold", defaults_st.oversold)),
            overbought=env_float("RSI_OVERBOUGHT", strategy.get("overbought", defaults_st.overbought)),
        ),
        logging=LoggingConfig(
            level=env("LOG_LEVEL", logging_section.get("level", "INFO")),
            log_dir=Path(logging_section.get("log_dir", "logs")),
            log_file=logging_section.get("log_file", "strategy_lab.log"),
        ),
        results_dir=Path(data.get("results_dir", "results")),
    )
