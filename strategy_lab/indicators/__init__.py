"""Indicators: moving averages, RSI, MACD, Bollinger Bands, ATR."""

from strategy_lab.indicators.technical import (
    sma,
    ema,
    moving_average,
    rsi,
    macd,
    bollinger_bands,
    atr,
    add_moving_averages,
    add_rsi,
    add_macd,
    add_bollinger_bands,
    add_all_indicators,
)

__all__ = [
    "sma",
    "ema",
    "moving_average",
    "rsi",
    "macd",
    "bollinger_bands",
    "atr",
    "add_moving_averages",
    "add_rsi",
    "add_macd",
    "add_bollinger_bands",
    "add_all_indicators",
]
