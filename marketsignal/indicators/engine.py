"""Compute every indicator for a candle sequence, degrading to neutral defaults.

Each indicator runs in its own guard, so one failure (short history, a
detector raising) never costs the others. Failures are logged and replaced
by the documented default for that indicator.
"""

from __future__ import annotations

import logging
from typing import Sequence

from marketsignal.indicators.adx import compute_adx
from marketsignal.indicators.bollinger import compute_bollinger_bands, default_bands
from marketsignal.indicators.macd import compute_macd
from marketsignal.indicators.patterns import detect_patterns
from marketsignal.indicators.rsi import compute_rsi
from marketsignal.indicators.stochastic import compute_stochastic
from marketsignal.indicators.trend import analyze_trend
from marketsignal.outcome import attempt
from marketsignal.types import Candle, IndicatorBundle, MacdValues, Oscillators, StochasticValues, TrendAnalysis

logger = logging.getLogger(__name__)

# Below this many candles no oscillator is attempted.
MIN_OSCILLATOR_CANDLES = 14

DEFAULT_RSI = 50.0
DEFAULT_ADX = 25.0


def default_oscillators(candles: Sequence[Candle]) -> Oscillators:
    return Oscillators(
        rsi=DEFAULT_RSI,
        macd=MacdValues(),
        bollinger=default_bands(candles),
        stochastic=StochasticValues(),
        adx=DEFAULT_ADX,
    )


def compute_oscillators(candles: Sequence[Candle]) -> Oscillators:
    if len(candles) < MIN_OSCILLATOR_CANDLES:
        logger.warning(f"Only {len(candles)} candles; using default oscillator values")
        return default_oscillators(candles)

    return Oscillators(
        rsi=attempt("RSI", compute_rsi, candles).value_or(DEFAULT_RSI),
        macd=attempt("MACD", compute_macd, candles).value_or(MacdValues()),
        bollinger=attempt("Bollinger Bands", compute_bollinger_bands, candles).value_or(default_bands(candles)),
        stochastic=attempt("Stochastic", compute_stochastic, candles).value_or(StochasticValues()),
        adx=attempt("ADX", compute_adx, candles).value_or(DEFAULT_ADX),
    )


def compute_indicators(candles: Sequence[Candle]) -> IndicatorBundle:
    """Build the full IndicatorBundle. Never raises for data-related reasons."""
    return IndicatorBundle(
        trend=attempt("Trend", analyze_trend, candles).value_or(TrendAnalysis()),
        oscillators=compute_oscillators(candles),
        patterns=attempt("Candlestick patterns", detect_patterns, candles).value_or({}),
    )
