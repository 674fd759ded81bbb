"""
MACD (Moving Average Convergence Divergence) indicator module.

Usage:
    from marketsignal.indicators.macd import compute_macd

    values = compute_macd(candles)
    values.macd, values.signal, values.histogram
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import Candle, MacdValues


def ema_series(values: Sequence[float], period: int) -> list[float]:
    """
    Exponential moving average series, seeded with the SMA of the first `period` values.

    The returned list starts at index `period - 1` of the input, so it holds
    len(values) - period + 1 points.
    """
    if period < 1:
        raise IndicatorComputationError(f"period must be >= 1, got {period}")
    if len(values) < period:
        raise IndicatorComputationError(f"need at least {period} values for EMA({period}), got {len(values)}")

    multiplier = 2.0 / (period + 1)
    ema = sum(values[:period]) / period
    out = [ema]
    for value in values[period:]:
        ema = (value - ema) * multiplier + ema
        out.append(ema)
    return out


def compute_macd(
    candles: Sequence[Candle],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdValues:
    """
    Calculate MACD from candle closes.

    Formula:
        MACD Line = EMA(close, fast_period) - EMA(close, slow_period)
        Signal Line = EMA(MACD Line, signal_period)
        Histogram = MACD Line - Signal Line

    Args:
        candles: Sequence of OHLCV candles (at least slow_period + signal_period - 1)
        fast_period: Fast EMA period (default: 12)
        slow_period: Slow EMA period (default: 26)
        signal_period: Signal line EMA period (default: 9)

    Returns:
        MacdValues for the latest candle

    Raises:
        IndicatorComputationError: If insufficient candles or invalid periods
    """
    if fast_period < 1 or slow_period < 1 or signal_period < 1:
        raise IndicatorComputationError("All periods must be >= 1")
    if fast_period >= slow_period:
        raise IndicatorComputationError(f"fast_period ({fast_period}) must be < slow_period ({slow_period})")

    min_candles = slow_period + signal_period - 1
    if len(candles) < min_candles:
        raise IndicatorComputationError(f"need at least {min_candles} candles for MACD, got {len(candles)}")

    closes = [float(c.close) for c in candles]
    fast = ema_series(closes, fast_period)
    slow = ema_series(closes, slow_period)

    # Align both EMA series on the candles where the slow EMA exists.
    offset = slow_period - fast_period
    macd_line = [f - s for f, s in zip(fast[offset:], slow)]
    signal_line = ema_series(macd_line, signal_period)

    macd = macd_line[-1]
    signal = signal_line[-1]
    return MacdValues(macd=macd, signal=signal, histogram=macd - signal)
