"""
RSI (Relative Strength Index) indicator module.

Usage:
    from marketsignal.indicators.rsi import compute_rsi

    rsi_value = compute_rsi(candles, period=14)
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import Candle


def compute_rsi(candles: Sequence[Candle], period: int = 14) -> float:
    """
    Calculate Wilder's RSI from candle closes.

    Formula:
        RS = smoothed average gain / smoothed average loss
        RSI = 100 - (100 / (1 + RS))

    The first averages are plain means over `period` changes; every later
    change is folded in with Wilder smoothing:
        avg = (avg * (period - 1) + value) / period

    Args:
        candles: Sequence of OHLCV candles (at least period+1)
        period: Lookback period (default: 14)

    Returns:
        RSI value (0-100). Gains without losses give 100; a flat series gives 50.

    Raises:
        IndicatorComputationError: If insufficient candles or invalid period
    """
    if period < 1:
        raise IndicatorComputationError(f"period must be >= 1, got {period}")
    if len(candles) < period + 1:
        raise IndicatorComputationError(f"need at least {period + 1} candles for RSI({period}), got {len(candles)}")

    changes = [float(candles[i].close) - float(candles[i - 1].close) for i in range(1, len(candles))]
    gains = [max(change, 0.0) for change in changes]
    losses = [max(-change, 0.0) for change in changes]

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))
