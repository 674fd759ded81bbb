"""
Trend classification from simple moving averages.

Usage:
    from marketsignal.indicators.trend import analyze_trend

    trend = analyze_trend(candles)
    trend.direction, trend.strength
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import Candle, TrendAnalysis

SMA_WINDOWS = (20, 50, 200)


def compute_sma(values: Sequence[float], period: int) -> float:
    """
    Simple moving average of the last `period` values.

    Raises:
        IndicatorComputationError: If fewer than `period` values are available
    """
    if period < 1:
        raise IndicatorComputationError(f"period must be >= 1, got {period}")
    if len(values) < period:
        raise IndicatorComputationError(f"need at least {period} values for SMA({period}), got {len(values)}")
    return sum(values[-period:]) / period


def _sma_or_last(closes: Sequence[float], period: int) -> float:
    # Short history degrades to the latest close instead of failing.
    if len(closes) < period:
        return closes[-1]
    return compute_sma(closes, period)


def analyze_trend(candles: Sequence[Candle]) -> TrendAnalysis:
    """
    Classify trend direction and strength from SMA 20/50/200.

    Rules (price = latest close):
        uptrend/strong     price > sma20 > sma50 > sma200
        uptrend/moderate   price > sma20 and price > sma50
        downtrend/strong   price < sma20 < sma50 < sma200
        downtrend/moderate price < sma20 and price < sma50
        neutral/weak       anything else

    Empty input gives neutral/weak with all averages at 0.
    """
    if not candles:
        return TrendAnalysis()

    closes = [float(c.close) for c in candles]
    price = closes[-1]
    sma20, sma50, sma200 = (_sma_or_last(closes, window) for window in SMA_WINDOWS)

    if price > sma20 > sma50 > sma200:
        direction, strength = "uptrend", "strong"
    elif price > sma20 and price > sma50:
        direction, strength = "uptrend", "moderate"
    elif price < sma20 < sma50 < sma200:
        direction, strength = "downtrend", "strong"
    elif price < sma20 and price < sma50:
        direction, strength = "downtrend", "moderate"
    else:
        direction, strength = "neutral", "weak"

    return TrendAnalysis(direction=direction, strength=strength, sma20=sma20, sma50=sma50, sma200=sma200)
