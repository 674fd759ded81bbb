"""
Stochastic Oscillator indicator module.

Usage:
    from marketsignal.indicators.stochastic import compute_stochastic

    values = compute_stochastic(candles, k_period=14, d_period=3)
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import Candle, StochasticValues


def _percent_k(window: Sequence[Candle]) -> float:
    highest_high = max(float(c.high) for c in window)
    lowest_low = min(float(c.low) for c in window)
    if highest_high == lowest_low:
        return 50.0
    return 100.0 * (float(window[-1].close) - lowest_low) / (highest_high - lowest_low)


def compute_stochastic(
    candles: Sequence[Candle],
    k_period: int = 14,
    d_period: int = 3,
) -> StochasticValues:
    """
    Calculate the Stochastic Oscillator.

    Formula:
        %K = 100 * (Close - Lowest Low) / (Highest High - Lowest Low)
        %D = SMA(%K, d_period)

    A flat window (highest high == lowest low) yields %K = 50.

    Args:
        candles: Sequence of OHLCV candles (at least k_period + d_period - 1)
        k_period: Lookback period for %K (default: 14)
        d_period: Smoothing period for %D (default: 3)

    Returns:
        StochasticValues (0-100)

    Raises:
        IndicatorComputationError: If insufficient candles or invalid periods
    """
    if k_period < 1 or d_period < 1:
        raise IndicatorComputationError(f"periods must be >= 1, got k_period={k_period}, d_period={d_period}")

    min_candles = k_period + d_period - 1
    if len(candles) < min_candles:
        raise IndicatorComputationError(
            f"need at least {min_candles} candles for Stochastic({k_period},{d_period}), got {len(candles)}"
        )

    # %K for each of the last d_period candles
    end = len(candles)
    k_values = [_percent_k(candles[i - k_period : i]) for i in range(end - d_period + 1, end + 1)]

    return StochasticValues(k=k_values[-1], d=sum(k_values) / d_period)
