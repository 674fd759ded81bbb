"""
ADX (Average Directional Index) indicator module.

Measures trend strength regardless of direction. Readings above ~25 are
usually read as a trending market.

Usage:
    from marketsignal.indicators.adx import compute_adx

    adx_value = compute_adx(candles, period=14)
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import Candle


def _wilder_sums(values: Sequence[float], period: int) -> list[float]:
    # Wilder running total: first = sum of first `period`, then total - total/period + value
    total = sum(values[:period])
    out = [total]
    for value in values[period:]:
        total = total - (total / period) + value
        out.append(total)
    return out


def compute_adx(candles: Sequence[Candle], period: int = 14) -> float:
    """
    Calculate Wilder's ADX.

    Formula:
        TR  = max(High - Low, |High - Prev Close|, |Low - Prev Close|)
        +DM = High - Prev High when it exceeds Prev Low - Low and is positive, else 0
        -DM = Prev Low - Low when it exceeds High - Prev High and is positive, else 0
        +DI = 100 * smoothed(+DM) / smoothed(TR)
        -DI = 100 * smoothed(-DM) / smoothed(TR)
        DX  = 100 * |+DI - -DI| / (+DI + -DI)
        ADX = Wilder average of DX over `period`

    Args:
        candles: Sequence of OHLCV candles (at least 2 * period)
        period: Smoothing period (default: 14)

    Returns:
        ADX value (0-100)

    Raises:
        IndicatorComputationError: If insufficient candles or invalid period
    """
    if period < 1:
        raise IndicatorComputationError(f"period must be >= 1, got {period}")

    min_candles = 2 * period
    if len(candles) < min_candles:
        raise IndicatorComputationError(f"need at least {min_candles} candles for ADX({period}), got {len(candles)}")

    true_ranges: list[float] = []
    plus_dm: list[float] = []
    minus_dm: list[float] = []

    for i in range(1, len(candles)):
        cur, prev = candles[i], candles[i - 1]
        high, low, prev_close = float(cur.high), float(cur.low), float(prev.close)

        true_ranges.append(max(high - low, abs(high - prev_close), abs(low - prev_close)))

        up_move = high - float(prev.high)
        down_move = float(prev.low) - low
        plus_dm.append(up_move if up_move > down_move and up_move > 0 else 0.0)
        minus_dm.append(down_move if down_move > up_move and down_move > 0 else 0.0)

    tr_smoothed = _wilder_sums(true_ranges, period)
    plus_smoothed = _wilder_sums(plus_dm, period)
    minus_smoothed = _wilder_sums(minus_dm, period)

    dx_values: list[float] = []
    for tr, pdm, mdm in zip(tr_smoothed, plus_smoothed, minus_smoothed):
        if tr == 0:
            dx_values.append(0.0)
            continue
        plus_di = 100.0 * pdm / tr
        minus_di = 100.0 * mdm / tr
        di_sum = plus_di + minus_di
        dx_values.append(0.0 if di_sum == 0 else 100.0 * abs(plus_di - minus_di) / di_sum)

    adx = sum(dx_values[:period]) / period
    for dx in dx_values[period:]:
        adx = (adx * (period - 1) + dx) / period

    return adx
