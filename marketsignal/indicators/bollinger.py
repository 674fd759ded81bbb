"""
Bollinger Bands indicator module.

Usage:
    from marketsignal.indicators.bollinger import compute_bollinger_bands

    bands = compute_bollinger_bands(candles, period=20, std_dev=2)
"""

from __future__ import annotations

from typing import Sequence

from marketsignal.errors import IndicatorComputationError
from marketsignal.types import BollingerBands, Candle

# Half-width of the placeholder bands used when no real bands can be computed.
DEFAULT_BAND_OFFSET = 10.0


def compute_bollinger_bands(
    candles: Sequence[Candle],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """
    Calculate Bollinger Bands over the last `period` closes.

    Formula:
        Middle Band = SMA(close, period)
        Upper Band = Middle Band + (std_dev * population standard deviation)
        Lower Band = Middle Band - (std_dev * population standard deviation)

    Args:
        candles: Sequence of OHLCV candles (at least `period`)
        period: SMA period (default: 20)
        std_dev: Number of standard deviations (default: 2.0)

    Returns:
        BollingerBands for the latest candle

    Raises:
        IndicatorComputationError: If insufficient candles or invalid parameters
    """
    if period < 1:
        raise IndicatorComputationError(f"period must be >= 1, got {period}")
    if std_dev <= 0:
        raise IndicatorComputationError(f"std_dev must be > 0, got {std_dev}")
    if len(candles) < period:
        raise IndicatorComputationError(
            f"need at least {period} candles for Bollinger({period},{std_dev}), got {len(candles)}"
        )

    closes = [float(c.close) for c in candles[-period:]]
    middle = sum(closes) / period
    variance = sum((price - middle) ** 2 for price in closes) / period
    width = std_dev * variance**0.5

    return BollingerBands(upper=middle + width, middle=middle, lower=middle - width)


def default_bands(candles: Sequence[Candle]) -> BollingerBands:
    """Placeholder bands: latest close +/- DEFAULT_BAND_OFFSET (0 +/- offset when empty)."""
    close = float(candles[-1].close) if candles else 0.0
    return BollingerBands(
        upper=close + DEFAULT_BAND_OFFSET,
        middle=close,
        lower=close - DEFAULT_BAND_OFFSET,
    )
