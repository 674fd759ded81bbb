"""
Candlestick pattern detectors.

Each detector looks at the candle(s) ending at one position and returns a
bool. `detect_patterns` reports whether a pattern completed on any of the
last three candles.
"""

from __future__ import annotations

from typing import Callable, Literal, Sequence

from marketsignal.types import Candle

PatternBias = Literal["bullish", "bearish"]

RECENT_WINDOW = 3

# Body of the middle star candle must be under this fraction of the first body.
STAR_BODY_RATIO = 0.5


def _body(c: Candle) -> float:
    return abs(c.close - c.open)


def _is_bullish(c: Candle) -> bool:
    return c.close > c.open


def _is_bearish(c: Candle) -> bool:
    return c.close < c.open


def bullish_engulfing(prev: Candle, cur: Candle) -> bool:
    """Bearish candle followed by a bullish body that engulfs it."""
    return _is_bearish(prev) and _is_bullish(cur) and cur.open < prev.close and cur.close > prev.open


def bearish_engulfing(prev: Candle, cur: Candle) -> bool:
    """Bullish candle followed by a bearish body that engulfs it."""
    return _is_bullish(prev) and _is_bearish(cur) and cur.open > prev.close and cur.close < prev.open


def hammer(cur: Candle) -> bool:
    """Small body near the top with a lower shadow at least twice the body."""
    body = _body(cur)
    if body == 0 or cur.high == cur.low:
        return False
    lower_shadow = min(cur.open, cur.close) - cur.low
    upper_shadow = cur.high - max(cur.open, cur.close)
    return lower_shadow >= 2 * body and upper_shadow <= body


def morning_star(first: Candle, star: Candle, last: Candle) -> bool:
    """Long bearish candle, small star gapping below it, bullish close above the first midpoint."""
    if not (_is_bearish(first) and _is_bullish(last)):
        return False
    first_body = _body(first)
    if _body(star) >= first_body * STAR_BODY_RATIO:
        return False
    midpoint = (first.open + first.close) / 2
    return max(star.open, star.close) < first.close and last.close > midpoint


def evening_star(first: Candle, star: Candle, last: Candle) -> bool:
    """Long bullish candle, small star gapping above it, bearish close below the first midpoint."""
    if not (_is_bullish(first) and _is_bearish(last)):
        return False
    first_body = _body(first)
    if _body(star) >= first_body * STAR_BODY_RATIO:
        return False
    midpoint = (first.open + first.close) / 2
    return min(star.open, star.close) > first.close and last.close < midpoint


# name -> (number of candles the detector consumes, detector)
DETECTORS: dict[str, tuple[int, Callable[..., bool]]] = {
    "bullish_engulfing": (2, bullish_engulfing),
    "bearish_engulfing": (2, bearish_engulfing),
    "hammer": (1, hammer),
    "morning_star": (3, morning_star),
    "evening_star": (3, evening_star),
}

PATTERN_BIAS: dict[str, PatternBias] = {
    "bullish_engulfing": "bullish",
    "bearish_engulfing": "bearish",
    "hammer": "bullish",
    "morning_star": "bullish",
    "evening_star": "bearish",
}


def detect_patterns(candles: Sequence[Candle]) -> dict[str, bool]:
    """
    Detect candlestick patterns completing on any of the last 3 candles.

    Returns:
        {pattern name: detected}; empty when fewer than 3 candles are given
    """
    if len(candles) < RECENT_WINDOW:
        return {}

    found: dict[str, bool] = {}
    end = len(candles)
    for name, (width, detector) in DETECTORS.items():
        found[name] = any(
            detector(*candles[i - width + 1 : i + 1])
            for i in range(end - RECENT_WINDOW, end)
            if i - width + 1 >= 0
        )
    return found
