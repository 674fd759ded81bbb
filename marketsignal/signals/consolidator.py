"""Rule-based vote that merges an IndicatorBundle into one trading signal.

Score contributions:
    RSI > 70            -2 (overbought)
    RSI < 30            +2 (oversold)
    MACD > signal       +1, otherwise -1
    uptrend             +2 strong, +1 moderate (mirrored for downtrend)
    detected pattern    +1 bullish, -1 bearish, 0 unclassified

The result is a pure function of the bundle: same input, same signal.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from marketsignal.indicators.patterns import PATTERN_BIAS
from marketsignal.types import Analysis, IndicatorBundle, SignalClass, Timeframe, TradingSignal

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
RSI_WEIGHT = 2
MACD_WEIGHT = 1
PATTERN_WEIGHT = 1
TREND_WEIGHTS = {"strong": 2, "moderate": 1, "weak": 0}

STRONG_THRESHOLD = 3
CONFIDENCE_PER_POINT = 20


def _contributions(bundle: IndicatorBundle) -> list[tuple[int, str]]:
    """(points, reason) for every rule that fired."""
    out: list[tuple[int, str]] = []
    osc = bundle.oscillators

    if osc.rsi > RSI_OVERBOUGHT:
        out.append((-RSI_WEIGHT, f"RSI {osc.rsi:.2f} overbought (> {RSI_OVERBOUGHT:.0f})"))
    elif osc.rsi < RSI_OVERSOLD:
        out.append((RSI_WEIGHT, f"RSI {osc.rsi:.2f} oversold (< {RSI_OVERSOLD:.0f})"))

    if osc.macd.macd > osc.macd.signal:
        out.append((MACD_WEIGHT, f"MACD {osc.macd.macd:.4f} above signal {osc.macd.signal:.4f}"))
    else:
        out.append((-MACD_WEIGHT, f"MACD {osc.macd.macd:.4f} not above signal {osc.macd.signal:.4f}"))

    trend = bundle.trend
    trend_points = TREND_WEIGHTS.get(trend.strength, 0)
    if trend.direction == "uptrend" and trend_points:
        out.append((trend_points, f"{trend.strength} uptrend"))
    elif trend.direction == "downtrend" and trend_points:
        out.append((-trend_points, f"{trend.strength} downtrend"))

    for name, detected in sorted(bundle.patterns.items()):
        if not detected:
            continue
        bias = PATTERN_BIAS.get(name)
        if bias == "bullish":
            out.append((PATTERN_WEIGHT, f"{name} pattern (bullish)"))
        elif bias == "bearish":
            out.append((-PATTERN_WEIGHT, f"{name} pattern (bearish)"))

    return out


def score_bundle(bundle: IndicatorBundle) -> int:
    return sum(points for points, _ in _contributions(bundle))


def classify_score(score: int) -> SignalClass:
    if score >= STRONG_THRESHOLD:
        return "strong_buy"
    if score > 0:
        return "buy"
    if score <= -STRONG_THRESHOLD:
        return "strong_sell"
    if score < 0:
        return "sell"
    return "neutral"


def build_trading_signal(bundle: IndicatorBundle) -> TradingSignal:
    score = score_bundle(bundle)
    return TradingSignal(
        signal=classify_score(score),
        strength=abs(score),
        confidence=min(100, abs(score) * CONFIDENCE_PER_POINT),
    )


def explain_score(bundle: IndicatorBundle) -> list[str]:
    """Human-readable lines, one per rule that moved the score, plus the total."""
    lines = [f"{points:+d} {reason}" for points, reason in _contributions(bundle)]
    score = score_bundle(bundle)
    lines.append(f"= {score:+d} -> {classify_score(score)}")
    return lines


def consolidate(
    symbol: str,
    timeframe: Timeframe,
    bundle: IndicatorBundle,
    commentary: str = "",
    *,
    now: Optional[datetime] = None,
) -> Analysis:
    """Wrap the bundle and its trading signal into an Analysis record."""
    return Analysis(
        symbol=symbol,
        timeframe=timeframe,
        timestamp=now or datetime.now(timezone.utc),
        technical_analysis=bundle,
        trading_signal=build_trading_signal(bundle),
        ai_commentary=commentary or "",
    )
