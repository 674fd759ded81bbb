"""Analysis pipeline for one candle series: indicators, optional commentary, signal."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from marketsignal.indicators.engine import compute_indicators
from marketsignal.outcome import attempt
from marketsignal.signals.commentary import Commentator
from marketsignal.signals.consolidator import consolidate
from marketsignal.types import Analysis, CandleSeries, IndicatorBundle

logger = logging.getLogger(__name__)

RECENT_CANDLES = 10


def build_commentary_payload(series: CandleSeries, bundle: IndicatorBundle) -> dict[str, Any]:
    """Payload for the commentator: indicators plus the last 10 candles."""
    technical = bundle.to_dict()
    return {
        "symbol": series.symbol,
        "timeframe": series.timeframe,
        "indicators": technical["oscillators"],
        "trend": technical["trend"],
        "patterns": technical["patterns"],
        "recentCandles": [c.to_dict() for c in series.last(RECENT_CANDLES)],
    }


def analyze_series(
    series: CandleSeries,
    *,
    commentator: Optional[Commentator] = None,
    now: Optional[datetime] = None,
) -> Analysis:
    """Indicators, optional commentary, then consolidation into an Analysis."""
    bundle = compute_indicators(series.candles)

    commentary = ""
    if commentator is not None:
        outcome = attempt(
            f"Commentary for {series.symbol}",
            commentator.explain,
            build_commentary_payload(series, bundle),
        )
        # A failed commentary call leaves ai_commentary empty; the signal stands on its own.
        commentary = outcome.value_or("")

    analysis = consolidate(series.symbol, series.timeframe, bundle, commentary, now=now)
    logger.info(
        f"{series.symbol} {series.timeframe}: {analysis.trading_signal.signal} "
        f"(strength {analysis.trading_signal.strength}, confidence {analysis.trading_signal.confidence}%)"
    )
    return analysis
