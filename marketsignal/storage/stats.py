from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

SIGNAL_CLASSES = ("strong_buy", "buy", "neutral", "sell", "strong_sell")


def summarize_signals(
    symbol: str,
    days: int,
    rows: Iterable[tuple[str, int, Optional[Mapping[str, Any]]]],
) -> dict[str, Any]:
    """Aggregate (signal, confidence, feedback) rows into the stats document.

    Shape:
        {symbol, days, total_analyses, signals: {class: count},
         average_confidence, feedback: {total, correct, accuracy}}
    """
    signals = {name: 0 for name in SIGNAL_CLASSES}
    total = 0
    confidence_sum = 0
    feedback_total = 0
    feedback_correct = 0

    for signal, confidence, feedback in rows:
        total += 1
        if signal in signals:
            signals[signal] += 1
        confidence_sum += int(confidence or 0)
        if feedback:
            feedback_total += 1
            if feedback.get("was_correct"):
                feedback_correct += 1

    return {
        "symbol": symbol,
        "days": days,
        "total_analyses": total,
        "signals": signals,
        "average_confidence": round(confidence_sum / total, 2) if total else 0.0,
        "feedback": {
            "total": feedback_total,
            "correct": feedback_correct,
            "accuracy": round(feedback_correct / feedback_total * 100, 2) if feedback_total else None,
        },
    }
