from __future__ import annotations

from .analysis import analyze_series, build_commentary_payload
from .commentary import Commentator, GeminiCommentator
from .consolidator import build_trading_signal, classify_score, consolidate, explain_score, score_bundle

__all__ = [
    "Commentator",
    "GeminiCommentator",
    "analyze_series",
    "build_commentary_payload",
    "build_trading_signal",
    "classify_score",
    "consolidate",
    "explain_score",
    "score_bundle",
]
