from __future__ import annotations

from .adx import compute_adx
from .bollinger import compute_bollinger_bands
from .engine import compute_indicators
from .macd import compute_macd
from .patterns import PATTERN_BIAS, detect_patterns
from .rsi import compute_rsi
from .stochastic import compute_stochastic
from .trend import analyze_trend, compute_sma

__all__ = [
    "PATTERN_BIAS",
    "analyze_trend",
    "compute_adx",
    "compute_bollinger_bands",
    "compute_indicators",
    "compute_macd",
    "compute_rsi",
    "compute_sma",
    "compute_stochastic",
    "detect_patterns",
]
