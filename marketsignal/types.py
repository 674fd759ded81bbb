from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Sequence

Timeframe = Literal["1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w", "1M"]
TIMEFRAMES: tuple[str, ...] = ("1m", "5m", "15m", "30m", "1h", "4h", "1d", "1w", "1M")

DEFAULT_TIMEFRAME: Timeframe = "1d"
DEFAULT_LIMIT = 100

TrendDirection = Literal["uptrend", "downtrend", "neutral"]
TrendStrength = Literal["weak", "moderate", "strong"]
SignalClass = Literal["strong_sell", "sell", "neutral", "buy", "strong_buy"]

InstrumentMatch = dict[str, Any]


@dataclass(frozen=True)
class Candle:
    timestamp: int  # epoch millis, candle open
    open: float
    high: float
    low: float
    close: float
    volume: float

    def is_consistent(self) -> bool:
        return self.high >= max(self.open, self.close) and self.low <= min(self.open, self.close)

    def to_dict(self) -> dict[str, float | int]:
        return {
            "timestamp": self.timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class CandleSeries:
    """Chronologically ascending candles for one symbol/timeframe."""

    symbol: str
    timeframe: Timeframe
    candles: tuple[Candle, ...] = ()

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def closes(self) -> list[float]:
        return [c.close for c in self.candles]

    @property
    def highs(self) -> list[float]:
        return [c.high for c in self.candles]

    @property
    def lows(self) -> list[float]:
        return [c.low for c in self.candles]

    def last(self, n: int) -> tuple[Candle, ...]:
        if n <= 0:
            return ()
        return self.candles[-n:]

    def validate(self) -> None:
        """Check OHLC consistency and strictly increasing timestamps.

        Raises:
            ValueError: On the first violating candle
        """
        previous_ts: int | None = None
        for candle in self.candles:
            if not candle.is_consistent():
                raise ValueError(f"inconsistent OHLC values for {self.symbol} at {candle.timestamp}")
            if previous_ts is not None and candle.timestamp <= previous_ts:
                raise ValueError(f"timestamps not strictly increasing for {self.symbol} at {candle.timestamp}")
            previous_ts = candle.timestamp


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    is_default: bool
    rate_limit_interval_ms: int


CacheKey = tuple[str, str, int, str]


@dataclass(frozen=True)
class CacheEntry:
    key: CacheKey
    series: CandleSeries
    fetched_at: float  # clock seconds


@dataclass(frozen=True)
class TrendAnalysis:
    direction: TrendDirection = "neutral"
    strength: TrendStrength = "weak"
    sma20: float = 0.0
    sma50: float = 0.0
    sma200: float = 0.0


@dataclass(frozen=True)
class MacdValues:
    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class StochasticValues:
    k: float = 50.0
    d: float = 50.0


@dataclass(frozen=True)
class Oscillators:
    rsi: float
    macd: MacdValues
    bollinger: BollingerBands
    stochastic: StochasticValues
    adx: float


@dataclass(frozen=True)
class IndicatorBundle:
    trend: TrendAnalysis
    oscillators: Oscillators
    patterns: Mapping[str, bool] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        osc = self.oscillators
        return {
            "trend": {
                "direction": self.trend.direction,
                "strength": self.trend.strength,
                "sma20": self.trend.sma20,
                "sma50": self.trend.sma50,
                "sma200": self.trend.sma200,
            },
            "oscillators": {
                "rsi": osc.rsi,
                "macd": {
                    "macd": osc.macd.macd,
                    "signal": osc.macd.signal,
                    "histogram": osc.macd.histogram,
                },
                "bollinger": {
                    "upper": osc.bollinger.upper,
                    "middle": osc.bollinger.middle,
                    "lower": osc.bollinger.lower,
                },
                "stochastic": {"k": osc.stochastic.k, "d": osc.stochastic.d},
                "adx": osc.adx,
            },
            "patterns": dict(self.patterns),
        }


@dataclass(frozen=True)
class TradingSignal:
    signal: SignalClass
    strength: int  # |score|
    confidence: int  # 0-100

    def to_dict(self) -> dict[str, Any]:
        return {"signal": self.signal, "strength": self.strength, "confidence": self.confidence}


@dataclass(frozen=True)
class Analysis:
    symbol: str
    timeframe: Timeframe
    timestamp: datetime
    technical_analysis: IndicatorBundle
    trading_signal: TradingSignal
    ai_commentary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "timeframe": self.timeframe,
            "timestamp": self.timestamp.isoformat(),
            "technical_analysis": self.technical_analysis.to_dict(),
            "trading_signal": self.trading_signal.to_dict(),
            "ai_commentary": self.ai_commentary,
        }


@dataclass
class WatchlistItem:
    """Watched symbol/timeframe pair. Only the refresh loop touches last_update."""

    symbol: str
    timeframe: Timeframe
    provider: Optional[str] = None
    last_update: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.symbol, self.timeframe)


def candles_from_rows(rows: Sequence[Mapping[str, Any]]) -> tuple[Candle, ...]:
    """Build candles from dict rows shaped like Candle.to_dict()."""
    return tuple(
        Candle(
            timestamp=int(row["timestamp"]),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(row.get("volume") or 0.0),
        )
        for row in rows
    )
