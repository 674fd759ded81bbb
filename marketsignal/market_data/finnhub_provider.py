"""Finnhub stock candle provider (/stock/candle, seconds-based timestamps)."""

from __future__ import annotations

import math
import time
from typing import Any, Callable

from marketsignal.errors import ProviderError
from marketsignal.market_data.base import MarketDataProvider, build_timeframes
from marketsignal.types import Candle, CandleSeries, InstrumentMatch, Timeframe

# Calendar days spanned by one candle for non-intraday resolutions.
_RESOLUTION_DAYS = {"D": 1, "W": 7, "M": 31}


class FinnhubProvider(MarketDataProvider):
    """Finnhub provider (free tier: 60 requests/minute)."""

    BASE_URL = "https://finnhub.io/api/v1"
    RATE_LIMIT_INTERVAL_MS = 1_000

    _TIMEFRAMES = build_timeframes({
        "1m": "1",
        "5m": "5",
        "15m": "15",
        "30m": "30",
        "1h": "60",
        "4h": "240",
        "1d": "D",
        "1w": "W",
        "1M": "M",
    })

    def __init__(self, api_key: str, *, clock: Callable[[], float] = time.time, **kwargs: Any) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        super().__init__(**kwargs)
        self._api_key = api_key
        self._clock = clock

    @property
    def name(self) -> str:
        return "finnhub"

    @staticmethod
    def lookback_days(resolution: str, limit: int) -> int:
        """Days of history to request so that `limit` candles are covered.

        Daily-or-coarser windows are doubled to absorb weekends and holidays.
        """
        if resolution in _RESOLUTION_DAYS:
            return max(limit, 1) * _RESOLUTION_DAYS[resolution] * 2
        minutes = int(resolution)
        return math.ceil((max(limit, 1) * minutes) / (60 * 24)) + 1

    def fetch_series(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        spec = self.get_timeframe_spec(timeframe, symbol)

        to_ts = int(self._clock())
        from_ts = to_ts - self.lookback_days(spec.api, limit) * 86_400
        params = {
            "symbol": symbol,
            "resolution": spec.api,
            "from": from_ts,
            "to": to_ts,
            "token": self._api_key,
        }
        data = self._get_json("/stock/candle", params=params, symbol=symbol)

        if not isinstance(data, dict):
            raise ProviderError(self.name, symbol, f"unexpected response type: {type(data).__name__}")
        if data.get("error"):
            raise ProviderError(self.name, symbol, data["error"])
        if data.get("s") == "no_data":
            raise ProviderError(self.name, symbol, f"no data available for {symbol} with timeframe {timeframe}")

        # Response: {"s": "ok", "t": [...], "o": [...], "h": [...], "l": [...], "c": [...], "v": [...]}
        try:
            times = data["t"]
            volumes = data.get("v") or [0.0] * len(times)
            candles = [
                Candle(
                    timestamp=int(ts) * 1000,
                    open=float(data["o"][i]),
                    high=float(data["h"][i]),
                    low=float(data["l"][i]),
                    close=float(data["c"][i]),
                    volume=float(volumes[i] or 0.0),
                )
                for i, ts in enumerate(times)
            ]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, symbol, f"malformed candle payload: {exc}") from exc

        return self._build_series(symbol=symbol, timeframe=timeframe, candles=candles, limit=limit)

    def search_instruments(self, query: str) -> list[InstrumentMatch]:
        data = self._get_json("/search", params={"q": query, "token": self._api_key}, symbol=query)
        if not isinstance(data, dict):
            raise ProviderError(self.name, query, f"unexpected response type: {type(data).__name__}")

        return [
            {
                "symbol": item.get("symbol", ""),
                "name": item.get("description", ""),
                "description": item.get("description", ""),
                "type": item.get("type", ""),
                "displaySymbol": item.get("displaySymbol", ""),
            }
            for item in data.get("result") or []
        ]
