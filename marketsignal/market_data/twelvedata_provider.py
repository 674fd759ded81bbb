"""Twelve Data provider (/time_series, newest-first values, up to 5000 per call)."""

from __future__ import annotations

from typing import Any

from marketsignal.errors import ProviderError
from marketsignal.market_data.base import MarketDataProvider, build_timeframes, parse_datetime_ms
from marketsignal.types import Candle, CandleSeries, InstrumentMatch, Timeframe


class TwelveDataProvider(MarketDataProvider):
    """Twelve Data provider (free tier: 8 requests/minute, 800/day)."""

    BASE_URL = "https://api.twelvedata.com"
    RATE_LIMIT_INTERVAL_MS = 8_000
    MAX_OUTPUT_SIZE = 5000
    SEARCH_OUTPUT_SIZE = 30

    _TIMEFRAMES = build_timeframes({
        "1m": "1min",
        "5m": "5min",
        "15m": "15min",
        "30m": "30min",
        "1h": "1h",
        "4h": "4h",
        "1d": "1day",
        "1w": "1week",
        "1M": "1month",
    })

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        super().__init__(**kwargs)
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "twelvedata"

    def _check_payload(self, data: Any, symbol: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise ProviderError(self.name, symbol, f"unexpected response type: {type(data).__name__}")
        if data.get("status") == "error":
            raise ProviderError(self.name, symbol, data.get("message") or "Twelve Data API error")
        return data

    def fetch_series(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        spec = self.get_timeframe_spec(timeframe, symbol)
        params = {
            "symbol": symbol,
            "interval": spec.api,
            "outputsize": min(max(limit, 1), self.MAX_OUTPUT_SIZE),
            "apikey": self._api_key,
        }
        data = self._check_payload(self._get_json("/time_series", params=params, symbol=symbol), symbol)

        # Values arrive newest-first; _build_series restores chronological order.
        try:
            candles = [
                Candle(
                    timestamp=parse_datetime_ms(item["datetime"]),
                    open=float(item["open"]),
                    high=float(item["high"]),
                    low=float(item["low"]),
                    close=float(item["close"]),
                    volume=float(item.get("volume") or 0.0),
                )
                for item in data.get("values") or []
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, symbol, f"malformed candle payload: {exc}") from exc

        return self._build_series(symbol=symbol, timeframe=timeframe, candles=candles, limit=limit)

    def search_instruments(self, query: str) -> list[InstrumentMatch]:
        params = {"symbol": query, "outputsize": self.SEARCH_OUTPUT_SIZE, "apikey": self._api_key}
        data = self._check_payload(self._get_json("/symbol_search", params=params, symbol=query), query)

        return [
            {
                "symbol": item.get("symbol", ""),
                "name": item.get("instrument_name", ""),
                "exchange": item.get("exchange", ""),
                "country": item.get("country", ""),
                "type": item.get("instrument_type", item.get("type", "")),
            }
            for item in data.get("data") or []
        ]
