"""Alpha Vantage stock/ETF provider (TIME_SERIES_* endpoints, API key required).

Intraday and daily-or-coarser series come from different functions and
response keys. Quota exhaustion arrives as HTTP 200 with a "Note" body.
"""

from __future__ import annotations

from typing import Any

from marketsignal.errors import ProviderError
from marketsignal.market_data.base import MarketDataProvider, build_timeframes, parse_datetime_ms
from marketsignal.types import Candle, CandleSeries, InstrumentMatch, Timeframe

_INTRADAY = {"1min", "5min", "15min", "30min", "60min"}

_FUNCTIONS = {
    "daily": "TIME_SERIES_DAILY",
    "weekly": "TIME_SERIES_WEEKLY",
    "monthly": "TIME_SERIES_MONTHLY",
}

_SERIES_KEYS = {
    "daily": "Time Series (Daily)",
    "weekly": "Weekly Time Series",
    "monthly": "Monthly Time Series",
}


class AlphaVantageProvider(MarketDataProvider):
    """Alpha Vantage provider (free tier: 5 requests/minute, 500/day).

    There is no native 4h interval, so "4h" is rejected rather than
    answered with daily candles.
    """

    BASE_URL = "https://www.alphavantage.co"
    RATE_LIMIT_INTERVAL_MS = 12_000
    COMPACT_SIZE = 100

    _TIMEFRAMES = build_timeframes({
        "1m": "1min",
        "5m": "5min",
        "15m": "15min",
        "30m": "30min",
        "1h": "60min",
        "1d": "daily",
        "1w": "weekly",
        "1M": "monthly",
    })

    def __init__(self, api_key: str, **kwargs: Any) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        super().__init__(**kwargs)
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "alphavantage"

    def _check_payload(self, data: Any, symbol: str) -> dict[str, Any]:
        if not isinstance(data, dict):
            raise ProviderError(self.name, symbol, f"unexpected response type: {type(data).__name__}")
        if data.get("Error Message"):
            raise ProviderError(self.name, symbol, data["Error Message"])
        # Quota exhaustion comes back as HTTP 200 with a "Note"/"Information" body.
        for key in ("Note", "Information"):
            if data.get(key):
                raise ProviderError(self.name, symbol, data[key])
        return data

    def fetch_series(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        spec = self.get_timeframe_spec(timeframe, symbol)
        interval = spec.api

        params: dict[str, Any] = {
            "symbol": symbol,
            "apikey": self._api_key,
            "outputsize": "full" if limit > self.COMPACT_SIZE else "compact",
        }
        if interval in _INTRADAY:
            params["function"] = "TIME_SERIES_INTRADAY"
            params["interval"] = interval
            series_key = f"Time Series ({interval})"
        else:
            params["function"] = _FUNCTIONS[interval]
            series_key = _SERIES_KEYS[interval]

        data = self._check_payload(self._get_json("/query", params=params, symbol=symbol), symbol)

        time_series = data.get(series_key)
        if not time_series:
            raise ProviderError(self.name, symbol, f"no data found for timeframe {timeframe}")
        if not isinstance(time_series, dict):
            raise ProviderError(self.name, symbol, f"unexpected {series_key} type: {type(time_series).__name__}")

        # Response: {"2024-01-02": {"1. open": "...", "2. high": ..., "5. volume": ...}, ...}
        try:
            candles = [
                Candle(
                    timestamp=parse_datetime_ms(date),
                    open=float(values["1. open"]),
                    high=float(values["2. high"]),
                    low=float(values["3. low"]),
                    close=float(values["4. close"]),
                    volume=float(values.get("5. volume") or 0.0),
                )
                for date, values in time_series.items()
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, symbol, f"malformed candle payload: {exc}") from exc

        return self._build_series(symbol=symbol, timeframe=timeframe, candles=candles, limit=limit)

    def search_instruments(self, query: str) -> list[InstrumentMatch]:
        params = {"function": "SYMBOL_SEARCH", "keywords": query, "apikey": self._api_key}
        data = self._check_payload(self._get_json("/query", params=params, symbol=query), query)

        return [
            {
                "symbol": match.get("1. symbol", ""),
                "name": match.get("2. name", ""),
                "type": match.get("3. type", ""),
                "region": match.get("4. region", ""),
                "currency": match.get("8. currency", ""),
            }
            for match in data.get("bestMatches") or []
        ]
