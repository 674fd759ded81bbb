"""CoinGecko OHLC provider.

Uses the free public API (no key). Rate limit on the free tier is roughly
5 calls/minute for the OHLC endpoint, hence the 12 second spacing.

The free OHLC endpoint only serves daily-or-coarser history and carries no
volume, so candles report volume=0.0 to keep the Candle shape uniform.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from marketsignal.errors import ProviderError
from marketsignal.market_data.base import MarketDataProvider, build_timeframes
from marketsignal.types import Candle, CandleSeries, InstrumentMatch, Timeframe

logger = logging.getLogger(__name__)

_QUOTE_SUFFIX = re.compile(r"(USDT|USD|BTC)$")

# Values accepted by /coins/{id}/ohlc?days=
_ALLOWED_DAYS = (1, 7, 14, 30, 90, 180, 365)

_DAYS_PER_CANDLE = {"1d": 1, "1w": 7, "1M": 30}


def clean_coin_symbol(symbol: str) -> str:
    """Strip separators and a trailing quote currency: "BTC/USD" -> "btc"."""
    s = re.sub(r"[/:\-\s]", "", symbol.strip().upper())
    stripped = _QUOTE_SUFFIX.sub("", s)
    return (stripped or s).lower()


def days_window(timeframe: str, limit: int) -> int:
    """Smallest allowed `days` value that covers `limit` candles (capped at 365)."""
    wanted = min(max(limit, 1) * _DAYS_PER_CANDLE[timeframe], 365)
    for days in _ALLOWED_DAYS:
        if days >= wanted:
            return days
    return _ALLOWED_DAYS[-1]


class CoinGeckoProvider(MarketDataProvider):
    """CoinGecko provider (crypto only, 1d/1w/1M only)."""

    BASE_URL = "https://api.coingecko.com/api/v3"
    RATE_LIMIT_INTERVAL_MS = 12_000
    SEARCH_LIMIT = 100

    # Vendor picks granularity from `days`; the api field is informational.
    _TIMEFRAMES = build_timeframes({
        "1d": "daily",
        "1w": "weekly",
        "1M": "monthly",
    })

    def __init__(self, *, vs_currency: str = "usd", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.vs_currency = vs_currency
        self._coin_list: list[dict[str, Any]] | None = None

    @property
    def name(self) -> str:
        return "coingecko"

    def _get_coin_list(self, symbol: str) -> list[dict[str, Any]]:
        if self._coin_list is None:
            data = self._get_json("/coins/list", params={}, symbol=symbol)
            if not isinstance(data, list):
                raise ProviderError(self.name, symbol, f"unexpected response type: {type(data).__name__}")
            self._coin_list = [c for c in data if isinstance(c, dict)]
            logger.debug(f"Loaded {len(self._coin_list)} CoinGecko coins")
        return self._coin_list

    def resolve_coin_id(self, symbol: str) -> str:
        """Map a ticker such as "BTC" or "BTC/USD" to a CoinGecko coin id.

        Raises:
            ProviderError: If no coin matches
        """
        wanted = clean_coin_symbol(symbol)
        coins = self._get_coin_list(symbol)

        for coin in coins:
            if str(coin.get("id", "")).lower() == wanted:
                return str(coin["id"])
        for coin in coins:
            if str(coin.get("symbol", "")).lower() == wanted:
                return str(coin["id"])

        raise ProviderError(self.name, symbol, f"symbol not found: {symbol}")

    def fetch_series(self, symbol: str, timeframe: Timeframe, limit: int) -> CandleSeries:
        # Fail fast before any network call on timeframes the free API cannot serve.
        self.get_timeframe_spec(timeframe, symbol)

        coin_id = self.resolve_coin_id(symbol)
        params = {"vs_currency": self.vs_currency, "days": days_window(str(timeframe), limit)}
        data = self._get_json(f"/coins/{coin_id}/ohlc", params=params, symbol=symbol)

        if not isinstance(data, list):
            raise ProviderError(self.name, symbol, f"unexpected response type: {type(data).__name__}")

        # Response: [[timestamp_ms, open, high, low, close], ...]
        try:
            candles = [
                Candle(
                    timestamp=int(row[0]),
                    open=float(row[1]),
                    high=float(row[2]),
                    low=float(row[3]),
                    close=float(row[4]),
                    volume=0.0,
                )
                for row in data
            ]
        except (IndexError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, symbol, f"malformed candle payload: {exc}") from exc

        return self._build_series(symbol=symbol, timeframe=timeframe, candles=candles, limit=limit)

    def search_instruments(self, query: str) -> list[InstrumentMatch]:
        coins = self._get_coin_list(query)

        needle = query.strip().lower()
        if needle:
            coins = [
                c
                for c in coins
                if needle in str(c.get("name", "")).lower()
                or needle in str(c.get("symbol", "")).lower()
                or needle in str(c.get("id", "")).lower()
            ]

        return [
            {
                "symbol": str(c.get("symbol", "")).upper(),
                "name": str(c.get("name", "")),
                "id": str(c.get("id", "")),
            }
            for c in coins[: self.SEARCH_LIMIT]
        ]
