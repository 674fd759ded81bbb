"""Market data ingestion: vendor providers, series cache and aggregator."""

from __future__ import annotations

from marketsignal.config import Settings
from marketsignal.market_data.aggregator import AggregatorState, MarketDataAggregator
from marketsignal.market_data.alphavantage_provider import AlphaVantageProvider
from marketsignal.market_data.base import MarketDataProvider, TimeframeSpec
from marketsignal.market_data.cache import SeriesCache
from marketsignal.market_data.coingecko_provider import CoinGeckoProvider
from marketsignal.market_data.finnhub_provider import FinnhubProvider
from marketsignal.market_data.twelvedata_provider import TwelveDataProvider

__all__ = [
    "AggregatorState",
    "AlphaVantageProvider",
    "CoinGeckoProvider",
    "FinnhubProvider",
    "MarketDataAggregator",
    "MarketDataProvider",
    "SeriesCache",
    "TimeframeSpec",
    "TwelveDataProvider",
    "build_aggregator",
]


def build_aggregator(settings: Settings) -> MarketDataAggregator:
    """Register every provider the settings allow.

    Registration order is also the fallback order: Alpha Vantage (if keyed),
    CoinGecko (always), Finnhub (if keyed), Twelve Data (if keyed). Twelve
    Data becomes the default when present; otherwise the first registered
    provider is.
    """
    timeout = settings.http_timeout_seconds
    aggregator = MarketDataAggregator(cache=SeriesCache(settings.cache_ttl_seconds))

    if settings.alpha_vantage_api_key:
        aggregator.register_provider(
            "alphavantage", AlphaVantageProvider(settings.alpha_vantage_api_key, timeout=timeout)
        )

    aggregator.register_provider("coingecko", CoinGeckoProvider(timeout=timeout))

    if settings.finnhub_api_key:
        aggregator.register_provider("finnhub", FinnhubProvider(settings.finnhub_api_key, timeout=timeout))

    if settings.twelvedata_api_key:
        aggregator.register_provider(
            "twelvedata", TwelveDataProvider(settings.twelvedata_api_key, timeout=timeout), is_default=True
        )

    return aggregator
