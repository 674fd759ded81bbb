"""Provider registry with single-provider, fallback and cached fetch paths.

`fetch` and `fetch_cached` talk to exactly one provider. `fetch_with_fallback`
walks every provider in registration order and never touches the cache.
Callers that want both compose them explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from marketsignal.errors import AllProvidersExhaustedError, ProviderError, ProviderNotFoundError
from marketsignal.market_data.base import MarketDataProvider
from marketsignal.market_data.cache import SeriesCache
from marketsignal.types import (
    DEFAULT_LIMIT,
    DEFAULT_TIMEFRAME,
    CandleSeries,
    InstrumentMatch,
    ProviderDescriptor,
    Timeframe,
)

logger = logging.getLogger(__name__)


@dataclass
class AggregatorState:
    """Registered providers (insertion ordered) and the default provider name."""

    providers: dict[str, MarketDataProvider] = field(default_factory=dict)
    default_provider: Optional[str] = None


class MarketDataAggregator:
    """Single entry point for obtaining candle series."""

    def __init__(self, state: AggregatorState | None = None, *, cache: SeriesCache | None = None):
        self.state = state if state is not None else AggregatorState()
        self.cache = cache if cache is not None else SeriesCache()

    @property
    def default_provider(self) -> Optional[str]:
        return self.state.default_provider

    @property
    def provider_names(self) -> list[str]:
        return list(self.state.providers)

    def register_provider(self, name: str, provider: MarketDataProvider, is_default: bool = False) -> None:
        """Register or overwrite a provider.

        Overwriting keeps the original registration position.
        """
        self.state.providers[name] = provider
        if is_default or self.state.default_provider is None:
            self.state.default_provider = name
        logger.info(f"Registered market data provider {name}" + (" (default)" if self.default_provider == name else ""))

    def get_provider(self, provider_name: Optional[str] = None) -> MarketDataProvider:
        """Resolve a provider by name, or the default one.

        Raises:
            ProviderNotFoundError: If the name is unknown or nothing is registered
        """
        name = provider_name or self.state.default_provider
        provider = self.state.providers.get(name) if name else None
        if provider is None:
            raise ProviderNotFoundError(name)
        return provider

    def descriptors(self) -> list[ProviderDescriptor]:
        return [
            provider.descriptor(is_default=name == self.state.default_provider)
            for name, provider in self.state.providers.items()
        ]

    def fetch(
        self,
        symbol: str,
        timeframe: Timeframe = DEFAULT_TIMEFRAME,
        limit: int = DEFAULT_LIMIT,
        provider_name: Optional[str] = None,
    ) -> CandleSeries:
        """Fetch from one provider (named or default). No fallback."""
        provider = self.get_provider(provider_name)
        return provider.fetch_series(symbol, timeframe, limit)

    def fetch_with_fallback(
        self,
        symbol: str,
        timeframe: Timeframe = DEFAULT_TIMEFRAME,
        limit: int = DEFAULT_LIMIT,
    ) -> CandleSeries:
        """Try each provider in registration order and return the first success.

        Raises:
            AllProvidersExhaustedError: After every registered provider failed
        """
        errors: list[ProviderError] = []
        for name, provider in list(self.state.providers.items()):
            logger.info(f"Fetching {symbol} {timeframe} x{limit} from {name}")
            try:
                series = provider.fetch_series(symbol, timeframe, limit)
            except ProviderError as exc:
                logger.warning(f"Provider {name} failed for {symbol}: {exc}")
                errors.append(exc)
                continue
            logger.info(f"Provider {name} returned {len(series)} candles for {symbol}")
            return series

        raise AllProvidersExhaustedError(symbol, errors)

    def fetch_cached(
        self,
        symbol: str,
        timeframe: Timeframe = DEFAULT_TIMEFRAME,
        limit: int = DEFAULT_LIMIT,
        provider_name: Optional[str] = None,
        use_cache: bool = True,
    ) -> CandleSeries:
        """Serve from the cache, or fetch from one provider and store the result.

        The cache key uses the resolved provider name, so changing the default
        provider never serves another vendor's series.
        """
        resolved = provider_name or self.state.default_provider

        if use_cache:
            cached = self.cache.get(symbol, timeframe, limit, resolved)
            if cached is not None:
                logger.debug(f"Cache hit for {symbol} {timeframe} x{limit} ({resolved})")
                return cached

        series = self.fetch(symbol, timeframe, limit, resolved)

        if use_cache:
            self.cache.set(symbol, timeframe, limit, resolved, series)
        return series

    def search_instruments(self, query: str, provider_name: Optional[str] = None) -> list[InstrumentMatch]:
        provider = self.get_provider(provider_name)
        return provider.search_instruments(query)

    def close(self) -> None:
        for provider in self.state.providers.values():
            provider.close()
