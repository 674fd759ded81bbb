"""Error taxonomy for the aggregation and signal layers.

ProviderError is the only recoverable failure: the aggregator's fallback
loop catches it and moves on to the next provider. Everything else is
surfaced to the caller as-is.
"""

from __future__ import annotations

from typing import Sequence


class MarketSignalError(Exception):
    """Base exception for this package."""


class ProviderError(MarketSignalError):
    """One vendor call failed (network, vendor error payload, empty series, unknown symbol)."""

    def __init__(self, provider_name: str, symbol: str, cause: BaseException | str):
        self.provider_name = provider_name
        self.symbol = symbol
        self.cause = cause
        super().__init__(f"{provider_name} failed for {symbol}: {cause}")


class UnsupportedTimeframeError(ProviderError):
    """Provider cannot serve the requested timeframe. Never silently substituted."""

    def __init__(self, provider_name: str, symbol: str, timeframe: str, supported: Sequence[str]):
        self.timeframe = timeframe
        self.supported = tuple(supported)
        super().__init__(
            provider_name,
            symbol,
            f"unsupported timeframe {timeframe} (supported: {', '.join(self.supported)})",
        )


class AllProvidersExhaustedError(MarketSignalError):
    """Every registered provider failed for one request."""

    def __init__(self, symbol: str, errors: Sequence[ProviderError] = ()):
        self.symbol = symbol
        self.errors = tuple(errors)
        super().__init__(f"no provider returned data for {symbol} ({len(self.errors)} attempted)")


class ProviderNotFoundError(MarketSignalError):
    """Caller asked for a provider name that is not registered."""

    def __init__(self, provider_name: str | None):
        self.provider_name = provider_name
        super().__init__(f'market data provider "{provider_name}" not found')


class IndicatorComputationError(ValueError):
    """Indicator could not be computed (usually insufficient history)."""
