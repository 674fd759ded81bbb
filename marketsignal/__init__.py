"""Market data aggregation and technical signal consolidation.

Packages:

- market_data: provider variants, series cache and the aggregator
- ratelimit: per-provider minimum-interval throttle
- indicators: trend, oscillator and candlestick pattern computations
- signals: score consolidation, commentary and the analysis pipeline
- persistence: persistence boundary (interfaces)
- storage: concrete analysis stores (in-memory, PostgreSQL)
- watchlist: periodic refresh of watched symbol/timeframe pairs
"""

__version__ = "1.0.0"
