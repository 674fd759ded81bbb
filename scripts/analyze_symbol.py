#!/usr/bin/env python3
"""Fetch a candle series, analyze it and print the analysis as JSON.

This script:
1. Fetches candles (cached single provider by default, or --fallback across all)
2. Computes indicators and the consolidated trading signal
3. Optionally asks Gemini for commentary and stores the analysis

Usage:
    python -m scripts.analyze_symbol --symbol AAPL [--timeframe 1d] [--limit 100]
    python -m scripts.analyze_symbol --symbol BTC --provider coingecko --no-ai
    python -m scripts.analyze_symbol --symbol MSFT --fallback --save

Environment:
    ALPHA_VANTAGE_API_KEY, FINNHUB_API_KEY, TWELVEDATA_API_KEY - provider keys
    GEMINI_API_KEY - enables commentary
    DATABASE_URL - PostgreSQL connection string for --save
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure imports work when invoked as a script (e.g., from systemd).
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from marketsignal.config import load_settings  # noqa: E402
from marketsignal.errors import AllProvidersExhaustedError, ProviderError, ProviderNotFoundError  # noqa: E402
from marketsignal.market_data import build_aggregator  # noqa: E402
from marketsignal.market_data.validation import normalize_request  # noqa: E402
from marketsignal.outcome import attempt  # noqa: E402
from marketsignal.signals.analysis import analyze_series  # noqa: E402
from marketsignal.signals.consolidator import explain_score  # noqa: E402
from marketsignal.types import TIMEFRAMES  # noqa: E402
from scripts._common import build_commentator, build_store, configure_logging  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Analyze one symbol and print the trading signal")
    parser.add_argument("--symbol", required=True, help="Instrument symbol (e.g. AAPL, BTC)")
    parser.add_argument("--timeframe", default="1d", choices=TIMEFRAMES, help="Candle timeframe (default: 1d)")
    parser.add_argument("--limit", type=int, default=100, help="Number of candles (default: 100)")
    parser.add_argument("--provider", help="Provider name (default: configured default)")
    parser.add_argument("--fallback", action="store_true", help="Try every provider in order (bypasses the cache)")
    parser.add_argument("--no-cache", action="store_true", help="Do not read or write the series cache")
    parser.add_argument("--no-ai", action="store_true", help="Skip Gemini commentary")
    parser.add_argument("--save", action="store_true", help="Persist the analysis")
    parser.add_argument("--explain", action="store_true", help="Print per-rule score contributions to stderr")
    args = parser.parse_args()

    try:
        settings = load_settings()
        request = normalize_request(args.symbol, args.timeframe, args.limit, args.provider)
    except ValueError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2

    configure_logging(settings)
    aggregator = build_aggregator(settings)

    try:
        if args.fallback:
            series = aggregator.fetch_with_fallback(request.symbol, request.timeframe, request.limit)
        else:
            series = aggregator.fetch_cached(
                request.symbol,
                request.timeframe,
                request.limit,
                request.provider,
                use_cache=not args.no_cache,
            )
    except (AllProvidersExhaustedError, ProviderNotFoundError, ProviderError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    finally:
        aggregator.close()

    commentator = build_commentator(settings, enabled=not args.no_ai)
    analysis = analyze_series(series, commentator=commentator)
    document = analysis.to_dict()

    if args.save:
        store = build_store(settings)
        outcome = attempt(f"Saving analysis for {analysis.symbol}", store.save_analysis, analysis)
        # The printed analysis is still useful when persistence fails.
        if outcome.ok:
            document["id"] = outcome.value

    if args.explain:
        for line in explain_score(analysis.technical_analysis):
            print(line, file=sys.stderr)

    print(json.dumps(document, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
