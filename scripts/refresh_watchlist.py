#!/usr/bin/env python3
"""Refresh analyses for a watchlist, once or on an interval.

Each item is fetched from its provider (or the default one), analyzed and
stored. Items are processed one at a time with a pause after each.

Usage:
    python -m scripts.refresh_watchlist --item AAPL:1d --item BTC:1d:coingecko --once
    python -m scripts.refresh_watchlist --item MSFT:1h --interval 900 --delay 5

Environment:
    DATABASE_URL - PostgreSQL connection string (in-memory store when unset)
    WATCHLIST_ITEM_DELAY_SECONDS, WATCHLIST_REFRESH_INTERVAL_SECONDS - defaults for --delay/--interval
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

# Ensure imports work when invoked as a script (e.g., from systemd).
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from marketsignal.config import load_settings  # noqa: E402
from marketsignal.market_data import build_aggregator  # noqa: E402
from marketsignal.market_data.validation import SeriesRequest, normalize_request  # noqa: E402
from marketsignal.watchlist import Watchlist, WatchlistRefresher  # noqa: E402
from scripts._common import build_commentator, build_store, configure_logging  # noqa: E402


def parse_item(raw: str) -> SeriesRequest:
    """SYMBOL:TIMEFRAME[:PROVIDER] -> SeriesRequest."""
    parts = raw.split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"invalid --item {raw!r}; expected SYMBOL:TIMEFRAME[:PROVIDER]")
    provider = parts[2] if len(parts) == 3 else None
    return normalize_request(parts[0], parts[1], None, provider)


def main() -> int:
    parser = argparse.ArgumentParser(description="Refresh watchlist analyses")
    parser.add_argument(
        "--item",
        action="append",
        default=[],
        help="Watch SYMBOL:TIMEFRAME[:PROVIDER] (repeatable)",
    )
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    parser.add_argument("--interval", type=float, help="Seconds between passes")
    parser.add_argument("--delay", type=float, help="Seconds to pause after each item")
    parser.add_argument("--no-ai", action="store_true", help="Skip Gemini commentary")
    args = parser.parse_args()

    try:
        settings = load_settings()
        wanted = [parse_item(raw) for raw in args.item]
    except ValueError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2

    if not wanted:
        print("❌ at least one --item is required", file=sys.stderr)
        return 2

    configure_logging(settings)

    watchlist = Watchlist()
    for req in wanted:
        watchlist.add(req.symbol, req.timeframe, req.provider)

    aggregator = build_aggregator(settings)
    refresher = WatchlistRefresher(
        aggregator,
        watchlist,
        store=build_store(settings),
        commentator=build_commentator(settings, enabled=not args.no_ai),
        item_delay_seconds=args.delay if args.delay is not None else settings.refresh_item_delay_seconds,
    )

    if args.once:
        report = refresher.refresh_all()
        aggregator.close()
        print(json.dumps(report.to_dict(), indent=2))
        return 0 if not report.failed else 1

    interval = args.interval if args.interval is not None else settings.refresh_interval_seconds
    refresher.start(interval)
    print(f"🔁 Refreshing {len(watchlist)} items every {interval:.0f}s (Ctrl+C to stop)")
    try:
        while refresher.is_running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\n⏹️  Stopping...")
    finally:
        refresher.stop()
        aggregator.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
