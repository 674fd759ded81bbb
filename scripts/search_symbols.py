#!/usr/bin/env python3
"""Search a provider's instrument catalogue and print matches as JSON.

Usage:
    python -m scripts.search_symbols --query apple [--provider twelvedata]
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
from marketsignal.errors import ProviderError, ProviderNotFoundError  # noqa: E402
from marketsignal.market_data import build_aggregator  # noqa: E402
from scripts._common import configure_logging  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Search instruments on a market data provider")
    parser.add_argument("--query", required=True, help="Search term")
    parser.add_argument("--provider", help="Provider name (default: configured default)")
    args = parser.parse_args()

    if not args.query.strip():
        print("❌ --query must not be empty", file=sys.stderr)
        return 2

    settings = load_settings()
    configure_logging(settings)
    aggregator = build_aggregator(settings)

    try:
        matches = aggregator.search_instruments(args.query.strip(), args.provider)
    except (ProviderNotFoundError, ProviderError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    finally:
        aggregator.close()

    print(json.dumps(matches, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
