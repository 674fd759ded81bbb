from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, cast

from marketsignal.types import DEFAULT_LIMIT, DEFAULT_TIMEFRAME, TIMEFRAMES, Timeframe

MAX_LIMIT = 5000


@dataclass(frozen=True)
class SeriesRequest:
    symbol: str
    timeframe: Timeframe
    limit: int
    provider: Optional[str] = None


def normalize_request(
    symbol: Any,
    timeframe: Any = None,
    limit: Any = None,
    provider: Any = None,
) -> SeriesRequest:
    """Validate caller input for a series request and fill in defaults.

    Raises:
        ValueError: On an empty symbol, unknown timeframe or non-positive limit
    """
    clean_symbol = str(symbol or "").strip().upper()
    if not clean_symbol:
        raise ValueError("symbol is required")

    tf = str(timeframe).strip() if timeframe else DEFAULT_TIMEFRAME
    if tf not in TIMEFRAMES:
        raise ValueError(f"invalid timeframe {tf!r}; expected one of {', '.join(TIMEFRAMES)}")

    if limit is None or limit == "":
        n = DEFAULT_LIMIT
    else:
        try:
            n = int(limit)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"limit must be an integer, got {limit!r}") from exc
    if n <= 0:
        raise ValueError(f"limit must be > 0, got {n}")
    if n > MAX_LIMIT:
        raise ValueError(f"limit must be <= {MAX_LIMIT}, got {n}")

    clean_provider = str(provider).strip().lower() if provider else None

    return SeriesRequest(
        symbol=clean_symbol,
        timeframe=cast(Timeframe, tf),
        limit=n,
        provider=clean_provider or None,
    )
