"""Runtime configuration read from environment variables.

API keys and `DATABASE_URL` may contain secrets. Do not log them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class Settings:
    alpha_vantage_api_key: Optional[str] = None
    finnhub_api_key: Optional[str] = None
    twelvedata_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    cache_ttl_minutes: float = 15.0
    refresh_item_delay_seconds: float = 5.0
    refresh_interval_seconds: float = 900.0
    database_url: Optional[str] = None
    http_timeout_seconds: float = 20.0
    log_level: str = "INFO"

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_minutes * 60.0


def _optional(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(name, "").strip()
    return value or None


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (os.environ by default)."""
    if env is None:
        env = os.environ

    return Settings(
        alpha_vantage_api_key=_optional(env, "ALPHA_VANTAGE_API_KEY"),
        finnhub_api_key=_optional(env, "FINNHUB_API_KEY"),
        twelvedata_api_key=_optional(env, "TWELVEDATA_API_KEY"),
        gemini_api_key=_optional(env, "GEMINI_API_KEY"),
        gemini_model=_optional(env, "GEMINI_MODEL") or Settings.gemini_model,
        cache_ttl_minutes=_float(env, "MARKET_DATA_CACHE_TTL_MINUTES", Settings.cache_ttl_minutes),
        refresh_item_delay_seconds=_float(env, "WATCHLIST_ITEM_DELAY_SECONDS", Settings.refresh_item_delay_seconds),
        refresh_interval_seconds=_float(env, "WATCHLIST_REFRESH_INTERVAL_SECONDS", Settings.refresh_interval_seconds),
        database_url=_optional(env, "DATABASE_URL"),
        http_timeout_seconds=_float(env, "HTTP_TIMEOUT_SECONDS", Settings.http_timeout_seconds),
        log_level=(_optional(env, "LOG_LEVEL") or Settings.log_level).upper(),
    )
