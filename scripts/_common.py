"""Shared wiring for the command-line scripts."""

from __future__ import annotations

import logging
from typing import Optional

from marketsignal.config import Settings
from marketsignal.persistence.interfaces import AnalysisStore
from marketsignal.signals.commentary import GeminiCommentator
from marketsignal.storage import InMemoryAnalysisStore, open_store


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_commentator(settings: Settings, *, enabled: bool = True) -> Optional[GeminiCommentator]:
    if not enabled or not settings.gemini_api_key:
        return None
    return GeminiCommentator(settings.gemini_api_key, settings.gemini_model, timeout=settings.http_timeout_seconds)


def build_store(settings: Settings) -> AnalysisStore:
    """PostgreSQL store when DATABASE_URL is set, otherwise an in-memory one."""
    return open_store(settings.database_url) or InMemoryAnalysisStore()
