import pytest

from marketsignal.config import Settings
from marketsignal.market_data.validation import SeriesRequest
from marketsignal.signals.commentary import GeminiCommentator
from marketsignal.storage import InMemoryAnalysisStore, PostgresAnalysisStore
from scripts._common import build_commentator, build_store
from scripts.refresh_watchlist import parse_item


def test_parse_item_with_and_without_provider() -> None:
    assert parse_item("aapl:1d") == SeriesRequest(symbol="AAPL", timeframe="1d", limit=100, provider=None)
    assert parse_item("BTC:1w:CoinGecko").provider == "coingecko"


@pytest.mark.parametrize("raw", ["AAPL", "AAPL:1d:x:y", "AAPL:2d"])
def test_parse_item_rejects_bad_input(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_item(raw)


def test_build_store_prefers_postgres_when_configured() -> None:
    assert isinstance(build_store(Settings()), InMemoryAnalysisStore)
    assert isinstance(build_store(Settings(database_url="postgresql://fake")), PostgresAnalysisStore)


def test_build_commentator_needs_key_and_flag() -> None:
    assert build_commentator(Settings()) is None
    assert build_commentator(Settings(gemini_api_key="k"), enabled=False) is None

    commentator = build_commentator(Settings(gemini_api_key="k", gemini_model="gemini-1.5-pro"))
    assert isinstance(commentator, GeminiCommentator)
    assert commentator.model == "gemini-1.5-pro"
    commentator.close()
