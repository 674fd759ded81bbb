import pytest

from helpers import ManualClock, make_series

from marketsignal.market_data.cache import SeriesCache


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cache(clock: ManualClock) -> SeriesCache:
    return SeriesCache(900, clock=clock)


def test_set_then_get_returns_same_series(cache: SeriesCache) -> None:
    series = make_series([1.0, 2.0, 3.0])
    cache.set("AAPL", "1d", 100, "finnhub", series)

    assert cache.get("AAPL", "1d", 100, "finnhub") is series


def test_different_limit_is_a_miss(cache: SeriesCache) -> None:
    cache.set("AAPL", "1d", 100, "finnhub", make_series([1.0]))

    assert cache.get("AAPL", "1d", 50, "finnhub") is None


def test_different_provider_is_a_miss(cache: SeriesCache) -> None:
    cache.set("AAPL", "1d", 100, "finnhub", make_series([1.0]))

    assert cache.get("AAPL", "1d", 100, "twelvedata") is None
    assert cache.get("AAPL", "1d", 100, None) is None


def test_none_provider_is_stored_as_default(cache: SeriesCache) -> None:
    series = make_series([1.0])
    cache.set("AAPL", "1d", 100, None, series)

    assert cache.get("AAPL", "1d", 100, "default") is series
    assert cache.get("AAPL", "1d", 100) is series


def test_entry_expires_after_ttl(cache: SeriesCache, clock: ManualClock) -> None:
    cache.set("AAPL", "1d", 100, None, make_series([1.0]))

    clock.advance(900)
    assert cache.get("AAPL", "1d", 100) is not None

    clock.advance(1)
    assert cache.get("AAPL", "1d", 100) is None
    assert len(cache) == 0


def test_cleanup_evicts_only_expired(cache: SeriesCache, clock: ManualClock) -> None:
    cache.set("OLD", "1d", 100, None, make_series([1.0]))
    clock.advance(600)
    cache.set("NEW", "1d", 100, None, make_series([2.0]))
    clock.advance(400)

    assert cache.cleanup() == 1
    assert len(cache) == 1
    assert cache.get("NEW", "1d", 100) is not None


def test_clear_empties_cache(cache: SeriesCache) -> None:
    cache.set("A", "1d", 10, None, make_series([1.0]))
    cache.set("B", "1d", 10, None, make_series([1.0]))

    cache.clear()

    assert len(cache) == 0


def test_negative_ttl_rejected() -> None:
    with pytest.raises(ValueError, match="ttl_seconds"):
        SeriesCache(-1)
