import pytest

from helpers import make_candles

from marketsignal.errors import IndicatorComputationError
from marketsignal.indicators.adx import compute_adx


def test_adx_requires_two_periods_of_candles() -> None:
    with pytest.raises(IndicatorComputationError, match="need at least 28 candles"):
        compute_adx(make_candles([100.0 + i for i in range(27)]))


def test_adx_steady_uptrend_is_maximal() -> None:
    # every bar: +DM = 1, -DM = 0, TR = 2 -> DX = 100
    adx = compute_adx(make_candles([100.0 + i for i in range(40)]))
    assert adx == pytest.approx(100.0)


def test_adx_flat_market_is_zero() -> None:
    adx = compute_adx(make_candles([100.0] * 30, spread=0.0))
    assert adx == 0.0


def test_adx_choppy_market_is_low() -> None:
    closes = [100.0 + (1.0 if i % 2 else -1.0) for i in range(60)]

    adx = compute_adx(make_candles(closes))

    assert 0.0 <= adx < 25.0


def test_adx_rejects_invalid_period() -> None:
    with pytest.raises(IndicatorComputationError, match="period must be >= 1"):
        compute_adx(make_candles([1.0] * 30), period=0)
