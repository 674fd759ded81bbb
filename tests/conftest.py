"""Shared test fixtures for pytest.

Builders and fakes live in helpers.py; this module wraps the ones tests
take as fixtures and adds a mocked requests session and SQLAlchemy engine.
No test touches the network.
"""

from __future__ import annotations

from typing import Callable
from unittest.mock import MagicMock, Mock

import pytest

from helpers import ManualClock, ScriptedProvider, make_series
from marketsignal.types import CandleSeries


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def rising_series() -> CandleSeries:
    """60 daily candles climbing by 1.0 per day."""
    return make_series([100.0 + i for i in range(60)])


@pytest.fixture
def provider_factory() -> Callable[..., ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def mock_session() -> MagicMock:
    """requests.Session stand-in; tests set .get.return_value / .side_effect."""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def mock_db_engine() -> Mock:
    """Mock SQLAlchemy engine for testing database operations."""
    mock_engine = Mock()
    mock_conn = Mock()
    mock_result = Mock()
    mock_result.rowcount = 1
    mock_result.fetchone.return_value = None
    mock_result.fetchall.return_value = []
    mock_conn.execute.return_value = mock_result
    mock_engine.begin.return_value.__enter__ = Mock(return_value=mock_conn)
    mock_engine.begin.return_value.__exit__ = Mock(return_value=False)
    return mock_engine
