"""Concrete implementations of `marketsignal.persistence.AnalysisStore`."""

from .memory import InMemoryAnalysisStore
from .postgres import PostgresAnalysisStore, PostgresConfig, open_store
from .stats import summarize_signals
