from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from marketsignal.types import Analysis, SignalClass, Timeframe


class AnalysisStore(Protocol):
    def save_analysis(self, analysis: Analysis) -> str:
        """Persist an analysis document and return its id."""

    def get_analysis(self, analysis_id: str) -> Optional[dict[str, Any]]:
        """One stored analysis document, or None for an unknown id."""

    def get_analyses(self, symbol: str, limit: int = 10) -> list[dict[str, Any]]:
        """Most recent analysis documents for a symbol, newest first."""

    def get_analyses_by_time_range(
        self,
        symbol: str,
        timeframe: Optional[Timeframe],
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        """Documents with start <= timestamp <= end, newest first.

        A None timeframe matches every timeframe.
        """

    def get_signals_by_strength(
        self,
        symbol: str,
        signal: SignalClass,
        min_strength: int = 0,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        """Documents with this signal class and at least `min_strength`, strongest then newest first."""

    def get_latest_signals_for_symbols(
        self, symbols: Sequence[str], limit: int = 1
    ) -> dict[str, list[dict[str, Any]]]:
        """Up to `limit` newest documents per symbol; symbols with none map to an empty list."""

    def record_feedback(self, analysis_id: str, was_correct: bool, notes: str = "") -> None:
        """Attach outcome feedback to a stored analysis.

        Raises KeyError when the id is unknown.
        """

    def get_signal_stats(self, symbol: str, days: int = 30) -> dict[str, Any]:
        """Signal counts, average confidence and feedback accuracy over the last `days` days."""
