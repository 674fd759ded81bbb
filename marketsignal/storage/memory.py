from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Optional, Sequence

from marketsignal.storage.stats import summarize_signals
from marketsignal.types import Analysis, SignalClass, Timeframe


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAnalysisStore:
    """Process-local AnalysisStore used by tests and one-shot scripts."""

    def __init__(self, *, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now
        self._docs: dict[str, dict[str, Any]] = {}
        self._created: dict[str, datetime] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)

    def save_analysis(self, analysis: Analysis) -> str:
        analysis_id = str(uuid.uuid4())
        doc = analysis.to_dict()
        doc["id"] = analysis_id
        doc["feedback"] = None
        with self._lock:
            self._docs[analysis_id] = doc
            self._created[analysis_id] = analysis.timestamp
        return analysis_id

    def get_analyses(self, symbol: str, limit: int = 10) -> list[dict[str, Any]]:
        with self._lock:
            ids = [i for i, doc in self._docs.items() if doc["symbol"] == symbol]
            ids.sort(key=lambda i: self._created[i], reverse=True)
            return [copy.deepcopy(self._docs[i]) for i in ids[: max(limit, 0)]]

    def get_analysis(self, analysis_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            doc = self._docs.get(analysis_id)
            return copy.deepcopy(doc) if doc is not None else None

    def get_analyses_by_time_range(
        self,
        symbol: str,
        timeframe: Optional[Timeframe],
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        with self._lock:
            ids = [
                i
                for i, doc in self._docs.items()
                if doc["symbol"] == symbol
                and (timeframe is None or doc["timeframe"] == timeframe)
                and start <= self._created[i] <= end
            ]
            ids.sort(key=lambda i: self._created[i], reverse=True)
            return [copy.deepcopy(self._docs[i]) for i in ids]

    def get_signals_by_strength(
        self,
        symbol: str,
        signal: SignalClass,
        min_strength: int = 0,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        with self._lock:
            ids = [
                i
                for i, doc in self._docs.items()
                if doc["symbol"] == symbol
                and doc["trading_signal"]["signal"] == signal
                and doc["trading_signal"]["strength"] >= min_strength
            ]
            ids.sort(key=lambda i: (self._docs[i]["trading_signal"]["strength"], self._created[i]), reverse=True)
            return [copy.deepcopy(self._docs[i]) for i in ids[: max(limit, 0)]]

    def get_latest_signals_for_symbols(
        self, symbols: Sequence[str], limit: int = 1
    ) -> dict[str, list[dict[str, Any]]]:
        return {symbol: self.get_analyses(symbol, limit) for symbol in symbols}

    def record_feedback(self, analysis_id: str, was_correct: bool, notes: str = "") -> None:
        with self._lock:
            if analysis_id not in self._docs:
                raise KeyError(f"unknown analysis id: {analysis_id}")
            self._docs[analysis_id]["feedback"] = {
                "was_correct": bool(was_correct),
                "notes": notes,
                "timestamp": self._now().isoformat(),
            }

    def get_signal_stats(self, symbol: str, days: int = 30) -> dict[str, Any]:
        since = self._now() - timedelta(days=days)
        with self._lock:
            rows = [
                (doc["trading_signal"]["signal"], doc["trading_signal"]["confidence"], doc["feedback"])
                for i, doc in self._docs.items()
                if doc["symbol"] == symbol and self._created[i] >= since
            ]
        return summarize_signals(symbol, days, rows)
