from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Sequence

from marketsignal.storage.postgres.config import PostgresConfig
from marketsignal.storage.stats import summarize_signals
from marketsignal.types import Analysis, SignalClass, Timeframe

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS analyses (
    id TEXT PRIMARY KEY,
    symbol TEXT NOT NULL,
    timeframe TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    signal TEXT NOT NULL,
    strength INTEGER NOT NULL,
    confidence INTEGER NOT NULL,
    document JSONB NOT NULL,
    feedback JSONB
)
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS analyses_symbol_created_at_idx
    ON analyses (symbol, created_at DESC)
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _load_json(value: Any) -> Any:
    # psycopg returns JSONB as dicts; other drivers hand back text.
    if value is None or isinstance(value, (dict, list)):
        return value
    return json.loads(value)


def _row_to_document(row: Any) -> dict[str, Any]:
    """Stored document with the id and feedback columns merged in."""
    analysis_id, document, feedback = row
    doc = dict(_load_json(document) or {})
    doc["id"] = analysis_id
    doc["feedback"] = _load_json(feedback)
    return doc


class PostgresAnalysisStore:
    """AnalysisStore backed by one PostgreSQL table via SQLAlchemy Core `text()` statements.

    The table is created on first use. The connection URL is never logged.
    """

    def __init__(self, *, config: PostgresConfig, now: Callable[[], datetime] = _utcnow) -> None:
        self._config = config
        self._now = now
        self._engine: Any | None = None
        self._schema_ready = False

    def _require_sqlalchemy(self) -> tuple[Any, Any]:
        try:
            from sqlalchemy import create_engine, text  # type: ignore[import-not-found]
        except Exception as exc:  # pragma: no cover
            raise RuntimeError("SQLAlchemy is required for PostgresAnalysisStore. Install the package dependencies.") from exc

        return create_engine, text

    def _get_engine(self) -> Any:
        if self._engine is None:
            create_engine, _ = self._require_sqlalchemy()
            # Do not log the URL (it may contain secrets).
            self._engine = create_engine(self._config.database_url, echo=False, pool_pre_ping=True)
        return self._engine

    def ensure_schema(self) -> None:
        if self._schema_ready:
            return
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()
        with engine.begin() as conn:
            conn.execute(text(_CREATE_TABLE))
            conn.execute(text(_CREATE_INDEX))
        self._schema_ready = True
        logger.debug("analyses table ready")

    def save_analysis(self, analysis: Analysis) -> str:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        analysis_id = str(uuid.uuid4())
        stmt = text(
            """
            INSERT INTO analyses (id, symbol, timeframe, created_at, signal, strength, confidence, document, feedback)
            VALUES (:id, :symbol, :timeframe, :created_at, :signal, :strength, :confidence, CAST(:document AS JSONB), NULL)
            """
        )
        with engine.begin() as conn:
            conn.execute(
                stmt,
                {
                    "id": analysis_id,
                    "symbol": analysis.symbol,
                    "timeframe": analysis.timeframe,
                    "created_at": analysis.timestamp,
                    "signal": analysis.trading_signal.signal,
                    "strength": analysis.trading_signal.strength,
                    "confidence": analysis.trading_signal.confidence,
                    "document": json.dumps(analysis.to_dict()),
                },
            )
        return analysis_id

    def get_analysis(self, analysis_id: str) -> Optional[dict[str, Any]]:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        stmt = text("SELECT id, document, feedback FROM analyses WHERE id = :id")
        with engine.begin() as conn:
            row = conn.execute(stmt, {"id": analysis_id}).fetchone()

        return _row_to_document(row) if row is not None else None

    def get_analyses(self, symbol: str, limit: int = 10) -> list[dict[str, Any]]:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        stmt = text(
            """
            SELECT id, document, feedback
            FROM analyses
            WHERE symbol = :symbol
            ORDER BY created_at DESC
            LIMIT :limit
            """
        )
        with engine.begin() as conn:
            rows = conn.execute(stmt, {"symbol": symbol, "limit": max(limit, 0)}).fetchall()

        return [_row_to_document(row) for row in rows]

    def get_analyses_by_time_range(
        self,
        symbol: str,
        timeframe: Optional[Timeframe],
        start: datetime,
        end: datetime,
    ) -> list[dict[str, Any]]:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        params: dict[str, Any] = {"symbol": symbol, "start": start, "end": end}
        timeframe_clause = ""
        if timeframe is not None:
            timeframe_clause = "AND timeframe = :timeframe"
            params["timeframe"] = timeframe
        stmt = text(
            f"""
            SELECT id, document, feedback
            FROM analyses
            WHERE symbol = :symbol {timeframe_clause}
              AND created_at >= :start AND created_at <= :end
            ORDER BY created_at DESC
            """
        )
        with engine.begin() as conn:
            rows = conn.execute(stmt, params).fetchall()

        return [_row_to_document(row) for row in rows]

    def get_signals_by_strength(
        self,
        symbol: str,
        signal: SignalClass,
        min_strength: int = 0,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        stmt = text(
            """
            SELECT id, document, feedback
            FROM analyses
            WHERE symbol = :symbol AND signal = :signal AND strength >= :min_strength
            ORDER BY strength DESC, created_at DESC
            LIMIT :limit
            """
        )
        params = {"symbol": symbol, "signal": signal, "min_strength": min_strength, "limit": max(limit, 0)}
        with engine.begin() as conn:
            rows = conn.execute(stmt, params).fetchall()

        return [_row_to_document(row) for row in rows]

    def get_latest_signals_for_symbols(
        self, symbols: Sequence[str], limit: int = 1
    ) -> dict[str, list[dict[str, Any]]]:
        return {symbol: self.get_analyses(symbol, limit) for symbol in symbols}

    def record_feedback(self, analysis_id: str, was_correct: bool, notes: str = "") -> None:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        feedback = {"was_correct": bool(was_correct), "notes": notes, "timestamp": self._now().isoformat()}
        stmt = text("UPDATE analyses SET feedback = CAST(:feedback AS JSONB) WHERE id = :id")
        with engine.begin() as conn:
            result = conn.execute(stmt, {"feedback": json.dumps(feedback), "id": analysis_id})

        if result.rowcount == 0:
            raise KeyError(f"unknown analysis id: {analysis_id}")

    def get_signal_stats(self, symbol: str, days: int = 30) -> dict[str, Any]:
        self.ensure_schema()
        engine = self._get_engine()
        _, text = self._require_sqlalchemy()

        since = self._now() - timedelta(days=days)
        stmt = text(
            """
            SELECT signal, confidence, feedback
            FROM analyses
            WHERE symbol = :symbol AND created_at >= :since
            """
        )
        with engine.begin() as conn:
            rows = conn.execute(stmt, {"symbol": symbol, "since": since}).fetchall()

        return summarize_signals(symbol, days, ((s, c, _load_json(f)) for s, c, f in rows))

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None


def open_store(database_url: Optional[str]) -> Optional[PostgresAnalysisStore]:
    """PostgresAnalysisStore for a configured URL, or None when unset."""
    if not database_url:
        return None
    return PostgresAnalysisStore(config=PostgresConfig(database_url=database_url))
