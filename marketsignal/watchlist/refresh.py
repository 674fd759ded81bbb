"""Periodic refresh of watched symbol/timeframe pairs.

Items are processed strictly one after another with a fixed pause after
every item, success or failure, so providers shared by several entries stay
under their rate limits. One failing item is logged and the pass continues.

Only one pass runs at a time per refresher: a pass requested while another
is in flight returns immediately with `skipped=True`.

Usage:
    refresher = WatchlistRefresher(aggregator, watchlist, store=store)
    report = refresher.refresh_all()   # one pass
    refresher.start(interval_seconds=900)  # background loop
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from marketsignal.market_data.aggregator import MarketDataAggregator
from marketsignal.outcome import attempt
from marketsignal.persistence.interfaces import AnalysisStore
from marketsignal.signals.analysis import analyze_series
from marketsignal.signals.commentary import Commentator
from marketsignal.types import DEFAULT_LIMIT, Analysis, Timeframe, WatchlistItem

logger = logging.getLogger(__name__)

DEFAULT_ITEM_DELAY_SECONDS = 5.0
DEFAULT_INTERVAL_SECONDS = 15 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Watchlist:
    """Ordered, thread-safe set of WatchlistItems keyed by (symbol, timeframe)."""

    def __init__(self, items: Optional[list[WatchlistItem]] = None):
        self._items: list[WatchlistItem] = []
        self._lock = threading.Lock()
        for item in items or []:
            self.add(item.symbol, item.timeframe, item.provider)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return any(item.key == key for item in self._items)

    def add(self, symbol: str, timeframe: Timeframe, provider: Optional[str] = None) -> WatchlistItem:
        """Add a pair. Adding an existing (symbol, timeframe) returns the existing item unchanged."""
        with self._lock:
            for item in self._items:
                if item.key == (symbol, timeframe):
                    return item
            item = WatchlistItem(symbol=symbol, timeframe=timeframe, provider=provider)
            self._items.append(item)
            return item

    def remove(self, symbol: str, timeframe: Timeframe) -> bool:
        """Remove exactly that pair. Returns whether anything was removed."""
        with self._lock:
            before = len(self._items)
            self._items = [item for item in self._items if item.key != (symbol, timeframe)]
            return len(self._items) != before

    def items(self) -> list[WatchlistItem]:
        """Snapshot of the current items, in insertion order."""
        with self._lock:
            return list(self._items)


@dataclass
class RefreshReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    processed: int = 0
    succeeded: int = 0
    failed: list[tuple[str, str, str]] = field(default_factory=list)  # (symbol, timeframe, reason)
    skipped: bool = False

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": [{"symbol": s, "timeframe": tf, "reason": r} for s, tf, r in self.failed],
            "skipped": self.skipped,
        }


class WatchlistRefresher:
    """Fetches, analyzes and stores every watchlist item on demand or on an interval."""

    def __init__(
        self,
        aggregator: MarketDataAggregator,
        watchlist: Watchlist,
        *,
        store: Optional[AnalysisStore] = None,
        commentator: Optional[Commentator] = None,
        limit: int = DEFAULT_LIMIT,
        item_delay_seconds: float = DEFAULT_ITEM_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.aggregator = aggregator
        self.watchlist = watchlist
        self.store = store
        self.commentator = commentator
        self.limit = limit
        self.item_delay_seconds = item_delay_seconds
        self._sleep = sleep
        self._clock = clock
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.last_report: Optional[RefreshReport] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pass_in_progress(self) -> bool:
        return self._pass_lock.locked()

    def refresh_item(self, item: WatchlistItem) -> Analysis:
        """Fetch and analyze one item, then store the analysis best-effort.

        Raises:
            ProviderError / ProviderNotFoundError: When the fetch fails
        """
        series = self.aggregator.fetch(item.symbol, item.timeframe, self.limit, item.provider)
        analysis = analyze_series(series, commentator=self.commentator, now=self._clock())

        if self.store is not None:
            outcome = attempt(f"Saving analysis for {item.symbol}", self.store.save_analysis, analysis)
            # A storage failure does not invalidate the refresh; the analysis is still returned.
            if outcome.ok:
                logger.debug(f"Stored analysis {outcome.value} for {item.symbol} {item.timeframe}")

        item.last_update = self._clock()
        return analysis

    def refresh_all(self) -> RefreshReport:
        """Run one sequential pass over the watchlist."""
        report = RefreshReport(started_at=self._clock())

        if not self._pass_lock.acquire(blocking=False):
            logger.info("Refresh pass already in progress; skipping")
            report.skipped = True
            report.finished_at = self._clock()
            return report

        try:
            items = self.watchlist.items()
            logger.info(f"Starting watchlist refresh for {len(items)} items")

            for item in items:
                logger.info(f"Refreshing {item.symbol} ({item.timeframe})")
                try:
                    self.refresh_item(item)
                    report.succeeded += 1
                except Exception as exc:
                    logger.error(f"Refresh failed for {item.symbol} ({item.timeframe}): {exc}")
                    report.failed.append((item.symbol, item.timeframe, str(exc)))
                report.processed += 1

                if self.item_delay_seconds > 0:
                    self._sleep(self.item_delay_seconds)

            report.finished_at = self._clock()
            logger.info(
                f"Watchlist refresh finished: {report.succeeded} ok, {len(report.failed)} failed"
            )
            self.last_report = report
            return report
        finally:
            self._pass_lock.release()

    def start(self, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> None:
        """Run one pass now, then one every `interval_seconds`, on a daemon thread."""
        if self.is_running:
            logger.warning("Watchlist refresher already running")
            return

        # Each loop owns its event, so a loop left finishing a pass after stop() still exits.
        stop_event = threading.Event()
        self._stop_event = stop_event

        def run() -> None:
            while not stop_event.is_set():
                self.refresh_all()
                if stop_event.wait(interval_seconds):
                    break

        self._thread = threading.Thread(target=run, name="watchlist-refresh", daemon=True)
        self._thread.start()
        logger.info(f"Watchlist refresher started (every {interval_seconds:.0f}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop. A pass already in flight runs to completion."""
        if self._thread is None:
            return

        self._stop_event.set()
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Watchlist refresh pass still running; loop exits when it finishes")
        self._thread = None
        logger.info("Watchlist refresher stopped")
