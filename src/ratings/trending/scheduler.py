"""TrendingScheduler — owns the background thread that refreshes trending snapshots.

The scheduler runs one computation immediately on start and then every
``interval`` seconds until stopped. Each tick pushes the domain context
itself, because protean's context does not follow work onto new threads.
A failing run is logged and the loop carries on with the next tick.
"""

import threading

import structlog

from ratings.config import RatingsSettings
from ratings.domain import ratings
from ratings.trending.computation import TrendingComputation, TrendingRunSummary

logger = structlog.get_logger(__name__)


class TrendingScheduler:
    def __init__(
        self,
        computation: TrendingComputation | None = None,
        interval: float | None = None,
        domain=None,
    ) -> None:
        self.domain = domain or ratings
        self.computation = computation or TrendingComputation(domain=self.domain)
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.runs = 0
        self.last_summary: TrendingRunSummary | None = None

    @property
    def interval(self) -> float:
        if self._interval is None:
            with self.domain.domain_context():
                self._interval = RatingsSettings.from_domain(self.domain).trending_interval
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._loop, name="trending-scheduler", daemon=True)
            self._thread.start()
        logger.info("Trending scheduler started", interval=self.interval)

    def stop(self, timeout: float | None = 10.0) -> None:
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is not None:
            thread.join(timeout)
        logger.info("Trending scheduler stopped", runs=self.runs)

    def run_once(self) -> TrendingRunSummary | None:
        """Run a single computation inside the domain context; never raises."""
        try:
            with self.domain.domain_context():
                summary = self.computation.run()
        except Exception as exc:
            logger.error("Trending computation failed", error=str(exc), exc_info=True)
            return None
        finally:
            self.runs += 1

        self.last_summary = summary
        return summary

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(self.interval):
                break
