"""
Price Monitor Service
Runs evaluation passes in the background, independent of HTTP traffic.

Usage:
    from services import get_price_monitor

    monitor = get_price_monitor()
    monitor.start()   # one pass now, then one every interval
    monitor.stop()
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Dict, Any

from alerts.models import Quote
from core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


@dataclass
class MonitorStats:
    """Background monitor statistics"""
    is_running: bool = False
    interval_ms: int = 0
    passes_run: int = 0
    passes_skipped: int = 0
    errors: int = 0
    started_at: Optional[datetime] = None
    last_run_at: Optional[datetime] = None
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_running": self.is_running,
            "interval_ms": self.interval_ms,
            "passes_run": self.passes_run,
            "passes_skipped": self.passes_skipped,
            "errors": self.errors,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "uptime_seconds": (datetime.now() - self.started_at).total_seconds() if self.started_at else 0,
            "last_error": self.last_error,
        }


class PriceMonitor:
    """
    Fixed-interval scheduler for evaluation passes.

    A pass is: fetch quotes, then hand them to the evaluator. A tick that
    arrives while another pass (e.g. one started by an API request) is
    still running is skipped rather than queued.
    """

    JOIN_TIMEOUT = 5.0

    def __init__(self, price_source, evaluator, interval_ms: int = 60000):
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._price_source = price_source
        self._evaluator = evaluator
        self._interval_ms = interval_ms
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._stats = MonitorStats(interval_ms=interval_ms)
        self._stats_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stats(self) -> MonitorStats:
        return self._stats

    def run_pass(self, blocking: bool = True) -> List[Quote]:
        """
        Fetch quotes and evaluate alerts against them.

        Raises UpstreamUnavailable when the price fetch fails; in that case
        no alert is evaluated.
        """
        quotes = self._price_source.fetch()
        events = self._evaluator.evaluate(quotes, blocking=blocking)
        with self._stats_lock:
            if events is None:
                self._stats.passes_skipped += 1
            else:
                self._stats.passes_run += 1
                self._stats.last_run_at = datetime.now()
        return quotes

    def start(self) -> Dict[str, Any]:
        if self.is_running:
            return {"status": "already_running"}

        logger.info(f"Starting background price monitoring (every {self._interval_ms}ms)")
        self._stop_event.clear()
        self._stats.is_running = True
        self._stats.started_at = datetime.now()
        self._thread = threading.Thread(target=self._run_loop, name="price-monitor", daemon=True)
        self._thread.start()
        return {"status": "started", "interval_ms": self._interval_ms}

    def stop(self) -> Dict[str, Any]:
        if not self.is_running:
            return {"status": "not_running"}

        self._stop_event.set()
        self._thread.join(timeout=self.JOIN_TIMEOUT)
        self._stats.is_running = False
        logger.info("Background price monitoring stopped")
        return {"status": "stopped", "passes_run": self._stats.passes_run}

    def _run_loop(self) -> None:
        interval = self._interval_ms / 1000.0
        try:
            while not self._stop_event.is_set():
                self._tick()
                if self._stop_event.wait(interval):
                    break
        finally:
            self._stats.is_running = False

    def _tick(self) -> None:
        logger.info("Checking prices and alerts...")
        try:
            self.run_pass(blocking=False)
        except UpstreamUnavailable as e:
            self._record_error(e)
            logger.error(f"Price fetch failed, retrying next tick: {e}")
        except Exception as e:
            self._record_error(e)
            logger.exception(f"Error in background monitoring: {e}")

    def _record_error(self, error: Exception) -> None:
        with self._stats_lock:
            self._stats.errors += 1
            self._stats.last_error = str(error)


# Singleton
_monitor: Optional[PriceMonitor] = None


def get_price_monitor() -> PriceMonitor:
    """Get or create price monitor singleton"""
    global _monitor
    if _monitor is None:
        from alerts import get_alert_evaluator
        from core.config import get_settings
        from .prices import get_price_source

        _monitor = PriceMonitor(
            get_price_source(),
            get_alert_evaluator(),
            interval_ms=get_settings().alert_check_interval,
        )
    return _monitor
