import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Iterable, Any

from .models import Alert, AlertEvent, Quote, quotes_by_coin
from core.errors import AlertNotFound, PersistenceError, StoreUnavailable

logger = logging.getLogger(__name__)


class AlertEvaluator:
    """
    Checks active alerts against a quote batch.

    An alert fires once: the notifier is called, then the alert is
    deactivated whether or not the email went out. Passes never overlap;
    the pass lock is held from snapshot load to the last deactivation.
    """

    def __init__(self, store, notifier):
        self._store = store
        self._notifier = notifier
        self._pass_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._stats = {
            "passes": 0,
            "skipped": 0,
            "triggers": 0,
            "notifications_sent": 0,
            "notification_failures": 0,
            "data_gaps": 0,
            "start_time": datetime.now()
        }

    def evaluate(self, quotes: Iterable[Quote], blocking: bool = True) -> Optional[List[AlertEvent]]:
        """
        Run one evaluation pass.

        With blocking=False the pass is skipped (returns None) when another
        pass is already running.
        """
        if not self._pass_lock.acquire(blocking=blocking):
            self._bump("skipped")
            logger.info("Evaluation pass already running, skipping")
            return None
        try:
            return self._run_pass(quotes_by_coin(quotes))
        finally:
            self._pass_lock.release()

    def _run_pass(self, quotes: Dict[str, Quote]) -> List[AlertEvent]:
        self._bump("passes")
        triggered = []

        active = [a for a in self._store.list() if a.active]
        for alert in active:
            quote = quotes.get(alert.coin)
            if quote is None:
                self._bump("data_gaps")
                logger.warning(f"No price data found for {alert.coin} (alert {alert.id})")
                continue

            if not alert.condition.is_met(quote.price, alert.threshold):
                continue

            triggered.append(self._fire(alert, quote))

        return triggered

    def _fire(self, alert: Alert, quote: Quote) -> AlertEvent:
        logger.info(
            f"Alert triggered for {alert.coin}: ${quote.price} {alert.condition.value} ${alert.threshold}"
        )
        self._bump("triggers")
        event = AlertEvent.from_alert(alert, quote.price)

        try:
            event.notified = bool(self._notifier.notify(alert, quote.price, quote))
        except Exception as e:
            logger.exception(f"Notifier raised for alert {alert.id}: {e}")
            event.notified = False
        self._bump("notifications_sent" if event.notified else "notification_failures")

        try:
            self._store.deactivate(alert.id)
            event.deactivated = True
            logger.info(f"Alert {alert.id} deactivated for {alert.coin}")
        except AlertNotFound:
            logger.warning(f"Alert {alert.id} was deleted before it could be deactivated")
        except (StoreUnavailable, PersistenceError) as e:
            logger.error(f"Failed to deactivate alert {alert.id}: {e}")

        return event

    def _bump(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    @property
    def notifications_sent(self) -> int:
        return self._stats["notifications_sent"]

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    def stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = dict(self._stats)
        uptime = (datetime.now() - stats.pop("start_time")).total_seconds()
        return {
            **stats,
            "uptime_seconds": round(uptime, 2),
            "pass_running": self.is_running,
        }


_evaluator: Optional[AlertEvaluator] = None


def get_alert_evaluator() -> AlertEvaluator:
    global _evaluator
    if _evaluator is None:
        from db import get_alert_store
        from services.notifier import get_notifier

        _evaluator = AlertEvaluator(get_alert_store(), get_notifier())
    return _evaluator
