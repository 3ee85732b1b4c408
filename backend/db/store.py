"""
JSON Alert Store
Durable alert collection kept in a single JSON file.

Responsibilities:
- Assign alert IDs
- Persist the whole collection on every mutation
- Serialize read-modify-write sequences

NOT responsible for:
- Request validation (done in the API layer)
- Deciding when alerts fire (the evaluator handles this)
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from alerts.models import Alert, AlertCondition
from core.config import get_settings
from core.errors import AlertNotFound, PersistenceError, StoreUnavailable

logger = logging.getLogger(__name__)


class AlertStore:
    """
    File-backed alert collection.

    The file holds a JSON array of alert records in insertion order.
    Every mutation reads the full array, applies the change and rewrites
    it, all while holding one lock.
    """

    def __init__(self, path: str = "data/alerts.json"):
        self.path = Path(path)
        self._lock = threading.RLock()

    # =========================================================================
    # Setup
    # =========================================================================

    def ensure_storage(self) -> None:
        """Create the data directory and an empty collection if missing"""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                if not self.path.exists():
                    self._write([])
                    logger.info(f"Created empty alert store at {self.path}")
            except OSError as e:
                raise PersistenceError(f"Cannot initialise alert store at {self.path}: {e}") from e

    # =========================================================================
    # Read
    # =========================================================================

    def list(self) -> List[Alert]:
        """All alerts in insertion order; empty if the collection is unreadable"""
        try:
            return self._read()
        except (StoreUnavailable, PersistenceError) as e:
            logger.error(f"Error reading alerts: {e}")
            return []

    def get(self, alert_id: int) -> Optional[Alert]:
        for alert in self.list():
            if alert.id == alert_id:
                return alert
        return None

    def count_active(self) -> int:
        return sum(1 for a in self.list() if a.active)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, coin: str, condition: AlertCondition, threshold: float) -> Alert:
        with self._lock:
            alerts = self._read()
            next_id = max((a.id for a in alerts), default=0) + 1
            alert = Alert(
                id=next_id,
                coin=coin,
                condition=condition,
                threshold=threshold,
                active=True,
            )
            alerts.append(alert)
            self._write(alerts)

        logger.info(f"Created alert {alert.id}: {coin} {condition.value} {threshold}")
        return alert

    def delete(self, alert_id: int) -> None:
        with self._lock:
            alerts = self._read()
            remaining = [a for a in alerts if a.id != alert_id]
            if len(remaining) == len(alerts):
                raise AlertNotFound(alert_id)
            self._write(remaining)

        logger.info(f"Deleted alert {alert_id}")

    def deactivate(self, alert_id: int) -> Alert:
        with self._lock:
            alerts = self._read()
            for alert in alerts:
                if alert.id == alert_id:
                    alert.active = False
                    self._write(alerts)
                    return alert
            raise AlertNotFound(alert_id)

    # =========================================================================
    # File I/O
    # =========================================================================

    def _read(self) -> List[Alert]:
        with self._lock:
            if not self.path.exists():
                self.ensure_storage()
                return []
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise StoreUnavailable(f"{self.path}: {e}") from e

            if not isinstance(raw, list):
                raise StoreUnavailable(f"{self.path}: expected a JSON array")
            try:
                return [Alert.from_dict(item) for item in raw]
            except (KeyError, TypeError, ValueError) as e:
                raise StoreUnavailable(f"{self.path}: invalid alert record ({e})") from e

    def _write(self, alerts: List[Alert]) -> None:
        payload = json.dumps([a.to_dict() for a in alerts], indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".alerts-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e


# =============================================================================
# Singleton
# =============================================================================

_store: Optional[AlertStore] = None


def get_alert_store() -> AlertStore:
    """Get singleton alert store"""
    global _store
    if _store is None:
        _store = AlertStore(get_settings().alerts_file)
    return _store
