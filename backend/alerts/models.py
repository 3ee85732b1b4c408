"""
Alert Models
Data structures for alerts, price quotes, and trigger events.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Iterable
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class AlertCondition(str, Enum):
    """Direction of a threshold alert. Values are the wire names."""
    ABOVE = "price_above"
    BELOW = "price_below"

    @property
    def verb(self) -> str:
        return "risen above" if self is AlertCondition.ABOVE else "dropped below"

    def is_met(self, price: float, threshold: float) -> bool:
        """Strict comparison: a price equal to the threshold never fires"""
        if self is AlertCondition.ABOVE:
            return price > threshold
        return price < threshold


@dataclass
class Alert:
    """
    User-defined threshold alert.

    Lifecycle is single-shot: created active, switched off the first
    time its condition is met, never re-armed.

    Example:
        "Alert me when bitcoin rises above 50000"
    """
    id: int
    coin: str
    condition: AlertCondition
    threshold: float
    active: bool = True
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "coin": self.coin,
            "type": self.condition.value,
            "threshold": self.threshold,
            "active": self.active,
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Alert":
        created = data.get("createdAt")
        return cls(
            id=int(data["id"]),
            coin=str(data["coin"]),
            condition=AlertCondition(data["type"]),
            threshold=float(data["threshold"]),
            active=bool(data.get("active", True)),
            created_at=parse_timestamp(created) if created else utcnow(),
        )


@dataclass
class Quote:
    """
    Current price snapshot for one coin.

    Recomputed on every poll and never persisted.
    """
    coin: str
    display_name: str
    symbol: str
    price: float
    change_24h: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.display_name,
            "symbol": self.symbol,
            "price": self.price,
            "change": self.change_24h,
        }


@dataclass
class AlertEvent:
    """A trigger produced by one evaluation pass."""
    alert_id: int
    coin: str
    condition: AlertCondition
    threshold: float
    price: float
    notified: bool = False
    deactivated: bool = False
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alertId": self.alert_id,
            "coin": self.coin,
            "type": self.condition.value,
            "threshold": self.threshold,
            "price": self.price,
            "notified": self.notified,
            "deactivated": self.deactivated,
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_alert(cls, alert: Alert, price: float) -> "AlertEvent":
        return cls(
            alert_id=alert.id,
            coin=alert.coin,
            condition=alert.condition,
            threshold=alert.threshold,
            price=price,
        )


def quotes_by_coin(quotes: Iterable[Quote]) -> Dict[str, Quote]:
    return {q.coin: q for q in quotes}

