"""
Alert System
Single-shot threshold alerts evaluated against live price quotes.

Structure:
    alerts/
    ├── models.py    → Alert, AlertCondition, Quote, AlertEvent
    └── engine.py    → AlertEvaluator (evaluation pass + stats)

Usage:
    from alerts import get_alert_evaluator

    evaluator = get_alert_evaluator()

    # Evaluate (called by the price monitor and GET /api/prices)
    triggered = evaluator.evaluate(quotes)
"""

from .models import (
    Alert,
    AlertCondition,
    AlertEvent,
    Quote,
)

from .engine import (
    AlertEvaluator,
    get_alert_evaluator,
)

__all__ = [
    # Models
    "Alert",
    "AlertCondition",
    "AlertEvent",
    "Quote",
    # Engine
    "AlertEvaluator",
    "get_alert_evaluator",
]
