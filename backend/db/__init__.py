"""
Database Layer
Persistence for the alert collection.
"""

from .store import AlertStore, get_alert_store

__all__ = ["AlertStore", "get_alert_store"]
