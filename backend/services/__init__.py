"""
Services
Price source, email notifier and the background price monitor.
"""

from .prices import PriceSource, get_price_source
from .notifier import EmailNotifier, get_notifier
from .monitor import PriceMonitor, MonitorStats, get_price_monitor

__all__ = [
    "PriceSource",
    "get_price_source",
    "EmailNotifier",
    "get_notifier",
    "PriceMonitor",
    "MonitorStats",
    "get_price_monitor",
]
