"""
API Routers
"""
from .prices import router as prices_router
from .alerts import router as alerts_router
from .stats import router as stats_router
from .notifications import router as notifications_router

__all__ = ["prices_router", "alerts_router", "stats_router", "notifications_router"]
