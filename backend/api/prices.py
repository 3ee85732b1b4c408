"""
Prices API
Current quotes for the monitored coins.

Every call also runs an evaluation pass against the fresh quotes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from core.errors import UpstreamUnavailable
from services.monitor import PriceMonitor, get_price_monitor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Prices"])


@router.get("/prices")
def get_prices(monitor: PriceMonitor = Depends(get_price_monitor)):
    """
    Get price and 24h change for every monitored coin.

    Response shape: {coin: {name, symbol, price, change}}
    """
    try:
        quotes = monitor.run_pass()
    except UpstreamUnavailable as e:
        logger.error(f"GET /prices failed: {e}")
        raise HTTPException(500, "Failed to fetch crypto prices")

    return {q.coin: q.to_dict() for q in quotes}
