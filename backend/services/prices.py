"""
Price Source
Fetches current USD price and 24h change for the configured coins from a
CoinGecko-compatible /simple/price endpoint.

Usage:
    from services import get_price_source

    quotes = get_price_source().fetch()
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

import requests

from alerts.models import Quote
from core.config import COINS, get_settings
from core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)


class PriceSource:
    """
    One request per fetch, all coins at once.

    Either every configured coin comes back with a usable price or the
    whole fetch fails; callers never see a partial batch.
    """

    def __init__(
        self,
        base_url: str,
        coins: Dict[str, Tuple[str, str]] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.coins = dict(coins or COINS)
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}/simple/price"

    def fetch(self) -> List[Quote]:
        params = {
            "ids": ",".join(self.coins),
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }
        logger.info("Fetching crypto prices...")
        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching crypto prices: {e}")
            raise UpstreamUnavailable(f"Price request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Price response is not JSON: {e}")
            raise UpstreamUnavailable("Price response is not valid JSON") from e

        return self._parse(payload)

    def _parse(self, payload) -> List[Quote]:
        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Price response has unexpected shape")

        quotes = []
        for coin, (name, symbol) in self.coins.items():
            entry = payload.get(coin)
            if not isinstance(entry, dict):
                raise UpstreamUnavailable(f"No price data for {coin}")

            price = entry.get("usd")
            if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price):
                raise UpstreamUnavailable(f"Invalid price for {coin}: {price!r}")

            change = entry.get("usd_24h_change")
            if isinstance(change, bool) or not isinstance(change, (int, float)) or not math.isfinite(change):
                change = 0.0

            quotes.append(Quote(
                coin=coin,
                display_name=name,
                symbol=symbol,
                price=float(price),
                change_24h=float(change),
            ))
        return quotes


_price_source: Optional[PriceSource] = None


def get_price_source() -> PriceSource:
    global _price_source
    if _price_source is None:
        settings = get_settings()
        _price_source = PriceSource(
            settings.crypto_api_base_url,
            timeout=settings.price_api_timeout,
        )
    return _price_source
