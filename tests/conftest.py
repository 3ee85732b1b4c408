"""Shared fixtures: temporary alert store, fake price source, recording notifier."""

import pytest

from alerts import AlertEvaluator, Quote
from core.config import COINS
from core.errors import UpstreamUnavailable
from db import AlertStore


def make_quote(coin: str, price: float, change: float = 1.5) -> Quote:
    name, symbol = COINS.get(coin, (coin.capitalize(), coin.upper()))
    return Quote(coin=coin, display_name=name, symbol=symbol, price=price, change_24h=change)


class FakePriceSource:
    """Returns a fixed quote batch, or raises when `fail` is set."""

    def __init__(self, quotes=None, fail: bool = False):
        self.quotes = list(quotes or [])
        self.fail = fail
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise UpstreamUnavailable("provider down")
        return list(self.quotes)


class RecordingNotifier:
    """Records every notify call; `result` controls the reported outcome."""

    def __init__(self, result: bool = True):
        self.result = result
        self.calls = []
        self.test_sends = 0

    def notify(self, alert, current_price, quote):
        self.calls.append((alert, current_price, quote))
        return self.result

    def send_test(self):
        self.test_sends += 1
        return self.result


@pytest.fixture
def store(tmp_path):
    return AlertStore(str(tmp_path / "data" / "alerts.json"))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def evaluator(store, notifier):
    return AlertEvaluator(store, notifier)


@pytest.fixture
def price_source():
    return FakePriceSource([
        make_quote("bitcoin", 51000, 2.0),
        make_quote("ethereum", 3000, -1.2),
        make_quote("dogecoin", 0.12, 4.1),
        make_quote("litecoin", 80, 0.0),
    ])
