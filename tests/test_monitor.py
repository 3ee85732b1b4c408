"""Tests for the background price monitor."""

import threading
import time

import pytest

from alerts import AlertCondition, AlertEvaluator
from conftest import FakePriceSource, RecordingNotifier, make_quote
from core.errors import UpstreamUnavailable
from services.monitor import PriceMonitor


class CountingEvaluator(AlertEvaluator):
    """Signals after every completed pass."""

    def __init__(self, store, notifier, expected_passes: int):
        super().__init__(store, notifier)
        self.done = threading.Event()
        self._expected = expected_passes
        self._count = 0

    def evaluate(self, quotes, blocking=True):
        events = super().evaluate(quotes, blocking=blocking)
        self._count += 1
        if self._count >= self._expected:
            self.done.set()
        return events


class TestRunPass:
    def test_run_pass_returns_quotes_and_fires(self, store, notifier, evaluator, price_source):
        store.create("bitcoin", AlertCondition.ABOVE, 50000)
        monitor = PriceMonitor(price_source, evaluator, interval_ms=1000)

        quotes = monitor.run_pass()

        assert len(quotes) == 4
        assert len(notifier.calls) == 1
        assert monitor.stats.passes_run == 1

    def test_upstream_failure_touches_nothing(self, store, notifier, evaluator):
        store.create("bitcoin", AlertCondition.ABOVE, 1)
        store.create("ethereum", AlertCondition.BELOW, 1_000_000)
        before = store.path.read_text()
        monitor = PriceMonitor(FakePriceSource(fail=True), evaluator, interval_ms=1000)

        with pytest.raises(UpstreamUnavailable):
            monitor.run_pass()

        assert notifier.calls == []
        assert store.path.read_text() == before
        assert evaluator.stats()["passes"] == 0

    def test_concurrent_passes_all_counted(self, evaluator, price_source):
        monitor = PriceMonitor(price_source, evaluator, interval_ms=1000)
        threads = [threading.Thread(target=monitor.run_pass) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert monitor.stats.passes_run == 20
        assert monitor.stats.passes_skipped == 0

    def test_invalid_interval(self, evaluator, price_source):
        with pytest.raises(ValueError):
            PriceMonitor(price_source, evaluator, interval_ms=0)


class TestBackgroundLoop:
    def test_runs_immediately_then_on_interval(self, store, price_source):
        evaluator = CountingEvaluator(store, RecordingNotifier(), expected_passes=3)
        monitor = PriceMonitor(price_source, evaluator, interval_ms=20)

        assert monitor.start()["status"] == "started"
        try:
            assert evaluator.done.wait(5)
        finally:
            result = monitor.stop()

        assert result["status"] == "stopped"
        assert not monitor.is_running
        assert price_source.calls >= 3

    def test_start_twice(self, evaluator, price_source):
        monitor = PriceMonitor(price_source, evaluator, interval_ms=60000)
        monitor.start()
        try:
            assert monitor.start()["status"] == "already_running"
        finally:
            monitor.stop()
        assert monitor.stop()["status"] == "not_running"

    def test_upstream_errors_do_not_stop_the_loop(self, store):
        source = FakePriceSource(fail=True)
        evaluator = CountingEvaluator(store, RecordingNotifier(), expected_passes=1)
        monitor = PriceMonitor(source, evaluator, interval_ms=20)

        monitor.start()
        try:
            # let a few failing ticks go by, then recover
            for _ in range(500):
                if source.calls >= 3:
                    break
                time.sleep(0.01)
            source.fail = False
            source.quotes = [make_quote("bitcoin", 51000)]
            assert evaluator.done.wait(5)
        finally:
            monitor.stop()

        assert monitor.stats.errors >= 2
        assert "provider down" in monitor.stats.last_error

    def test_tick_skipped_while_pass_running(self, store, price_source):
        evaluator = AlertEvaluator(store, RecordingNotifier())
        monitor = PriceMonitor(price_source, evaluator, interval_ms=1000)

        evaluator._pass_lock.acquire()
        try:
            monitor._tick()
        finally:
            evaluator._pass_lock.release()

        assert monitor.stats.passes_skipped == 1
        assert monitor.stats.passes_run == 0
        assert evaluator.stats()["skipped"] == 1
