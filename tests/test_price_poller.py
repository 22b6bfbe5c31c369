from __future__ import annotations

import json
import logging
import threading

import pytest

from custodia_app.app.price_poller import PollerState, PricePoller, Trend, price_trend
from custodia_app.app.state import PriceHistory, SessionStore
from custodia_client_sdk.exceptions import NetworkError, ParseError
from custodia_shared.telemetry import TelemetryLogger


def _network_error() -> NetworkError:
    return NetworkError(code="NETWORK_ERROR", message="down", details=None, trace_id=None, status_code=0)


class ScriptedFetch:
    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PricePoller(fetch=lambda: 1.0, on_sample=lambda _: None, interval_seconds=0)


def test_start_fetches_immediately_and_samples_shift() -> None:
    store = SessionStore()
    fetch = ScriptedFetch(100.0, 110.0)
    poller = PricePoller(fetch=fetch, on_sample=store.set_price_sample)

    poller.start(background=False)
    assert poller.state is PollerState.POLLING
    assert store.state.price == PriceHistory(current=100.0, previous=None)

    assert poller.tick() is True
    assert store.state.price == PriceHistory(current=110.0, previous=100.0)
    assert fetch.calls == 2


def test_failed_fetch_leaves_samples_untouched() -> None:
    store = SessionStore()
    fetch = ScriptedFetch(100.0, _network_error(), ParseError("PARSE_ERROR", "bad", None, None, 200), 120.0)
    poller = PricePoller(fetch=fetch, on_sample=store.set_price_sample)
    poller.start(background=False)

    assert poller.tick() is False
    assert poller.tick() is False
    assert poller.consecutive_failures == 2
    assert store.state.price == PriceHistory(current=100.0, previous=None)

    assert poller.tick() is True
    assert poller.consecutive_failures == 0
    assert store.state.price == PriceHistory(current=120.0, previous=100.0)


def test_tick_after_stop_does_nothing() -> None:
    samples: list[float] = []
    fetch = ScriptedFetch(1.0)
    poller = PricePoller(fetch=fetch, on_sample=samples.append)
    poller.start(background=False)

    poller.stop()
    poller.stop()

    assert poller.state is PollerState.IDLE
    assert poller.tick() is False
    assert samples == [1.0]
    assert fetch.calls == 1


def test_sample_in_flight_when_stopped_is_discarded() -> None:
    samples: list[float] = []
    poller: PricePoller

    def fetch() -> float:
        poller.stop()
        return 5.0

    poller = PricePoller(fetch=fetch, on_sample=samples.append)
    poller.start(background=False)

    assert samples == []


def test_queued_delivery_is_dropped_after_stop() -> None:
    samples: list[float] = []
    pending = []
    poller = PricePoller(fetch=lambda: 7.0, on_sample=samples.append, dispatch=pending.append)

    poller.start(background=False)
    poller.stop()
    for callback in pending:
        callback()

    assert len(pending) == 1
    assert samples == []


def test_background_thread_polls_until_stopped() -> None:
    samples: list[float] = []
    done = threading.Event()
    values = iter([1.0, 2.0, 3.0, 4.0, 5.0])
    poller: PricePoller

    def on_sample(value: float) -> None:
        samples.append(value)
        if len(samples) == 3:
            poller.stop()
            done.set()

    poller = PricePoller(fetch=lambda: next(values), on_sample=on_sample, interval_seconds=0.01)
    poller.start()

    assert done.wait(5)
    poller.join(5)
    assert samples == [1.0, 2.0, 3.0]
    assert not poller.is_polling


def test_unexpected_fetch_error_is_logged_and_skipped(caplog: pytest.LogCaptureFixture) -> None:
    samples: list[float] = []
    poller = PricePoller(fetch=ScriptedFetch(1.0, KeyError("cop"), 2.0), on_sample=samples.append)
    poller.start(background=False)

    with caplog.at_level(logging.ERROR, logger="custodia_app.app.price_poller"):
        assert poller.tick() is False

    assert poller.is_polling
    assert poller.consecutive_failures == 1
    assert [r.message for r in caplog.records if r.levelno >= logging.ERROR] == ["price_poll_crashed"]
    assert poller.tick() is True
    assert samples == [1.0, 2.0]


def test_background_thread_survives_unexpected_fetch_error(caplog: pytest.LogCaptureFixture) -> None:
    samples: list[float] = []
    done = threading.Event()
    fetch = ScriptedFetch(1.0, KeyError("cop"), 2.0, 3.0)
    poller: PricePoller

    def on_sample(value: float) -> None:
        samples.append(value)
        if len(samples) == 3:
            poller.stop()
            done.set()

    poller = PricePoller(fetch=fetch, on_sample=on_sample, interval_seconds=0.01)
    with caplog.at_level(logging.ERROR, logger="custodia_app.app.price_poller"):
        poller.start()
        assert done.wait(5)
        poller.join(5)

    assert samples == [1.0, 2.0, 3.0]
    assert fetch.calls == 4
    assert poller.consecutive_failures == 0
    assert any(record.message == "price_poll_crashed" for record in caplog.records)


def test_ticks_are_recorded_as_price_poll_events(tmp_path) -> None:
    log_file = tmp_path / "poll.jsonl"
    poller = PricePoller(
        fetch=ScriptedFetch(100.0, _network_error(), KeyError("cop")),
        on_sample=lambda _: None,
        telemetry=TelemetryLogger(app_name="test", enabled=True, log_file=log_file),
    )

    poller.start(background=False)
    poller.tick()
    poller.tick()

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [(r["category"], r["event"], r.get("error_code")) for r in records] == [
        ("price_poll", "price_poll_succeeded", None),
        ("price_poll", "price_poll_failed", "NETWORK_ERROR"),
        ("error", "price_poll_failed", "UNEXPECTED_ERROR"),
    ]
    assert all("duration_ms" in record for record in records)



@pytest.mark.parametrize(
    ("previous", "current", "expected"),
    [
        (None, None, Trend.NEUTRAL),
        (None, 10.0, Trend.NEUTRAL),
        (10.0, 11.0, Trend.UP),
        (10.0, 9.5, Trend.DOWN),
        (10.0, 10.0, Trend.NEUTRAL),
    ],
)
def test_price_trend(previous, current, expected) -> None:
    assert price_trend(previous, current) is expected
