from __future__ import annotations

import logging
import threading
from enum import Enum
from time import perf_counter
from typing import Callable

from custodia_client_sdk.exceptions import ApiError
from custodia_shared.telemetry import EventCategory, TelemetryLogger, build_event

logger = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]


def immediate_dispatch(callback: Callable[[], None]) -> None:
    callback()


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


def price_trend(previous: float | None, current: float | None) -> Trend:
    if previous is None or current is None:
        return Trend.NEUTRAL
    if current > previous:
        return Trend.UP
    if current < previous:
        return Trend.DOWN
    return Trend.NEUTRAL


class PricePoller:
    """Refreshes the spot price every ``interval_seconds`` until stopped.

    Samples are handed to ``on_sample`` through ``dispatch`` so the store is only
    touched on the control thread. Fetch failures, unexpected ones included, are
    logged and skipped; the next interval polls again. With a ``telemetry`` logger
    every tick is recorded as a ``price_poll`` event.
    """

    def __init__(
        self,
        fetch: Callable[[], float],
        on_sample: Callable[[float], None],
        *,
        interval_seconds: float = 10.0,
        dispatch: Dispatcher = immediate_dispatch,
        telemetry: TelemetryLogger | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than 0")
        self._fetch = fetch
        self._on_sample = on_sample
        self.interval_seconds = interval_seconds
        self._dispatch = dispatch
        self.telemetry = telemetry
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.state = PollerState.IDLE
        self.consecutive_failures = 0

    @property
    def is_polling(self) -> bool:
        return self.state is PollerState.POLLING

    def start(self, *, background: bool = True) -> None:
        """Enter polling and fetch once right away.

        With ``background=False`` no thread is spawned and the caller drives
        further ticks.
        """
        if self.is_polling:
            return
        self._stop_event = threading.Event()
        self.state = PollerState.POLLING
        logger.info("price_poller_started", extra={"interval_seconds": self.interval_seconds})
        if not background:
            self.tick()
            return
        self._thread = threading.Thread(target=self._run, args=(self._stop_event,), name="price-poller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if not self.is_polling:
            return
        self._stop_event.set()
        self.state = PollerState.IDLE
        logger.info("price_poller_stopped")

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def tick(self) -> bool:
        if not self.is_polling:
            return False
        return self._tick(self._stop_event)

    def _tick(self, stop_event: threading.Event) -> bool:
        if stop_event.is_set():
            return False
        started = perf_counter()
        try:
            value = self._fetch()
        except ApiError as exc:
            self.consecutive_failures += 1
            logger.warning(
                "price_poll_failed",
                extra={"code": exc.code, "status_code": exc.status_code, "failures": self.consecutive_failures},
            )
            self._record(EventCategory.PRICE_POLL, started, success=False, error_code=exc.code, trace_id=exc.trace_id)
            return False
        except Exception:  # noqa: BLE001
            self.consecutive_failures += 1
            logger.exception("price_poll_crashed", extra={"failures": self.consecutive_failures})
            self._record(EventCategory.ERROR, started, success=False, error_code="UNEXPECTED_ERROR")
            return False
        if stop_event.is_set():
            logger.debug("price_sample_discarded", extra={"reason": "stopped"})
            return False
        self.consecutive_failures = 0
        self._record(EventCategory.PRICE_POLL, started, success=True)
        self._dispatch(lambda: self._deliver(value, stop_event))
        return True

    def _record(
        self,
        category: EventCategory,
        started: float,
        *,
        success: bool,
        error_code: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        if self.telemetry is None:
            return
        self.telemetry.emit(
            build_event(
                category,
                "price_poll",
                success=success,
                duration_ms=int((perf_counter() - started) * 1000),
                error_code=error_code,
                trace_id=trace_id,
            )
        )

    def _deliver(self, value: float, stop_event: threading.Event) -> None:
        if stop_event.is_set():
            return
        self._on_sample(value)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self._tick(stop_event)
            if stop_event.wait(self.interval_seconds):
                break
