from __future__ import annotations

import logging
import threading
from enum import Enum
from functools import partial
from time import perf_counter
from typing import Any, Callable, TypeVar

from custodia_client_sdk import (
    ApiError,
    ClientConfig,
    ClientValidationError,
    OrderKind,
    OrderRequest,
    OrderResult,
    to_user_facing_error,
    validate_account_id,
    validate_buy_request,
    validate_sell_request,
)
from custodia_shared.telemetry import EventCategory, TelemetryLogger, build_event

from custodia_app.app.movement_sorter import sort_movements
from custodia_app.app.price_poller import Dispatcher, PricePoller, immediate_dispatch
from custodia_app.app.state import SessionStore
from custodia_app.services.gateway import Gateway, RemoteDataGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")

_VALIDATION_MESSAGES = {
    ("account_id", "is required"): "Enter an account ID.",
    ("amount", "is required"): "Enter an amount.",
    ("amount", "must be a number"): "The amount must be a number.",
    ("amount", "must be greater than 0"): "The amount must be greater than 0.",
    ("account_number", "is required"): "Enter the account number that will receive the funds.",
}
_NO_BALANCE_MESSAGE = "Look up an account first."
_UNEXPECTED_MESSAGE = "Unexpected error. Please try again."


class ActionOutcome(str, Enum):
    STARTED = "started"
    DONE = "done"
    BUSY = "busy"
    INVALID = "invalid"
    IGNORED = "ignored"


class WorkflowController:
    """Runs the user actions of a session against the gateway and the store.

    Network calls run on worker threads; their completions are handed back via
    ``dispatch`` so the store is only mutated on the control thread.
    """

    def __init__(
        self,
        gateway: Gateway,
        store: SessionStore | None = None,
        *,
        dispatch: Dispatcher = immediate_dispatch,
        telemetry: TelemetryLogger | None = None,
        price_asset: str = "bitcoin",
        price_currency: str = "cop",
        poll_interval_seconds: float = 10.0,
    ) -> None:
        self.gateway = gateway
        self.store = store or SessionStore()
        self._dispatch = dispatch
        self.telemetry = telemetry or TelemetryLogger(app_name="custodia_app")
        self.price_asset = price_asset
        self.price_currency = price_currency
        self.poller = PricePoller(
            fetch=lambda: self.gateway.fetch_spot_price(self.price_asset, self.price_currency),
            on_sample=self.store.set_price_sample,
            interval_seconds=poll_interval_seconds,
            dispatch=dispatch,
            telemetry=self.telemetry,
        )
        self._closed = False
        self._workers = 0
        self._workers_done = threading.Condition()

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        dispatch: Dispatcher = immediate_dispatch,
        telemetry: TelemetryLogger | None = None,
    ) -> "WorkflowController":
        return cls(
            RemoteDataGateway(config),
            dispatch=dispatch,
            telemetry=telemetry,
            price_asset=config.price_asset,
            price_currency=config.price_currency,
            poll_interval_seconds=config.price_poll_seconds,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self.poller.start()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.poller.stop()
        logger.info("session_closed")

    def wait_for_workers(self, timeout: float | None = None) -> bool:
        """Block until no action is in flight; False if ``timeout`` ran out first."""
        with self._workers_done:
            return self._workers_done.wait_for(lambda: self._workers == 0, timeout)

    def submit_lookup(self, account_id: str) -> ActionOutcome:
        if self.store.state.loading:
            return ActionOutcome.BUSY
        try:
            normalized = validate_account_id(account_id)
        except ClientValidationError as exc:
            return self._reject(exc)
        self.store.clear_movements()
        self.store.clear_error()
        self.store.set_notice(None)
        logger.info("lookup_attempt", extra={"account_id": normalized})
        return self._run(
            action="lookup",
            category=EventCategory.LOOKUP,
            call=partial(self.gateway.fetch_balances, normalized),
            on_success=partial(self._apply_lookup, normalized),
        )

    def request_movements(self) -> ActionOutcome:
        state = self.store.state
        if state.loading:
            return ActionOutcome.BUSY
        if not state.has_balances:
            self.store.set_error(_NO_BALANCE_MESSAGE)
            return ActionOutcome.INVALID
        self.store.clear_error()
        return self._run(
            action="movements",
            category=EventCategory.API_CALL_RESULT,
            call=partial(self.gateway.fetch_movements, state.account_id),
            on_success=self._apply_movements,
        )

    def submit_buy(self, amount: str | None = None) -> ActionOutcome:
        state = self.store.state
        if state.loading:
            return ActionOutcome.BUSY
        raw_amount = state.buy_amount if amount is None else amount
        balance = state.primary_balance
        if balance is None:
            self.store.set_error(_NO_BALANCE_MESSAGE)
            return ActionOutcome.INVALID
        try:
            cantidad = validate_buy_request(raw_amount)
        except ClientValidationError as exc:
            return self._reject(exc)
        request = OrderRequest(id=balance.id, name=balance.name, cantidad=cantidad)
        self.store.clear_error()
        self.store.set_notice(None)
        return self._run(
            action="buy",
            category=EventCategory.ORDER,
            call=partial(self._submit_order, OrderKind.BUY, request),
            on_success=self._apply_buy,
        )

    def submit_sell(self, amount: str | None = None, account_number: str | None = None) -> ActionOutcome:
        state = self.store.state
        if state.loading:
            return ActionOutcome.BUSY
        raw_amount = state.sell_amount if amount is None else amount
        raw_account = state.sell_account_number if account_number is None else account_number
        balance = state.primary_balance
        if balance is None:
            self.store.set_error(_NO_BALANCE_MESSAGE)
            return ActionOutcome.INVALID
        try:
            cantidad, numero_de_cuenta = validate_sell_request(raw_amount, raw_account)
        except ClientValidationError as exc:
            return self._reject(exc)
        request = OrderRequest(
            id=balance.id,
            name=balance.name,
            cantidad=cantidad,
            numero_de_cuenta=numero_de_cuenta,
        )
        self.store.clear_error()
        self.store.set_notice(None)
        return self._run(
            action="sell",
            category=EventCategory.ORDER,
            call=partial(self._submit_order, OrderKind.SELL, request),
            on_success=self._apply_sell,
        )

    def toggle_sort(self) -> ActionOutcome:
        state = self.store.state
        if state.loading:
            return ActionOutcome.BUSY
        if not state.has_movements:
            return ActionOutcome.IGNORED
        order = state.sort_order.flipped()
        self.store.set_sort_order(order, sort_movements(state.movements, order))
        return ActionOutcome.DONE

    def toggle_buy_form(self) -> None:
        self.store.set_notice(None)
        self.store.toggle_buy_form()

    def toggle_sell_form(self) -> None:
        self.store.set_notice(None)
        self.store.toggle_sell_form()

    def _submit_order(self, kind: OrderKind, request: OrderRequest) -> OrderResult:
        result = self.gateway.submit_order(kind, request)
        result.raise_for_rejection(kind)
        return result

    def _apply_lookup(self, account_id: str, balances: list[Any]) -> None:
        self.store.set_account_id(account_id)
        self.store.set_balances(balances)
        logger.info("lookup_success", extra={"account_id": account_id, "rows": len(balances)})

    def _apply_movements(self, movements: list[Any]) -> None:
        self.store.set_movements(sort_movements(movements, self.store.state.sort_order))

    def _apply_buy(self, result: OrderResult) -> None:
        self.store.finish_buy(result.message or "Buy request sent.")

    def _apply_sell(self, result: OrderResult) -> None:
        self.store.finish_sell(result.message or "Sell request sent.")

    def _reject(self, exc: ClientValidationError) -> ActionOutcome:
        issue = exc.issues[0] if exc.issues else None
        message = str(exc)
        if issue is not None:
            message = _VALIDATION_MESSAGES.get((issue.field, issue.reason), message)
        self.store.set_error(message)
        return ActionOutcome.INVALID

    def _run(
        self,
        *,
        action: str,
        category: EventCategory,
        call: Callable[[], T],
        on_success: Callable[[T], None],
    ) -> ActionOutcome:
        self.store.set_loading(True)
        started = perf_counter()

        def worker() -> None:
            try:
                result = call()
            except ApiError as exc:
                done = partial(self._finish_failure, action, category, exc, started)
            except Exception as exc:  # noqa: BLE001
                logger.exception("action_crashed", extra={"action": action})
                done = partial(self._finish_failure, action, category, exc, started)
            else:
                done = partial(self._finish_success, action, category, on_success, result, started)
            try:
                self._hand_off(action, done)
            finally:
                with self._workers_done:
                    self._workers -= 1
                    self._workers_done.notify_all()

        with self._workers_done:
            self._workers += 1
        threading.Thread(target=worker, daemon=True).start()
        return ActionOutcome.STARTED

    def _hand_off(self, action: str, callback: Callable[[], None]) -> None:
        # once closed the dispatcher may already be torn down
        if self._closed:
            logger.info("result_discarded", extra={"action": action})
            return
        self._dispatch(callback)

    def _finish_success(
        self,
        action: str,
        category: EventCategory,
        on_success: Callable[[Any], None],
        result: Any,
        started: float,
    ) -> None:
        if self._closed:
            logger.info("result_discarded", extra={"action": action})
            return
        self.store.set_loading(False)
        on_success(result)
        self._emit(category, action, started, success=True)

    def _finish_failure(self, action: str, category: EventCategory, exc: Exception, started: float) -> None:
        if self._closed:
            logger.info("result_discarded", extra={"action": action})
            return
        self.store.set_loading(False)
        if isinstance(exc, ApiError):
            user_error = to_user_facing_error(exc)
            logger.warning(
                "action_failed",
                extra={"action": action, "code": exc.code, "details": user_error.technical_details},
            )
            self.store.set_error(user_error.message, user_error.trace_id)
            self._emit(category, action, started, success=False, error_code=exc.code, trace_id=exc.trace_id)
        else:
            self.store.set_error(_UNEXPECTED_MESSAGE)
            self._emit(EventCategory.ERROR, action, started, success=False, error_code="UNEXPECTED_ERROR")

    def _emit(
        self,
        category: EventCategory,
        action: str,
        started: float,
        *,
        success: bool,
        error_code: str | None = None,
        trace_id: str | None = None,
    ) -> None:
        event = build_event(
            category,
            action,
            success=success,
            duration_ms=int((perf_counter() - started) * 1000),
            error_code=error_code,
            trace_id=trace_id,
        )
        self.telemetry.emit(event)
