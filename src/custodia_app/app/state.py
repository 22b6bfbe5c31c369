from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Sequence

from custodia_client_sdk.models import AccountBalance, Movement


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


class StateInvariantError(RuntimeError):
    pass


@dataclass(frozen=True)
class PriceHistory:
    current: float | None = None
    previous: float | None = None

    def shifted(self, value: float) -> "PriceHistory":
        return PriceHistory(current=value, previous=self.current)


@dataclass
class SessionState:
    account_id: str = ""
    balances: tuple[AccountBalance, ...] = ()
    movements: tuple[Movement, ...] = ()
    sort_order: SortOrder = SortOrder.ASC
    loading: bool = False
    error: str | None = None
    error_trace_id: str | None = None
    notice: str | None = None
    buy_form_open: bool = False
    sell_form_open: bool = False
    buy_amount: str = ""
    sell_amount: str = ""
    sell_account_number: str = ""
    price: PriceHistory = field(default_factory=PriceHistory)

    @property
    def has_balances(self) -> bool:
        return bool(self.balances)

    @property
    def has_movements(self) -> bool:
        return bool(self.movements)

    @property
    def primary_balance(self) -> AccountBalance | None:
        return self.balances[0] if self.balances else None


Listener = Callable[[SessionState], None]


class SessionStore:
    """Owns the session state; every mutation goes through a named operation."""

    def __init__(self, state: SessionState | None = None) -> None:
        self._state = state or SessionState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, **changes: object) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def set_account_id(self, account_id: str) -> None:
        self._apply(account_id=account_id)

    def set_balances(self, balances: Sequence[AccountBalance]) -> None:
        # movements always belong to the balances they were fetched after
        self._apply(balances=tuple(balances), movements=())

    def set_movements(self, movements: Sequence[Movement]) -> None:
        rows = tuple(movements)
        if rows and not self._state.balances:
            raise StateInvariantError("Movements require a loaded balance record")
        self._apply(movements=rows)

    def clear_movements(self) -> None:
        self._apply(movements=())

    def set_error(self, message: str | None, trace_id: str | None = None) -> None:
        self._apply(error=message, error_trace_id=trace_id if message else None)

    def clear_error(self) -> None:
        self._apply(error=None, error_trace_id=None)

    def set_notice(self, message: str | None) -> None:
        self._apply(notice=message)

    def set_loading(self, loading: bool) -> None:
        self._apply(loading=loading)

    def set_price_sample(self, value: float) -> None:
        self._apply(price=self._state.price.shifted(value))

    def set_sort_order(self, order: SortOrder, movements: Sequence[Movement] | None = None) -> None:
        changes: dict[str, object] = {"sort_order": SortOrder(order)}
        if movements is not None:
            changes["movements"] = tuple(movements)
        self._apply(**changes)

    def toggle_buy_form(self) -> None:
        opening = not self._state.buy_form_open
        self._apply(buy_form_open=opening, sell_form_open=False if opening else self._state.sell_form_open)

    def toggle_sell_form(self) -> None:
        opening = not self._state.sell_form_open
        self._apply(sell_form_open=opening, buy_form_open=False if opening else self._state.buy_form_open)

    def set_buy_amount(self, amount: str) -> None:
        self._apply(buy_amount=amount)

    def set_sell_fields(self, *, amount: str | None = None, account_number: str | None = None) -> None:
        changes: dict[str, object] = {}
        if amount is not None:
            changes["sell_amount"] = amount
        if account_number is not None:
            changes["sell_account_number"] = account_number
        if changes:
            self._apply(**changes)

    def finish_buy(self, notice: str) -> None:
        self._apply(buy_form_open=False, buy_amount="", notice=notice, error=None, error_trace_id=None)

    def finish_sell(self, notice: str) -> None:
        self._apply(
            sell_form_open=False,
            sell_amount="",
            sell_account_number="",
            notice=notice,
            error=None,
            error_trace_id=None,
        )
