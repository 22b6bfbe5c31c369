"""What each panel of the main window should show for a given session state."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from custodia_app.app.state import SessionState, SortOrder

EMPTY_BALANCES_MESSAGE = "No balances found. Enter an ID to fetch."
EMPTY_MOVEMENTS_MESSAGE = "No movements loaded."
LOADING_MESSAGE = "Loading..."


class PanelStatus(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"
    # an error is shown while earlier rows stay on screen
    STALE = "stale"
    ERROR = "error"


@dataclass(frozen=True)
class PanelView:
    status: PanelStatus
    message: str | None = None
    trace_id: str | None = None

    @property
    def shows_rows(self) -> bool:
        return self.status in {PanelStatus.READY, PanelStatus.STALE, PanelStatus.LOADING}

    @property
    def status_line(self) -> str:
        if self.status in {PanelStatus.LOADING, PanelStatus.EMPTY}:
            return self.message or ""
        return ""


def _panel(state: SessionState, has_rows: bool, empty_message: str) -> PanelView:
    if state.loading:
        return PanelView(PanelStatus.LOADING, LOADING_MESSAGE)
    if state.error:
        status = PanelStatus.STALE if has_rows else PanelStatus.ERROR
        return PanelView(status, state.error, state.error_trace_id)
    if not has_rows:
        return PanelView(PanelStatus.EMPTY, empty_message)
    return PanelView(PanelStatus.READY)


def balance_panel(state: SessionState) -> PanelView:
    return _panel(state, state.has_balances, EMPTY_BALANCES_MESSAGE)


def movements_panel(state: SessionState) -> PanelView:
    return _panel(state, state.has_movements, EMPTY_MOVEMENTS_MESSAGE)


def error_banner(state: SessionState) -> str:
    if not state.error:
        return ""
    if state.error_trace_id:
        return f"{state.error}\ntrace_id: {state.error_trace_id}"
    return state.error


def sort_button_label(order: SortOrder) -> str:
    return "Sort: oldest first" if order is SortOrder.ASC else "Sort: newest first"


def can_request_movements(state: SessionState) -> bool:
    return state.has_balances and not state.loading


def can_toggle_sort(state: SessionState) -> bool:
    return state.has_movements and not state.loading


def can_open_order_forms(state: SessionState) -> bool:
    return state.has_balances and not state.loading
