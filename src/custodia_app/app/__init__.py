from .controller import ActionOutcome, WorkflowController
from .movement_sorter import parse_movement_date, sort_movements
from .price_poller import PollerState, PricePoller, Trend, price_trend
from .state import PriceHistory, SessionState, SessionStore, SortOrder, StateInvariantError

__all__ = [
    "ActionOutcome",
    "PollerState",
    "PriceHistory",
    "PricePoller",
    "SessionState",
    "SessionStore",
    "SortOrder",
    "StateInvariantError",
    "Trend",
    "WorkflowController",
    "parse_movement_date",
    "price_trend",
    "sort_movements",
]
