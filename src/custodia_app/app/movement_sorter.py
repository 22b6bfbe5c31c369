"""Date ordering for movement records.

Unparseable dates compare equal to each other and are always placed after
every parseable date, in both orders, keeping their original relative order.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from custodia_client_sdk.models import Movement

from .state import SortOrder

_DAY_FIRST_FORMATS = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
)


def parse_movement_date(value: str | None) -> datetime | None:
    if not value:
        return None
    raw = value.strip()
    if not raw:
        return None
    iso = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        for fmt in _DAY_FIRST_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def sort_movements(movements: Sequence[Movement], order: SortOrder | str = SortOrder.ASC) -> list[Movement]:
    direction = SortOrder(order)
    dated: list[tuple[datetime, Movement]] = []
    undated: list[Movement] = []
    for movement in movements:
        parsed = parse_movement_date(movement.date)
        if parsed is None:
            undated.append(movement)
        else:
            dated.append((parsed, movement))
    # sorted() keeps ties in input order even with reverse=True
    ordered = sorted(dated, key=lambda item: item[0], reverse=direction is SortOrder.DESC)
    return [movement for _, movement in ordered] + undated
