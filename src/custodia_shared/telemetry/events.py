from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping


class EventCategory(str, Enum):
    LOOKUP = "lookup"
    API_CALL_RESULT = "api_call_result"
    ORDER = "order"
    PRICE_POLL = "price_poll"
    ERROR = "error"


TELEMETRY_CATEGORIES = frozenset(category.value for category in EventCategory)

# compared after lowercasing and dropping "_" and "-"
_PERSONAL_KEYS = frozenset(
    {
        "name",
        "lastname",
        "fullname",
        "email",
        "phone",
        "accountnumber",
        "numerodecuenta",
        "btcbalance",
        "copbalance",
        "token",
        "authorization",
    }
)


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


@dataclass(frozen=True)
class TelemetryEvent:
    """One finished action: what ran, how it ended and how long it took."""

    category: EventCategory
    action: str
    success: bool
    recorded_at: str
    duration_ms: int | None = None
    error_code: str | None = None
    trace_id: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def event_name(self) -> str:
        return f"{self.action}_{'succeeded' if self.success else 'failed'}"

    def as_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "category": self.category.value,
            "event": self.event_name,
            "action": self.action,
            "success": self.success,
            "recorded_at": self.recorded_at,
        }
        optional = {"duration_ms": self.duration_ms, "error_code": self.error_code, "trace_id": self.trace_id}
        record.update({key: value for key, value in optional.items() if value is not None})
        if self.attributes:
            record["attributes"] = dict(self.attributes)
        return record


def build_event(
    category: EventCategory | str,
    action: str,
    *,
    success: bool,
    duration_ms: int | None = None,
    error_code: str | None = None,
    trace_id: str | None = None,
    attributes: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> TelemetryEvent:
    try:
        resolved = EventCategory(category)
    except ValueError:
        raise ValueError(f"Unsupported telemetry category: {category}") from None
    leaked = sorted(key for key in attributes or {} if _normalize_key(str(key)) in _PERSONAL_KEYS)
    if leaked:
        raise ValueError(f"Personal data keys are forbidden in telemetry attributes: {leaked}")
    return TelemetryEvent(
        category=resolved,
        action=action,
        success=success,
        recorded_at=(now or datetime.now(timezone.utc)).isoformat(),
        duration_ms=duration_ms,
        error_code=error_code,
        trace_id=trace_id,
        attributes=dict(attributes or {}),
    )
