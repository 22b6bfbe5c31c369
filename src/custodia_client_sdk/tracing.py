from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Mapping

TRACE_HEADER = "X-Trace-ID"
_PAYLOAD_KEYS = ("trace_id", "traceId")


def new_trace_id() -> str:
    return str(uuid.uuid4())


@dataclass
class TraceContext:
    """Trace id sent with every call and replaced by whatever the service echoes."""

    trace_id: str | None = None

    def ensure(self) -> str:
        if not self.trace_id:
            self.trace_id = new_trace_id()
        return self.trace_id

    def outgoing_headers(self) -> dict[str, str]:
        return {TRACE_HEADER: self.ensure()}

    def adopt(self, candidate: Any) -> bool:
        if isinstance(candidate, str) and candidate.strip():
            self.trace_id = candidate.strip()
            return True
        return False

    def adopt_from_response(self, headers: Mapping[str, str], payload: Any = None) -> None:
        # requests exposes headers case-insensitively
        if self.adopt(headers.get(TRACE_HEADER)):
            return
        if isinstance(payload, Mapping):
            for key in _PAYLOAD_KEYS:
                if self.adopt(payload.get(key)):
                    return
