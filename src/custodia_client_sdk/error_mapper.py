from __future__ import annotations

from typing import Any, Mapping

from .exceptions import HttpStatusError, NotFoundError, RateLimitError, ServerError


def _status_family(status_code: int) -> type[HttpStatusError]:
    if status_code == 404:
        return NotFoundError
    if status_code == 429:
        return RateLimitError
    if status_code >= 500:
        return ServerError
    return HttpStatusError


def _first_text(payload: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def map_error(status_code: int, payload: Mapping[str, Any] | None, trace_id: str | None) -> HttpStatusError:
    """Build the ``HttpStatusError`` subclass for a non-2xx answer.

    Services answer errors with ad-hoc bodies; ``code``/``message``/``error`` and
    ``trace_id`` are read when present and the status line fills the rest.
    """
    body = dict(payload or {})
    error_cls = _status_family(status_code)
    return error_cls(
        code=_first_text(body, "code") or "HTTP_ERROR",
        message=_first_text(body, "message", "error") or f"HTTP error! Status: {status_code}",
        details=body.get("details"),
        trace_id=_first_text(body, "trace_id", "traceId") or trace_id,
        status_code=status_code,
        raw_payload=body,
    )
