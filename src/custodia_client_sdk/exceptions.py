from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    """Base for every failure reported by the service clients."""

    code: str
    message: str
    details: object | None
    trace_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class TransportError(ApiError):
    pass


class NetworkError(TransportError):
    """No HTTP answer: DNS, connect, TLS or timeout. ``status_code`` is 0."""


class HttpStatusError(TransportError):
    pass


class NotFoundError(HttpStatusError):
    pass


class RateLimitError(HttpStatusError):
    pass


class ServerError(HttpStatusError):
    pass


class ParseError(ApiError):
    """A 2xx answer whose body is not JSON or not the expected shape."""


class BusinessRejection(ApiError):
    """The service understood the order and declined it."""
