from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import NetworkError, ParseError
from .tracing import TraceContext

JsonBody = dict[str, Any] | list[Any] | None


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    trace_id: str | None


@dataclass
class HttpClient:
    """JSON over ``requests`` with one attempt per call and fixed timeouts.

    Any answer outside 2xx is raised through ``map_error``; a 2xx whose body
    is not JSON raises ``ParseError``. Callers decide whether to try again.
    """

    config: ClientConfig
    trace: TraceContext | None = None
    session: requests.Session | None = None
    max_connections: int = 4
    last_operation: LastOperation | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = self._new_session()

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(pool_connections=self.max_connections, pool_maxsize=self.max_connections)
        for prefix in ("http://", "https://"):
            session.mount(prefix, adapter)
        return session

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.config.connect_timeout_seconds, self.config.read_timeout_seconds)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
    ) -> JsonBody:
        if self.session is None:
            raise RuntimeError("HTTP session not initialized")
        verb = method.upper()
        trace = self.trace or TraceContext()
        outgoing = {"Accept": "application/json", **(headers or {}), **trace.outgoing_headers()}
        started = time.monotonic()
        try:
            response = self.session.request(
                verb,
                url,
                headers=outgoing,
                json=json_body,
                params=params,
                timeout=self.timeout,
                verify=self.config.verify_ssl,
            )
        except requests.RequestException as exc:
            self._record(module, operation, started, "error", trace)
            raise NetworkError(
                code="NETWORK_ERROR",
                message=str(exc) or "Network error",
                details={"type": type(exc).__name__},
                trace_id=trace.trace_id,
                status_code=0,
            ) from exc

        try:
            if response.ok:
                body = self._success_body(response, trace)
            else:
                raise self._failure(response, trace)
        except Exception:
            self._record(module, operation, started, "error", trace)
            raise
        self._record(module, operation, started, "success", trace)
        return body

    def _success_body(self, response: requests.Response, trace: TraceContext) -> JsonBody:
        trace.adopt_from_response(response.headers)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(
                code="PARSE_ERROR",
                message="Response body is not valid JSON",
                details=response.text[:200],
                trace_id=trace.trace_id,
                status_code=response.status_code,
            ) from exc

    def _failure(self, response: requests.Response, trace: TraceContext) -> Exception:
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text} if response.text else None
        if not isinstance(payload, dict):
            payload = None
        trace.adopt_from_response(response.headers, payload)
        return map_error(response.status_code, payload, trace.trace_id)

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    def _record(self, module: str, operation: str, started: float, result: str, trace: TraceContext) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            trace_id=trace.trace_id,
        )
