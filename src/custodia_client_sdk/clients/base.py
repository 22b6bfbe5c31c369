from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ParseError
from ..http_client import HttpClient

T = TypeVar("T", bound=BaseModel)


@dataclass
class BaseClient:
    http: HttpClient
    module: str = "custodia"

    def _request(self, method: str, url: str, *, operation: str, **kwargs: Any):
        return self.http.request(method, url, module=self.module, operation=operation, **kwargs)

    def _trace_id(self) -> str | None:
        last = self.http.last_operation
        return last.trace_id if last else None

    def _parse_error(self, message: str, details: object | None = None) -> ParseError:
        return ParseError(
            code="PARSE_ERROR",
            message=message,
            details=details,
            trace_id=self._trace_id(),
            status_code=200,
            raw_payload=None,
        )

    def _data_rows(self, payload: Any, *, what: str) -> Sequence[Any]:
        if not isinstance(payload, dict):
            raise self._parse_error(f"Expected {what} response to be a JSON object")
        rows = payload.get("data")
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise self._parse_error(f"Expected {what} 'data' to be a list")
        return rows

    def _validate_rows(self, rows: Sequence[Any], model: type[T], *, what: str) -> list[T]:
        parsed: list[T] = []
        for index, row in enumerate(rows):
            try:
                parsed.append(model.model_validate(row))
            except PydanticValidationError as exc:
                raise self._parse_error(
                    f"Malformed {what} record at index {index}",
                    details=exc.errors(include_url=False),
                ) from exc
        return parsed
