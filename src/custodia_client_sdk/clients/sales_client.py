from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..models import OrderKind, OrderRequest, OrderResult
from .base import BaseClient


@dataclass
class SalesClient(BaseClient):
    buy_url: str = ""
    sell_url: str = ""
    module: str = "sales"

    def submit_order(self, kind: OrderKind | str, payload: OrderRequest | Mapping[str, Any]) -> OrderResult:
        """POST a buy or sell intent.

        ``accepted=False`` comes back as a normal result; only transport and
        parse failures raise.
        """
        order_kind = OrderKind(kind)
        request = payload if isinstance(payload, OrderRequest) else OrderRequest.model_validate(payload)
        url = self.sell_url if order_kind is OrderKind.SELL else self.buy_url
        data = self._request(
            "POST",
            url,
            operation=f"submit_{order_kind.value}",
            json_body=request.to_wire(),
        )
        if not isinstance(data, dict):
            raise self._parse_error("Expected sales response to be a JSON object")
        try:
            return OrderResult.model_validate(data)
        except PydanticValidationError as exc:
            raise self._parse_error("Malformed sales response", details=exc.errors(include_url=False)) from exc
