from __future__ import annotations

import math
from dataclasses import dataclass

from .base import BaseClient


@dataclass
class PriceClient(BaseClient):
    url: str = ""
    module: str = "price"

    def get_spot_price(self, asset: str, currency: str) -> float:
        payload = self._request(
            "GET",
            self.url,
            operation="get_spot_price",
            params={"ids": asset, "vs_currencies": currency},
        )
        if not isinstance(payload, dict):
            raise self._parse_error("Expected price response to be a JSON object")
        quotes = payload.get(asset)
        if not isinstance(quotes, dict):
            raise self._parse_error(f"Price response has no quote for {asset!r}")
        value = quotes.get(currency)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._parse_error(f"Price response has no numeric {asset}/{currency} value", details=value)
        price = float(value)
        if not math.isfinite(price):
            raise self._parse_error(f"Price response has a non-finite {asset}/{currency} value", details=value)
        return price
