from __future__ import annotations

from dataclasses import dataclass

from ..models import Movement
from .base import BaseClient


@dataclass
class MovementsClient(BaseClient):
    url: str = ""
    module: str = "movements"

    def get_movements(self, account_id: str) -> list[Movement]:
        payload = self._request("GET", self.url, operation="get_movements", params={"id": account_id})
        rows = self._data_rows(payload, what="movements")
        return self._validate_rows(rows, Movement, what="movement")
