from __future__ import annotations

from dataclasses import dataclass

from ..models import AccountBalance
from .base import BaseClient


@dataclass
class BalancesClient(BaseClient):
    url: str = ""
    module: str = "balances"

    def get_balances(self, account_id: str) -> list[AccountBalance]:
        payload = self._request("GET", self.url, operation="get_balances", params={"id": account_id})
        rows = self._data_rows(payload, what="balances")
        return self._validate_rows(rows, AccountBalance, what="balance")
