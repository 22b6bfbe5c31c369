from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from custodia_client_sdk import (
    AccountBalance,
    BalancesClient,
    ClientConfig,
    HttpClient,
    Movement,
    MovementsClient,
    OrderKind,
    OrderRequest,
    OrderResult,
    PriceClient,
    SalesClient,
)

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    def fetch_balances(self, account_id: str) -> list[AccountBalance]: ...

    def fetch_movements(self, account_id: str) -> list[Movement]: ...

    def fetch_spot_price(self, asset: str, currency: str) -> float: ...

    def submit_order(self, kind: OrderKind, payload: OrderRequest | Mapping[str, Any]) -> OrderResult: ...


class RemoteDataGateway:
    """Typed access to the balance, movements, price and sales services."""

    def __init__(
        self,
        config: ClientConfig,
        http: HttpClient | None = None,
        price_http: HttpClient | None = None,
    ) -> None:
        self.config = config
        self.http = http or HttpClient(config=config)
        # the poller thread gets its own connection pool
        self.price_http = price_http or HttpClient(config=config)
        self.balances = BalancesClient(http=self.http, url=config.balances_url)
        self.movements = MovementsClient(http=self.http, url=config.movements_url)
        self.prices = PriceClient(http=self.price_http, url=config.price_url)
        self.sales = SalesClient(http=self.http, buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    def fetch_balances(self, account_id: str) -> list[AccountBalance]:
        logger.info("fetch_balances", extra={"account_id": account_id})
        return self.balances.get_balances(account_id)

    def fetch_movements(self, account_id: str) -> list[Movement]:
        logger.info("fetch_movements", extra={"account_id": account_id})
        return self.movements.get_movements(account_id)

    def fetch_spot_price(self, asset: str, currency: str) -> float:
        return self.prices.get_spot_price(asset, currency)

    def submit_order(self, kind: OrderKind, payload: OrderRequest | Mapping[str, Any]) -> OrderResult:
        logger.info("submit_order", extra={"kind": OrderKind(kind).value})
        return self.sales.submit_order(kind, payload)

    def close(self) -> None:
        self.http.close()
        if self.price_http is not self.http:
            self.price_http.close()
