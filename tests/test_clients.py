from __future__ import annotations

import pytest
import requests
import responses
from responses import matchers

from custodia_client_sdk.clients import BalancesClient, MovementsClient, PriceClient, SalesClient
from custodia_client_sdk.exceptions import NetworkError, NotFoundError, ParseError, ServerError
from custodia_client_sdk.http_client import HttpClient
from custodia_client_sdk.models import OrderKind, OrderRequest


def _http(config) -> HttpClient:
    return HttpClient(config)


@responses.activate
def test_get_balances_parses_rows(config) -> None:
    responses.add(
        responses.GET,
        config.balances_url,
        json={"data": [{"id": "123", "name": "Ana", "lastname": "Diaz", "BTCbalance": 0.5, "COPbalance": 2000000, "yield": 1.2}]},
        status=200,
        match=[matchers.query_param_matcher({"id": "123"})],
    )
    client = BalancesClient(http=_http(config), url=config.balances_url)

    balances = client.get_balances("123")

    assert len(balances) == 1
    assert balances[0].name == "Ana"
    assert balances[0].btc_balance == "0.5"


@responses.activate
def test_get_balances_missing_data_means_no_rows(config) -> None:
    responses.add(responses.GET, config.balances_url, json={"status": "ok"}, status=200)
    client = BalancesClient(http=_http(config), url=config.balances_url)

    assert client.get_balances("404") == []


@responses.activate
def test_get_balances_wrong_shape_raises_parse_error(config) -> None:
    responses.add(responses.GET, config.balances_url, json={"data": {"id": "1"}}, status=200)
    client = BalancesClient(http=_http(config), url=config.balances_url)

    with pytest.raises(ParseError, match="'data' to be a list"):
        client.get_balances("1")


@responses.activate
def test_get_balances_malformed_record_raises_parse_error(config) -> None:
    responses.add(responses.GET, config.balances_url, json={"data": [{"name": "no id"}]}, status=200)
    client = BalancesClient(http=_http(config), url=config.balances_url)

    with pytest.raises(ParseError) as excinfo:
        client.get_balances("1")

    assert "index 0" in excinfo.value.message
    assert excinfo.value.details


@responses.activate
def test_get_balances_http_error(config) -> None:
    responses.add(responses.GET, config.balances_url, json={"message": "unknown id"}, status=404)
    client = BalancesClient(http=_http(config), url=config.balances_url)

    with pytest.raises(NotFoundError, match="unknown id"):
        client.get_balances("999")


@responses.activate
def test_get_movements(config) -> None:
    responses.add(
        responses.GET,
        config.movements_url,
        json={
            "data": [
                {"id": "m1", "date": "2024-01-02", "operationKind": "Compra", "total": 0.001},
                {"id": "m2", "date": "2024-01-01", "operationKind": "Venta", "total": 0.002},
            ]
        },
        status=200,
        match=[matchers.query_param_matcher({"id": "123"})],
    )
    client = MovementsClient(http=_http(config), url=config.movements_url)

    movements = client.get_movements("123")

    assert [movement.id for movement in movements] == ["m1", "m2"]
    assert movements[0].total == "0.001"
    assert movements[1].is_sale


@responses.activate
def test_get_movements_network_error(config) -> None:
    responses.add(responses.GET, config.movements_url, body=requests.exceptions.ConnectionError("refused"))
    client = MovementsClient(http=_http(config), url=config.movements_url)

    with pytest.raises(NetworkError):
        client.get_movements("123")


@responses.activate
def test_get_spot_price(config) -> None:
    responses.add(
        responses.GET,
        config.price_url,
        json={"bitcoin": {"cop": 250000000}},
        status=200,
        match=[matchers.query_param_matcher({"ids": "bitcoin", "vs_currencies": "cop"})],
    )
    client = PriceClient(http=_http(config), url=config.price_url)

    assert client.get_spot_price("bitcoin", "cop") == 250000000.0


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"bitcoin": None},
        {"bitcoin": {"usd": 64000}},
        {"bitcoin": {"cop": "250000000"}},
        {"bitcoin": {"cop": True}},
        [1, 2],
    ],
)
@responses.activate
def test_get_spot_price_rejects_unexpected_payloads(config, payload) -> None:
    responses.add(responses.GET, config.price_url, json=payload, status=200)
    client = PriceClient(http=_http(config), url=config.price_url)

    with pytest.raises(ParseError):
        client.get_spot_price("bitcoin", "cop")


@responses.activate
def test_submit_buy_posts_to_buy_url(config) -> None:
    responses.add(
        responses.POST,
        config.sales_buy_url,
        json={"success": True, "message": "queued"},
        status=200,
        match=[matchers.json_params_matcher({"id": "123", "name": "Ana", "cantidad": "0.001"})],
    )
    client = SalesClient(http=_http(config), buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    result = client.submit_order(OrderKind.BUY, OrderRequest(id="123", name="Ana", cantidad="0.001"))

    assert result.accepted is True
    assert result.message == "queued"


@responses.activate
def test_submit_sell_posts_account_number_to_sell_url(config) -> None:
    responses.add(
        responses.POST,
        config.sales_sell_url,
        json={"success": True},
        status=200,
        match=[
            matchers.json_params_matcher(
                {"id": "123", "name": "Ana", "cantidad": "0.01", "numeroDeCuenta": "987654"}
            )
        ],
    )
    client = SalesClient(http=_http(config), buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    result = client.submit_order(
        "sell", {"id": "123", "name": "Ana", "cantidad": "0.01", "numeroDeCuenta": "987654"}
    )

    assert result.accepted is True


@responses.activate
def test_submit_order_rejection_is_returned_not_raised(config) -> None:
    responses.add(responses.POST, config.sales_buy_url, json={"success": False, "message": "limit reached"}, status=200)
    client = SalesClient(http=_http(config), buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    result = client.submit_order(OrderKind.BUY, OrderRequest(id="1", name="Ana", cantidad="1"))

    assert result.accepted is False
    assert result.message == "limit reached"


@responses.activate
def test_submit_order_without_flag_raises_parse_error(config) -> None:
    responses.add(responses.POST, config.sales_buy_url, json={"message": "ok"}, status=200)
    client = SalesClient(http=_http(config), buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    with pytest.raises(ParseError, match="Malformed sales response"):
        client.submit_order(OrderKind.BUY, OrderRequest(id="1", name="Ana", cantidad="1"))


@responses.activate
def test_submit_order_server_error(config) -> None:
    responses.add(responses.POST, config.sales_buy_url, body="upstream down", status=503)
    client = SalesClient(http=_http(config), buy_url=config.sales_buy_url, sell_url=config.sales_sell_url)

    with pytest.raises(ServerError) as excinfo:
        client.submit_order(OrderKind.BUY, OrderRequest(id="1", name="Ana", cantidad="1"))

    assert excinfo.value.message == "upstream down"
    assert len(responses.calls) == 1
