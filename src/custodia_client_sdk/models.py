from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .exceptions import BusinessRejection


def _as_text(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


def _extra_value(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, sort_keys=True)
    return str(_as_text(value))


def _wire_keys(model: type[BaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
        choices = info.validation_alias
        if isinstance(choices, AliasChoices):
            keys.update(str(choice) for choice in choices.choices)
        elif isinstance(choices, str):
            keys.add(choices)
    return keys


class _ServiceRecord(BaseModel):
    """Closed record: declared fields plus an explicit ``extra_fields`` bag."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    extra_fields: dict[str, str | None] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_extra_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        wire_keys = _wire_keys(cls)
        known = {key: value for key, value in data.items() if key in wire_keys}
        extras = dict(data.get("extra_fields") or {})
        for key, value in data.items():
            if key not in wire_keys:
                extras[str(key)] = _extra_value(value)
        known["extra_fields"] = extras
        return known


class AccountBalance(_ServiceRecord):
    id: str
    name: str = ""
    lastname: str = ""
    btc_balance: str = Field(default="0", validation_alias=AliasChoices("BTCbalance", "btcBalance", "btc_balance"))
    cop_balance: str = Field(default="0", validation_alias=AliasChoices("COPbalance", "copBalance", "cop_balance"))
    yield_: str = Field(default="0", validation_alias=AliasChoices("yield", "yield_"))

    @field_validator("id", "name", "lastname", "btc_balance", "cop_balance", "yield_", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return "" if value is None else _as_text(value)

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.name, self.lastname) if part).strip()


class Movement(_ServiceRecord):
    id: str
    date: str = ""
    cop_balance_at_time: str = Field(
        default="", validation_alias=AliasChoices("copBalanceAtTime", "cop_balance_at_time")
    )
    btc_price_at_time: str = Field(default="", validation_alias=AliasChoices("btcPriceAtTime", "btc_price_at_time"))
    usd_price_at_time: str = Field(default="", validation_alias=AliasChoices("usdPriceAtTime", "usd_price_at_time"))
    total: str = ""
    operation_kind: str = Field(default="", validation_alias=AliasChoices("operationKind", "operation_kind"))

    @field_validator(
        "id",
        "date",
        "cop_balance_at_time",
        "btc_price_at_time",
        "usd_price_at_time",
        "total",
        "operation_kind",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return "" if value is None else _as_text(value)

    @property
    def is_purchase(self) -> bool:
        return self.operation_kind == "Compra"

    @property
    def is_sale(self) -> bool:
        return self.operation_kind == "Venta"


class OrderKind(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    cantidad: str
    numero_de_cuenta: str | None = Field(
        default=None,
        validation_alias=AliasChoices("numeroDeCuenta", "numero_de_cuenta"),
        serialization_alias="numeroDeCuenta",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OrderResult(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    accepted: bool = Field(validation_alias=AliasChoices("success", "accepted"))
    message: str | None = None

    def raise_for_rejection(self, kind: OrderKind | Literal["buy", "sell"] = OrderKind.BUY) -> None:
        if self.accepted:
            return
        label = OrderKind(kind).value
        raise BusinessRejection(
            code="ORDER_REJECTED",
            message=self.message or f"The {label} request was rejected",
            details={"kind": label},
            trace_id=None,
            status_code=200,
            raw_payload=self.model_dump(),
        )
