from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BALANCES_URL = "https://us-central1-rendimientos-5dbb9.cloudfunctions.net/getDataById"
DEFAULT_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    balances_url: str
    movements_url: str
    price_url: str
    sales_buy_url: str
    sales_sell_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    verify_ssl: bool = True
    price_asset: str = "bitcoin"
    price_currency: str = "cop"
    price_poll_seconds: float = 10.0


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_text(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_positive(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from None
    if not value > 0:
        raise ConfigError(f"Invalid {name}: expected > 0, got {value}")
    return value


def _env_required(*names: str) -> dict[str, str]:
    found = {name: _env_text(name) for name in names}
    missing = [name for name, value in found.items() if not value]
    if missing:
        raise ConfigError(f"Missing required config values: {', '.join(missing)}")
    return found


def load_config(env_file: str | None = None) -> ClientConfig:
    """Read ``CUSTODIA_*`` settings, after loading ``env_file`` (or a found ``.env``).

    Variables already set in the process environment win over the file.
    """
    load_dotenv(env_file)
    required = _env_required("CUSTODIA_MOVEMENTS_URL", "CUSTODIA_SALES_URL")
    sales_buy_url = required["CUSTODIA_SALES_URL"]

    price_asset = _env_text("CUSTODIA_PRICE_ASSET", "bitcoin").lower()
    price_currency = _env_text("CUSTODIA_PRICE_CURRENCY", "cop").lower()

    return ClientConfig(
        env_name=_env_text("CUSTODIA_ENV", "dev"),
        balances_url=_env_text("CUSTODIA_BALANCES_URL", DEFAULT_BALANCES_URL),
        movements_url=required["CUSTODIA_MOVEMENTS_URL"],
        price_url=_env_text("CUSTODIA_PRICE_URL", DEFAULT_PRICE_URL),
        sales_buy_url=sales_buy_url,
        sales_sell_url=_env_text("CUSTODIA_SALES_SELL_URL") or sales_buy_url,
        connect_timeout_seconds=_env_positive("CUSTODIA_CONNECT_TIMEOUT_SECONDS", 5.0),
        read_timeout_seconds=_env_positive("CUSTODIA_READ_TIMEOUT_SECONDS", 15.0),
        verify_ssl=_env_flag("CUSTODIA_VERIFY_SSL", True),
        price_asset=price_asset,
        price_currency=price_currency,
        price_poll_seconds=_env_positive("CUSTODIA_PRICE_POLL_SECONDS", 10.0),
    )
