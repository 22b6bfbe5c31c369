from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from custodia_client_sdk.config import ClientConfig  # noqa: E402

BALANCES_URL = "https://balances.example.com/getDataById"
MOVEMENTS_URL = "https://movements.example.com/getMovementsById"
PRICE_URL = "https://prices.example.com/simple/price"
SALES_URL = "https://sales.example.com/intake"
SALES_SELL_URL = "https://sales.example.com/intake-sell"


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        env_name="test",
        balances_url=BALANCES_URL,
        movements_url=MOVEMENTS_URL,
        price_url=PRICE_URL,
        sales_buy_url=SALES_URL,
        sales_sell_url=SALES_SELL_URL,
        connect_timeout_seconds=1.0,
        read_timeout_seconds=1.0,
    )


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in (
        "CUSTODIA_ENV",
        "CUSTODIA_BALANCES_URL",
        "CUSTODIA_MOVEMENTS_URL",
        "CUSTODIA_PRICE_URL",
        "CUSTODIA_SALES_URL",
        "CUSTODIA_SALES_SELL_URL",
        "CUSTODIA_CONNECT_TIMEOUT_SECONDS",
        "CUSTODIA_READ_TIMEOUT_SECONDS",
        "CUSTODIA_VERIFY_SSL",
        "CUSTODIA_PRICE_ASSET",
        "CUSTODIA_PRICE_CURRENCY",
        "CUSTODIA_PRICE_POLL_SECONDS",
        "CUSTODIA_TELEMETRY_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)
    # keep load_dotenv() from picking up a developer .env
    monkeypatch.chdir(tmp_path)
