from .balances_client import BalancesClient
from .movements_client import MovementsClient
from .price_client import PriceClient
from .sales_client import SalesClient

__all__ = ["BalancesClient", "MovementsClient", "PriceClient", "SalesClient"]
