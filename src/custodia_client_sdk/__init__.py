from .clients import BalancesClient, MovementsClient, PriceClient, SalesClient
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    BusinessRejection,
    HttpStatusError,
    NetworkError,
    NotFoundError,
    ParseError,
    RateLimitError,
    ServerError,
    TransportError,
)
from .http_client import HttpClient
from .models import AccountBalance, Movement, OrderKind, OrderRequest, OrderResult
from .order_validation import (
    ClientValidationError,
    ValidationIssue,
    validate_account_id,
    validate_buy_request,
    validate_sell_request,
)
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "AccountBalance",
    "ApiError",
    "BalancesClient",
    "BusinessRejection",
    "ClientConfig",
    "ClientValidationError",
    "ConfigError",
    "HttpClient",
    "HttpStatusError",
    "Movement",
    "MovementsClient",
    "NetworkError",
    "NotFoundError",
    "OrderKind",
    "OrderRequest",
    "OrderResult",
    "ParseError",
    "PriceClient",
    "RateLimitError",
    "SalesClient",
    "ServerError",
    "TraceContext",
    "TransportError",
    "UserFacingError",
    "ValidationIssue",
    "load_config",
    "to_user_facing_error",
    "validate_account_id",
    "validate_buy_request",
    "validate_sell_request",
]
