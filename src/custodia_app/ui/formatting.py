from __future__ import annotations

from decimal import Decimal, InvalidOperation

from custodia_app.app.price_poller import Trend

TREND_COLORS = {
    Trend.UP: "#00cc00",
    Trend.DOWN: "#ff5555",
    Trend.NEUTRAL: "#ffffff",
}


def _to_decimal(value: str | float | None) -> Decimal | None:
    if value is None:
        return None
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def format_btc(value: str | float | None) -> str:
    parsed = _to_decimal(value)
    if parsed is None:
        return "NaN BTC"
    return f"{parsed:.8f} BTC"


def format_cop(value: str | float | None) -> str:
    parsed = _to_decimal(value)
    if parsed is None:
        return f"${value or ''} COP"
    if parsed == parsed.to_integral_value():
        return f"${parsed:,.0f} COP"
    return f"${parsed:,.2f} COP"


def format_price(value: float | None, currency: str = "cop") -> str:
    if value is None:
        return "--"
    return f"{value:,.2f} {currency.upper()}"


def format_yield(value: str | None) -> str:
    parsed = _to_decimal(value)
    if parsed is None:
        return value or "-"
    return f"{parsed:.2f}%"


def trend_color(trend: Trend) -> str:
    return TREND_COLORS[trend]


def operation_label(kind: str) -> str:
    if kind == "Compra":
        return "Buy"
    if kind == "Venta":
        return "Sell"
    return kind or "-"
