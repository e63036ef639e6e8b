"""Display helpers shared by the templates."""
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from schemas import OrderStatus

SUCCESS_BANNER_MS = 3000

STATUS_COLORS = {
    OrderStatus.COMPLETED: "bg-green-100 text-green-800",
    OrderStatus.PENDING: "bg-yellow-100 text-yellow-800",
    OrderStatus.IN_PROGRESS: "bg-blue-100 text-blue-800",
    OrderStatus.CANCELLED: "bg-red-100 text-red-800",
}
UNKNOWN_STATUS_COLOR = "bg-gray-100 text-gray-800"


def status_color(status: Optional[str]) -> str:
    parsed = OrderStatus.parse(status)
    if parsed is None:
        return UNKNOWN_STATUS_COLOR
    return STATUS_COLORS[parsed]


def status_label(status: Optional[str], humanize: bool = False) -> str:
    # Custom orders only swap the first underscore.
    label = status or ""
    if humanize:
        label = label.replace("_", " ", 1)
    return label


def format_price(value: Union[int, float]) -> str:
    """Plain price as stored: ``$150`` or ``$149.99``."""
    value = float(value)
    if value.is_integer():
        return f"${int(value)}"
    return f"${Decimal(repr(value)):f}"


def format_money(value: Union[int, float]) -> str:
    return f"${float(value):.2f}"


def format_date(value: Union[datetime, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return f"{value:%B} {value.day}, {value:%Y}, {value:%I:%M %p}"


def short_id(value: str) -> str:
    return value[:8]


def install(env) -> None:
    """Register the helpers on a Jinja2 environment."""
    env.filters["price"] = format_price
    env.filters["money"] = format_money
    env.filters["date"] = format_date
    env.filters["short_id"] = short_id
    env.globals["status_color"] = status_color
    env.globals["status_label"] = status_label
    env.globals["banner_ms"] = SUCCESS_BANNER_MS
