from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional

from ..models.shop_models import Measurements
from .pricing import as_amount


_WHITESPACE = re.compile(r"\s+")
PLACEHOLDER = "-"


def format_currency(value: object, symbol: str) -> str:
    # Amounts keep their stored precision: 2500.0 prints as 2500, 99.5 as 99.5.
    amount = as_amount(value)
    if amount.is_integer():
        text = str(int(amount))
    else:
        text = repr(amount)
    return f"{symbol}{text}"


def format_date(value: Optional[date]) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:%b} {value.day}, {value.year}"


def format_timestamp(value: datetime) -> str:
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{format_date(value)} {hour}:{value.minute:02d} {meridiem}"


def file_timestamp(value: datetime) -> str:
    return value.strftime("%Y%m%d_%H%M")


def order_reference(order_id: Optional[str]) -> str:
    return f"#{short_order_id(order_id).upper()}"


def short_order_id(order_id: Optional[str]) -> str:
    return (order_id or "")[-6:]


def safe_file_component(value: str) -> str:
    return _WHITESPACE.sub("_", (value or "").strip())


def measurements_summary(measurements: Optional[Measurements]) -> str:
    parts: List[str] = []
    if measurements is not None:
        if (measurements.shirt or "").strip():
            parts.append("Shirt")
        if (measurements.pant or "").strip():
            parts.append("Pant")
        if measurements.others:
            parts.append(f"+{len(measurements.others)} Others")
    return ", ".join(parts) or "None"


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]
