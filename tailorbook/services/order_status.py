from __future__ import annotations

from dataclasses import replace
from typing import List

from ..models.shop_models import Order
from .errors import ValidationError


STATUS_PENDING = "Pending"
STATUS_PARTIALLY_COMPLETED = "Partially Completed"
STATUS_COMPLETED = "Completed"
STATUS_DELIVERED = "Delivered"

_ORDER_STATUSES: List[str] = [
    STATUS_PENDING,
    STATUS_PARTIALLY_COMPLETED,
    STATUS_COMPLETED,
    STATUS_DELIVERED,
]

_INACTIVE_STATUSES = {STATUS_COMPLETED, STATUS_DELIVERED}


def list_order_statuses() -> List[str]:
    return list(_ORDER_STATUSES)


def normalize_status(status: str) -> str:
    candidate = (status or "").strip()
    if not candidate:
        return _ORDER_STATUSES[0]

    candidate_lower = candidate.lower()
    for option in _ORDER_STATUSES:
        if candidate_lower == option.lower():
            return option

    raise ValidationError(f"Unknown order status: {candidate}")


def change_status(order: Order, status: str) -> Order:
    # Workflow state is set by hand; every state may follow every other.
    return replace(order, status=normalize_status(status))


def is_active(status: str) -> bool:
    return status not in _INACTIVE_STATUSES


def is_delivered(status: str) -> bool:
    return status == STATUS_DELIVERED
