"""Order totals and payment classification.

Every function here is pure. Malformed numbers count as zero so a total can
always be produced for whatever a form or a stored record contains.
"""

from __future__ import annotations

import math
from typing import Iterable

from ..models.shop_models import OrderLineItem, PaymentSummary


PAYMENT_PAID = "Paid"
PAYMENT_PARTIAL = "Partial"
PAYMENT_PENDING = "Pending"

PAYMENT_STATUSES = (PAYMENT_PAID, PAYMENT_PARTIAL, PAYMENT_PENDING)


def as_amount(value: object) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def compute_line_total(line: OrderLineItem) -> float:
    quantity = as_amount(getattr(line, "quantity", None))
    unit_cost = as_amount(getattr(line, "unit_cost", None))
    return quantity * unit_cost


def compute_total(lines: Iterable[OrderLineItem]) -> float:
    return sum((compute_line_total(line) for line in lines), 0.0)


def compute_balance(total: object, paid: object) -> float:
    return as_amount(total) - as_amount(paid)


def classify_payment_status(balance: object, paid: object) -> str:
    if as_amount(balance) <= 0:
        return PAYMENT_PAID
    if as_amount(paid) > 0:
        return PAYMENT_PARTIAL
    return PAYMENT_PENDING


def summarize_payment(lines: Iterable[OrderLineItem], paid: object) -> PaymentSummary:
    total = compute_total(lines)
    balance = compute_balance(total, paid)
    return PaymentSummary(
        total_amount=total,
        balance_amount=balance,
        payment_status=classify_payment_status(balance, paid),
    )
