from __future__ import annotations

from typing import Iterable, List

from ..models.shop_models import Customer, Order


ALL_STATUSES = "All"


def search_customers(customers: Iterable[Customer], term: str) -> List[Customer]:
    needle = (term or "").strip().lower()
    if not needle:
        return list(customers)
    return [
        customer
        for customer in customers
        if needle in customer.name.lower()
        or needle in customer.reference_name.lower()
        or needle in customer.phone
    ]


def filter_orders(orders: Iterable[Order], term: str, status: str = ALL_STATUSES) -> List[Order]:
    needle = (term or "").strip().lower()
    results: List[Order] = []
    for order in orders:
        matches_search = not needle or needle in order.customer_name.lower() or needle in order.phone
        matches_status = status == ALL_STATUSES or order.status == status
        if matches_search and matches_status:
            results.append(order)
    return results
