from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, List, Mapping, Optional
from uuid import uuid4

from ..data import order_repository, settings_repository
from ..models.shop_models import (
    AppSettings,
    Customer,
    CustomLineDraft,
    DashboardSnapshot,
    Order,
    OrderLineItem,
    PredefinedLineDraft,
)
from . import pricing
from .collection_feed import CollectionFeed
from .errors import PersistenceError, RecordNotFoundError, ValidationError
from .line_composer import compose_line_items
from .order_status import is_active, is_delivered, list_order_statuses, normalize_status
from .session import Session, require_session


_RECENT_ORDER_COUNT = 5

logger = logging.getLogger(__name__)

order_feed: CollectionFeed[Order] = CollectionFeed("orders")


def build_order(
    customer: Optional[Customer],
    predefined: Mapping[str, PredefinedLineDraft],
    custom_lines: Iterable[CustomLineDraft],
    *,
    due_date: Optional[date],
    status: str,
    paid_amount: float,
    shirts_completed: int = 0,
    pants_completed: int = 0,
    existing: Optional[Order] = None,
) -> Order:
    """Assemble a draft order from the order form.

    A new order snapshots the customer's name and phone. An edited order keeps
    the snapshot it was created with unless a different customer is chosen.
    """
    if customer is None or not customer.id:
        if existing is None:
            raise ValidationError("Please select a customer")
        customer_id = existing.customer_id
        customer_name = existing.customer_name
        phone = existing.phone
    elif existing is not None and existing.customer_id == customer.id:
        customer_id = existing.customer_id
        customer_name = existing.customer_name
        phone = existing.phone
    else:
        customer_id = customer.id
        customer_name = customer.name
        phone = customer.phone

    return Order(
        id=existing.id if existing is not None else None,
        customer_id=customer_id,
        customer_name=customer_name,
        phone=phone,
        items=compose_line_items(predefined, custom_lines),
        due_date=due_date,
        status=status,
        paid_amount=paid_amount,
        shirts_completed=max(0, int(shirts_completed)),
        pants_completed=max(0, int(pants_completed)),
        created_at=existing.created_at if existing is not None else None,
    )


def finalize_order(draft: Order, *, now: Optional[datetime] = None) -> Order:
    """Validate a draft and attach the computed payment values.

    Pure: the returned order is ready to persist but nothing is written.
    """
    if not (draft.customer_id or "").strip() or not (draft.customer_name or "").strip():
        raise ValidationError("Please select a customer")
    if not draft.items:
        raise ValidationError("Please add at least one item")

    items = [_normalize_item(item) for item in draft.items]
    timestamp = now or datetime.now()
    summary = pricing.summarize_payment(items, draft.paid_amount)
    return replace(
        draft,
        items=items,
        status=normalize_status(draft.status),
        paid_amount=pricing.as_amount(draft.paid_amount),
        total_amount=summary.total_amount,
        balance_amount=summary.balance_amount,
        payment_status=summary.payment_status,
        created_at=draft.created_at or timestamp,
        updated_at=timestamp,
    )


def refresh_order(order: Order) -> Order:
    """Recompute the derived payment values, ignoring the stored cache."""
    summary = pricing.summarize_payment(order.items, order.paid_amount)
    if (
        summary.payment_status != order.payment_status
        or summary.total_amount != order.total_amount
        or summary.balance_amount != order.balance_amount
    ):
        logger.debug(
            "Order %s cached payment values are stale (%s/%s/%s); using recomputed %s/%s/%s",
            order.id,
            order.total_amount,
            order.balance_amount,
            order.payment_status,
            summary.total_amount,
            summary.balance_amount,
            summary.payment_status,
        )
    return replace(
        order,
        total_amount=summary.total_amount,
        balance_amount=summary.balance_amount,
        payment_status=summary.payment_status,
    )


def save_order(draft: Order, *, session: Optional[Session], now: Optional[datetime] = None) -> Order:
    require_session(session)
    finalized = finalize_order(draft, now=now)
    is_new = finalized.id is None
    if is_new:
        finalized = replace(finalized, id=uuid4().hex)

    try:
        if is_new:
            order_repository.insert_order(finalized)
        elif not order_repository.update_order(finalized):
            raise RecordNotFoundError(f"Order {finalized.id} not found.")
    except sqlite3.Error as exc:
        logger.exception("Failed to save order %s", finalized.id)
        raise PersistenceError("Failed to save order") from exc

    logger.info(
        "%s order %s for %s: total=%s paid=%s status=%s",
        "Created" if is_new else "Updated",
        finalized.id,
        finalized.customer_name,
        finalized.total_amount,
        finalized.paid_amount,
        finalized.payment_status,
    )
    publish_orders()
    return finalized


def delete_order(order_id: str, *, session: Optional[Session]) -> None:
    require_session(session)
    try:
        deleted = order_repository.delete_order(order_id)
    except sqlite3.Error as exc:
        logger.exception("Failed to delete order %s", order_id)
        raise PersistenceError("Failed to delete order.") from exc

    if not deleted:
        raise RecordNotFoundError(f"Order {order_id} not found.")

    logger.info("Deleted order %s", order_id)
    publish_orders()


def list_orders(limit: Optional[int] = None) -> List[Order]:
    return [refresh_order(order) for order in order_repository.fetch_orders(limit)]


def fetch_order(order_id: str) -> Optional[Order]:
    order = order_repository.fetch_order(order_id)
    return refresh_order(order) if order is not None else None


def list_orders_for_customer(customer_id: str) -> List[Order]:
    return [refresh_order(order) for order in order_repository.fetch_orders_for_customer(customer_id)]


def publish_orders() -> None:
    order_feed.publish(list_orders())


def list_statuses() -> List[str]:
    return list_order_statuses()


def default_due_date(today: Optional[date] = None, settings: Optional[AppSettings] = None) -> date:
    app_settings = settings or settings_repository.get_app_settings()
    return (today or date.today()) + timedelta(days=app_settings.default_due_days)


def build_dashboard_snapshot(
    orders: Iterable[Order],
    customer_count: int,
    today: Optional[date] = None,
) -> DashboardSnapshot:
    current_day = today or date.today()
    refreshed = [refresh_order(order) for order in orders]
    newest_first = sorted(
        refreshed,
        key=lambda order: order.created_at or datetime.min,
        reverse=True,
    )

    return DashboardSnapshot(
        total_customers=int(customer_count),
        active_orders=sum(1 for order in refreshed if is_active(order.status)),
        pending_payments=sum((order.balance_amount for order in refreshed), 0.0),
        orders_due_today=sum(
            1
            for order in refreshed
            if order.due_date == current_day and not is_delivered(order.status)
        ),
        recent_orders=newest_first[:_RECENT_ORDER_COUNT],
    )


def _normalize_item(item: OrderLineItem) -> OrderLineItem:
    # Stored lines must match the computed total: malformed numbers become 0.
    quantity = int(pricing.as_amount(item.quantity))
    unit_cost = pricing.as_amount(item.unit_cost)
    label = (item.label or "").strip()
    if quantity < 0:
        raise ValidationError(f"Quantity cannot be negative ({label or item.kind})")
    if unit_cost < 0:
        raise ValidationError(f"Cost cannot be negative ({label or item.kind})")
    return OrderLineItem(kind=item.kind, label=item.label or "", quantity=quantity, unit_cost=unit_cost)
