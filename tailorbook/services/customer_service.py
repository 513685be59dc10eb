from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import uuid4

from ..data import customer_repository
from ..models.shop_models import Customer, MeasurementEntry, Measurements
from .collection_feed import CollectionFeed
from .errors import PersistenceError, RecordNotFoundError, ValidationError
from .session import Session, require_session


logger = logging.getLogger(__name__)

customer_feed: CollectionFeed[Customer] = CollectionFeed("customers")


def build_customer(
    name: str,
    phone: str,
    *,
    reference_name: str = "",
    shirt: str = "",
    pant: str = "",
    others: Iterable[MeasurementEntry] | None = None,
    existing: Optional[Customer] = None,
) -> Customer:
    """Validate form input and produce the customer to persist.

    When ``existing`` is given its id and creation time are kept; every
    descriptive field is replaced.
    """
    name_clean = (name or "").strip()
    phone_clean = (phone or "").strip()
    if not name_clean:
        raise ValidationError("Customer name is required.")
    if not phone_clean:
        raise ValidationError("Phone number is required.")

    measurements = Measurements(
        shirt=(shirt or "").strip(),
        pant=(pant or "").strip(),
        others=_normalize_others(others or []),
    )

    return Customer(
        id=existing.id if existing is not None else None,
        name=name_clean,
        reference_name=(reference_name or "").strip(),
        phone=phone_clean,
        measurements=measurements,
        created_at=existing.created_at if existing is not None else None,
        updated_at=existing.updated_at if existing is not None else None,
    )


def save_customer(customer: Customer, *, session: Optional[Session], now: Optional[datetime] = None) -> Customer:
    require_session(session)
    timestamp = now or datetime.now()
    is_new = customer.id is None
    saved = replace(
        customer,
        id=customer.id or uuid4().hex,
        created_at=customer.created_at or timestamp,
        updated_at=timestamp,
    )

    try:
        if is_new:
            customer_repository.insert_customer(saved)
        elif not customer_repository.update_customer(saved):
            raise RecordNotFoundError(f"Customer {saved.id} not found.")
    except sqlite3.Error as exc:
        logger.exception("Failed to save customer %s", saved.id)
        raise PersistenceError("Failed to save customer details.") from exc

    logger.info("%s customer %s (%s)", "Created" if is_new else "Updated", saved.id, saved.name)
    publish_customers()
    return saved


def delete_customer(customer_id: str, *, session: Optional[Session]) -> None:
    """Remove a customer. Orders keep their own name/phone snapshot."""
    require_session(session)
    try:
        deleted = customer_repository.delete_customer(customer_id)
    except sqlite3.Error as exc:
        logger.exception("Failed to delete customer %s", customer_id)
        raise PersistenceError("Failed to delete customer.") from exc

    if not deleted:
        raise RecordNotFoundError(f"Customer {customer_id} not found.")

    logger.info("Deleted customer %s", customer_id)
    publish_customers()


def list_customers() -> List[Customer]:
    return customer_repository.list_customers()


def fetch_customer(customer_id: str) -> Optional[Customer]:
    return customer_repository.fetch_customer(customer_id)


def count_customers() -> int:
    return customer_repository.count_customers()


def publish_customers() -> None:
    customer_feed.publish(list_customers())


def _normalize_others(entries: Iterable[MeasurementEntry]) -> List[MeasurementEntry]:
    normalized: List[MeasurementEntry] = []
    for entry in entries:
        label = (entry.label or "").strip()
        value = (entry.value or "").strip()
        if not label and not value:
            continue
        normalized.append(MeasurementEntry(label=label, value=value))
    return normalized
