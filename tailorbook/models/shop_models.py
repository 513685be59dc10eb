from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional


@dataclass
class MeasurementEntry:
    label: str
    value: str


@dataclass
class Measurements:
    shirt: str = ""
    pant: str = ""
    others: List[MeasurementEntry] = field(default_factory=list)


@dataclass
class Customer:
    name: str
    phone: str
    reference_name: str = ""
    measurements: Measurements = field(default_factory=Measurements)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderLineItem:
    kind: str
    label: str
    quantity: int
    unit_cost: float


@dataclass
class PredefinedLineDraft:
    enabled: bool = False
    quantity: int = 1
    unit_cost: float = 0.0


@dataclass
class CustomLineDraft:
    label: str = ""
    quantity: int = 1
    unit_cost: float = 0.0


@dataclass
class Order:
    """A customer's bill.

    ``customer_name`` and ``phone`` are copied from the customer when the
    order is built and are not refreshed afterwards. ``total_amount``,
    ``balance_amount`` and ``payment_status`` are only a cache of the values
    computed at save time.
    """

    customer_id: str
    customer_name: str
    phone: str
    items: List[OrderLineItem] = field(default_factory=list)
    due_date: Optional[date] = None
    status: str = "Pending"
    paid_amount: float = 0.0
    shirts_completed: int = 0
    pants_completed: int = 0
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    total_amount: float = 0.0
    balance_amount: float = 0.0
    payment_status: str = "Pending"


@dataclass
class PaymentSummary:
    total_amount: float
    balance_amount: float
    payment_status: str


@dataclass
class DashboardSnapshot:
    total_customers: int
    active_orders: int
    pending_payments: float
    orders_due_today: int
    recent_orders: List[Order] = field(default_factory=list)


@dataclass(frozen=True)
class ExportDocument:
    file_name: str
    content: bytes
    mime_type: str


@dataclass
class AppSettings:
    business_name: str
    business_tagline: str = ""
    business_phone: str = ""
    currency_symbol: str = "₹"
    default_due_days: int = 7
    invoice_terms: List[str] = field(default_factory=list)
