import os
from datetime import datetime

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tailorbook.data import database  # noqa: E402
from tailorbook.models.shop_models import AppSettings, Customer, Measurements, OrderLineItem  # noqa: E402
from tailorbook.services.customer_service import customer_feed  # noqa: E402
from tailorbook.services.order_service import order_feed  # noqa: E402
from tailorbook.services.session import Session  # noqa: E402

NOW = datetime(2026, 3, 14, 15, 5, 0)


@pytest.fixture(autouse=True)
def storage(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    database.initialize()
    yield tmp_path
    customer_feed.clear()
    order_feed.clear()


@pytest.fixture
def session():
    return Session(user_email="owner@example.com", signed_in_at=NOW)


@pytest.fixture
def settings():
    return AppSettings(
        business_name="Nizy Tailors",
        business_tagline="Professional Tailoring Services",
        business_phone="9876543210",
        currency_symbol="₹",
        default_due_days=7,
        invoice_terms=[
            "1. No refunds on custom stitched items.",
            "2. Please collect items within 30 days of due date.",
        ],
    )


@pytest.fixture
def customer():
    return Customer(
        id="cust0001abcdef",
        name="Ravi Kumar",
        phone="9000000001",
        reference_name="Ravi",
        measurements=Measurements(shirt="38 / 15.5", pant="32 / 40"),
    )


@pytest.fixture
def items():
    return [
        OrderLineItem(kind="shirt", label="Shirt", quantity=2, unit_cost=500),
        OrderLineItem(kind="custom", label="Blazer", quantity=1, unit_cost=1500),
    ]


@pytest.fixture(scope="session")
def qt_app():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app
