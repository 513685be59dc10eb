"""Report, spreadsheet and invoice generation without a Qt renderer."""

import csv
import io
from datetime import date, datetime

import pytest

from tailorbook.models.shop_models import Customer, MeasurementEntry, Measurements, Order, OrderLineItem
from tailorbook.services import export_service
from tailorbook.services.errors import ExportError

GENERATED_AT = datetime(2026, 3, 14, 15, 5, 0)


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def __call__(self, html_content, title):
        self.calls.append((html_content, title))
        return b"%PDF-1.4 fake"


def failing_renderer(html_content, title):
    raise RuntimeError("renderer crashed")


def parse_csv(document):
    text = document.content.decode("utf-8-sig")
    return list(csv.reader(io.StringIO(text)))


@pytest.fixture
def customers():
    return [
        Customer(
            id="c1",
            name="Ravi Kumar",
            phone="9000000001",
            reference_name="Ravi",
            measurements=Measurements(
                shirt="38",
                others=[MeasurementEntry("Kurta", "42"), MeasurementEntry("Waistcoat", "38")],
            ),
        ),
        Customer(id="c2", name="Anil", phone="9000000002"),
    ]


@pytest.fixture
def order(items):
    return Order(
        id="9f8e7d6c5b4a3a2b1c",
        customer_id="c1",
        customer_name="Ravi Kumar",
        phone="9000000001",
        items=items,
        due_date=date(2026, 3, 21),
        status="Pending",
        paid_amount=1000,
        created_at=GENERATED_AT,
        total_amount=0,
        balance_amount=0,
        payment_status="Pending",
    )


class TestCustomerExports:
    def test_rows_use_summary_and_placeholder(self, customers):
        assert export_service.customer_rows(customers) == [
            ["Ravi Kumar", "Ravi", "9000000001", "Shirt, +2 Others"],
            ["Anil", "-", "9000000002", "None"],
        ]

    def test_spreadsheet(self, customers, settings):
        document = export_service.export_customers_spreadsheet(
            customers, generated_at=GENERATED_AT, settings=settings
        )
        assert document.file_name == "customers_nizy_20260314_1505.csv"
        assert document.mime_type == "text/csv"
        rows = parse_csv(document)
        assert rows[0] == export_service.CUSTOMER_COLUMNS
        assert rows[1][3] == "Shirt, +2 Others"

    def test_report(self, customers, settings):
        renderer = RecordingRenderer()
        document = export_service.export_customers_report(
            customers, generated_at=GENERATED_AT, settings=settings, renderer=renderer
        )
        assert document.file_name == "customers_nizy_20260314_1505.pdf"
        assert document.mime_type == "application/pdf"
        assert document.content.startswith(b"%PDF")

        html_content, title = renderer.calls[0]
        assert title == "Customer List"
        assert "Generated on: Mar 14, 2026 3:05 PM" in html_content
        assert "Measurements Summary" in html_content
        assert "Shirt, +2 Others" in html_content

    def test_exporting_twice_is_identical(self, customers, settings):
        first = export_service.export_customers_spreadsheet(customers, generated_at=GENERATED_AT, settings=settings)
        second = export_service.export_customers_spreadsheet(customers, generated_at=GENERATED_AT, settings=settings)
        assert first == second

    def test_empty_collection_still_exports_header(self, settings):
        document = export_service.export_customers_spreadsheet([], generated_at=GENERATED_AT, settings=settings)
        assert parse_csv(document) == [export_service.CUSTOMER_COLUMNS]


class TestOrderExports:
    def test_rows_recompute_amounts(self, order):
        assert export_service.order_rows([order], "₹") == [
            ["#3A2B1C", "Ravi Kumar", "9000000001", "Mar 21, 2026", "Pending", "₹2500", "₹1500"],
        ]

    def test_spreadsheet_columns(self, order, settings):
        document = export_service.export_orders_spreadsheet([order], generated_at=GENERATED_AT, settings=settings)
        rows = parse_csv(document)
        assert document.file_name == "orders_nizy_20260314_1505.csv"
        assert rows[0] == ["Order ID", "Customer", "Phone", "Due Date", "Status", "Amount", "Balance"]
        assert rows[1][5:] == ["₹2500", "₹1500"]

    def test_report_title(self, order, settings):
        renderer = RecordingRenderer()
        export_service.export_orders_report([order], generated_at=GENERATED_AT, settings=settings, renderer=renderer)
        html_content, title = renderer.calls[0]
        assert title == "Order Summary"
        assert "#3A2B1C" in html_content

    def test_missing_due_date_shows_placeholder(self, order):
        order.due_date = None
        assert export_service.order_rows([order], "₹")[0][3] == "-"


class TestInvoice:
    def test_invoice_document(self, order, settings):
        renderer = RecordingRenderer()
        document = export_service.generate_invoice(
            order, issued_on=date(2026, 3, 14), settings=settings, renderer=renderer
        )
        assert document.file_name == "Invoice_Ravi_Kumar_3a2b1c.pdf"

        html_content, title = renderer.calls[0]
        assert title == "Invoice #3A2B1C"
        for fragment in (
            "Nizy Tailors",
            "Professional Tailoring Services",
            "INVOICE",
            "Bill To:",
            "Date:",
            "Mar 14, 2026",
            "Due Date:",
            "Mar 21, 2026",
            "Custom Tailored",
            "₹2500",
            "₹1000",
            "₹1500",
            "Thank you for your business!",
            "1. No refunds on custom stitched items.",
            "2. Please collect items within 30 days of due date.",
        ):
            assert fragment in html_content

    def test_item_titles(self):
        assert export_service.invoice_item_title(OrderLineItem("shirt", "Shirt", 1, 1)) == "Shirt"
        assert export_service.invoice_item_title(OrderLineItem("custom", "blazer", 1, 1)) == "Blazer"
        assert export_service.invoice_item_title(OrderLineItem("custom", "  ", 1, 1)) == "Custom"

    def test_customer_name_is_escaped(self, order, settings):
        order.customer_name = "Ravi <b>"
        renderer = RecordingRenderer()
        export_service.generate_invoice(order, settings=settings, renderer=renderer)
        assert "Ravi &lt;b&gt;" in renderer.calls[0][0]


class TestFailures:
    def test_renderer_failure_becomes_export_error(self, order, settings, tmp_path):
        with pytest.raises(ExportError):
            export_service.generate_invoice(order, settings=settings, renderer=failing_renderer)
        assert list(tmp_path.glob("*.pdf")) == []

    def test_empty_render_is_rejected(self, customers, settings):
        with pytest.raises(ExportError):
            export_service.export_customers_report(customers, settings=settings, renderer=lambda html, title: b"")


class TestSaveDocument:
    def test_writes_into_directory(self, tmp_path, customers, settings):
        document = export_service.export_customers_spreadsheet(customers, generated_at=GENERATED_AT, settings=settings)
        target = export_service.save_document(document, tmp_path / "exports")

        assert target == tmp_path / "exports" / "customers_nizy_20260314_1505.csv"
        assert target.read_bytes() == document.content
        assert [path.name for path in target.parent.iterdir()] == [target.name]

    def test_unwritable_target_raises_and_leaves_nothing(self, tmp_path, customers, settings):
        document = export_service.export_customers_spreadsheet(customers, generated_at=GENERATED_AT, settings=settings)
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("x")

        with pytest.raises(ExportError):
            export_service.save_document(document, blocker)
        assert blocker.read_text() == "x"
