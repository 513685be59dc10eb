"""Spreadsheets, PDF reports and invoices built from customer and order records.

Every export returns an :class:`ExportDocument` held in memory. Records are
only read; payment values are recomputed from the order lines rather than
taken from the stored cache. ``save_document`` is the only function here that
touches the filesystem.
"""

from __future__ import annotations

import csv
import html
import io
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from ..data import settings_repository
from ..models.shop_models import AppSettings, Customer, ExportDocument, Order, OrderLineItem
from . import pricing
from .errors import ExportError
from .formatting import (
    PLACEHOLDER,
    capitalize_first,
    file_timestamp,
    format_currency,
    format_date,
    format_timestamp,
    measurements_summary,
    order_reference,
    safe_file_component,
    short_order_id,
)
from .line_composer import CUSTOM_KIND


PdfRenderer = Callable[[str, str], bytes]

PDF_MIME_TYPE = "application/pdf"
CSV_MIME_TYPE = "text/csv"

CUSTOMER_COLUMNS: List[str] = ["Name", "Reference", "Phone", "Measurements Summary"]
ORDER_COLUMNS: List[str] = ["Order ID", "Customer", "Phone", "Due Date", "Status", "Amount", "Balance"]
INVOICE_COLUMNS: List[str] = ["Item", "Description", "Qty", "Price", "Total"]

_HEADER_COLOR = "#4f46e5"
_INVOICE_TABLE_HEADER_COLOR = "#3c3c3c"
_INVOICE_FOOTER_COLOR = "#f5f5f5"
_ITEM_DESCRIPTION = "Custom Tailored"

logger = logging.getLogger(__name__)


def customer_rows(customers: Iterable[Customer]) -> List[List[str]]:
    return [
        [
            customer.name,
            customer.reference_name.strip() or PLACEHOLDER,
            customer.phone,
            measurements_summary(customer.measurements),
        ]
        for customer in customers
    ]


def order_rows(orders: Iterable[Order], currency_symbol: str) -> List[List[str]]:
    rows: List[List[str]] = []
    for order in orders:
        summary = pricing.summarize_payment(order.items, order.paid_amount)
        rows.append(
            [
                order_reference(order.id),
                order.customer_name,
                order.phone,
                format_date(order.due_date),
                order.status,
                format_currency(summary.total_amount, currency_symbol),
                format_currency(summary.balance_amount, currency_symbol),
            ]
        )
    return rows


def export_customers_spreadsheet(
    customers: Iterable[Customer],
    *,
    generated_at: Optional[datetime] = None,
    settings: Optional[AppSettings] = None,
) -> ExportDocument:
    app_settings = settings or settings_repository.get_app_settings()
    timestamp = generated_at or datetime.now()
    with _export_guard("customer spreadsheet"):
        content = _write_csv(CUSTOMER_COLUMNS, customer_rows(customers))
        document = ExportDocument(
            file_name=batch_file_name("customers", "csv", app_settings, timestamp),
            content=content,
            mime_type=CSV_MIME_TYPE,
        )
    logger.info("Built customer spreadsheet %s", document.file_name)
    return document


def export_customers_report(
    customers: Iterable[Customer],
    *,
    generated_at: Optional[datetime] = None,
    settings: Optional[AppSettings] = None,
    renderer: Optional[PdfRenderer] = None,
) -> ExportDocument:
    app_settings = settings or settings_repository.get_app_settings()
    timestamp = generated_at or datetime.now()
    with _export_guard("customer report"):
        html_content = render_table_report_html(
            "Customer List",
            timestamp,
            CUSTOMER_COLUMNS,
            customer_rows(customers),
        )
        document = ExportDocument(
            file_name=batch_file_name("customers", "pdf", app_settings, timestamp),
            content=_render_pdf(html_content, "Customer List", renderer),
            mime_type=PDF_MIME_TYPE,
        )
    logger.info("Built customer report %s", document.file_name)
    return document


def export_orders_spreadsheet(
    orders: Iterable[Order],
    *,
    generated_at: Optional[datetime] = None,
    settings: Optional[AppSettings] = None,
) -> ExportDocument:
    app_settings = settings or settings_repository.get_app_settings()
    timestamp = generated_at or datetime.now()
    with _export_guard("order spreadsheet"):
        content = _write_csv(ORDER_COLUMNS, order_rows(orders, app_settings.currency_symbol))
        document = ExportDocument(
            file_name=batch_file_name("orders", "csv", app_settings, timestamp),
            content=content,
            mime_type=CSV_MIME_TYPE,
        )
    logger.info("Built order spreadsheet %s", document.file_name)
    return document


def export_orders_report(
    orders: Iterable[Order],
    *,
    generated_at: Optional[datetime] = None,
    settings: Optional[AppSettings] = None,
    renderer: Optional[PdfRenderer] = None,
) -> ExportDocument:
    app_settings = settings or settings_repository.get_app_settings()
    timestamp = generated_at or datetime.now()
    with _export_guard("order report"):
        html_content = render_table_report_html(
            "Order Summary",
            timestamp,
            ORDER_COLUMNS,
            order_rows(orders, app_settings.currency_symbol),
        )
        document = ExportDocument(
            file_name=batch_file_name("orders", "pdf", app_settings, timestamp),
            content=_render_pdf(html_content, "Order Summary", renderer),
            mime_type=PDF_MIME_TYPE,
        )
    logger.info("Built order report %s", document.file_name)
    return document


def generate_invoice(
    order: Order,
    *,
    issued_on: Optional[date] = None,
    settings: Optional[AppSettings] = None,
    renderer: Optional[PdfRenderer] = None,
) -> ExportDocument:
    app_settings = settings or settings_repository.get_app_settings()
    with _export_guard(f"invoice for order {order.id}"):
        html_content = render_invoice_html(order, app_settings, issued_on or date.today())
        title = f"Invoice {order_reference(order.id)}"
        document = ExportDocument(
            file_name=invoice_file_name(order),
            content=_render_pdf(html_content, title, renderer),
            mime_type=PDF_MIME_TYPE,
        )
    logger.info("Built invoice %s", document.file_name)
    return document


def save_document(document: ExportDocument, directory: os.PathLike[str] | str) -> Path:
    """Write ``document`` into ``directory`` and return the final path.

    The bytes go to a temporary file first and are renamed into place, so a
    failed write never leaves a truncated document behind.
    """
    target_dir = Path(directory).expanduser()
    target = target_dir / document.file_name
    temp_path: Optional[Path] = None
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(prefix=".tmp-", suffix=target.suffix, dir=str(target_dir))
        temp_path = Path(temp_name)
        with os.fdopen(handle, "wb") as stream:
            stream.write(document.content)
        os.replace(temp_path, target)
    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        logger.exception("Failed to write %s", target)
        raise ExportError(f"Could not save {document.file_name}: {exc}") from exc

    logger.info("Saved %s (%d bytes)", target, len(document.content))
    return target


def batch_file_name(prefix: str, extension: str, settings: AppSettings, generated_at: datetime) -> str:
    return f"{prefix}_{_shop_slug(settings)}_{file_timestamp(generated_at)}.{extension}"


def invoice_file_name(order: Order) -> str:
    return f"Invoice_{safe_file_component(order.customer_name)}_{short_order_id(order.id)}.pdf"


def render_table_report_html(
    title: str,
    generated_at: datetime,
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
) -> str:
    header_cells = "".join(
        f'<th align="left" bgcolor="{_HEADER_COLOR}"><font color="#ffffff">{html.escape(column)}</font></th>'
        for column in columns
    )
    body_rows: List[str] = []
    for row in rows:
        cells = "".join(f"<td>{html.escape(str(value))}</td>" for value in row)
        body_rows.append(f"<tr>{cells}</tr>")

    return """
        <html>
        <head><meta charset="utf-8" /><title>{title}</title></head>
        <body>
            <h2 style="font-size: 18pt;">{title}</h2>
            <p style="color: #646464; font-size: 11pt;">Generated on: {generated}</p>
            <br />
            <table width="100%" border="1" cellspacing="0" cellpadding="4" style="border-collapse: collapse; border-color: #c8c8c8;">
                <thead><tr>{header}</tr></thead>
                <tbody>{rows}</tbody>
            </table>
        </body>
        </html>
    """.format(
        title=html.escape(title),
        generated=html.escape(format_timestamp(generated_at)),
        header=header_cells,
        rows="".join(body_rows),
    )


def render_invoice_html(order: Order, settings: AppSettings, issued_on: date) -> str:
    symbol = settings.currency_symbol
    summary = pricing.summarize_payment(order.items, order.paid_amount)
    reference = order_reference(order.id)

    line_rows: List[str] = []
    for item in order.items:
        line_rows.append(
            """
            <tr>
                <td>{item}</td>
                <td>{description}</td>
                <td align="center">{quantity}</td>
                <td align="right">{unit_cost}</td>
                <td align="right">{line_total}</td>
            </tr>
            """.format(
                item=html.escape(invoice_item_title(item)),
                description=_ITEM_DESCRIPTION,
                quantity=html.escape(_format_quantity(item.quantity)),
                unit_cost=html.escape(format_currency(item.unit_cost, symbol)),
                line_total=html.escape(format_currency(pricing.compute_line_total(item), symbol)),
            )
        )

    totals_rows = "".join(
        """
        <tr>
            <td bgcolor="{color}" colspan="4" align="right"><b>{label}</b></td>
            <td bgcolor="{color}" align="right"><b>{amount}</b></td>
        </tr>
        """.format(
            color=_INVOICE_FOOTER_COLOR,
            label=label,
            amount=html.escape(format_currency(amount, symbol)),
        )
        for label, amount in (
            ("Total", summary.total_amount),
            ("Paid", order.paid_amount),
            ("Balance", summary.balance_amount),
        )
    )

    header_cells = "".join(
        f'<th align="left" bgcolor="{_INVOICE_TABLE_HEADER_COLOR}"><font color="#ffffff">{column}</font></th>'
        for column in INVOICE_COLUMNS
    )
    terms_html = "".join(
        f'<p style="font-size: 9pt; color: #646464;">{html.escape(line)}</p>' for line in settings.invoice_terms
    )

    return """
        <html>
        <head><meta charset="utf-8" /><title>Invoice {reference}</title></head>
        <body>
            <table width="100%" cellspacing="0" cellpadding="14" bgcolor="{band_color}">
                <tr>
                    <td align="left">
                        <p style="font-size: 24pt; font-weight: bold; color: #ffffff;">{company}</p>
                        <p style="font-size: 10pt; color: #ffffff;">{tagline}</p>
                    </td>
                    <td align="right">
                        <p style="font-size: 10pt; color: #ffffff;">INVOICE</p>
                        <p style="font-size: 10pt; color: #ffffff;">{reference}</p>
                    </td>
                </tr>
            </table>
            <br />
            <table width="100%" cellspacing="0" cellpadding="2">
                <tr>
                    <td align="left" width="60%">
                        <p style="font-size: 12pt; font-weight: bold;">Bill To:</p>
                        <p>{customer_name}</p>
                        <p>{phone}</p>
                    </td>
                    <td align="right" width="40%">
                        <table align="right" cellspacing="0" cellpadding="2">
                            <tr><td>Date:</td><td align="right">{issued}</td></tr>
                            <tr><td>Due Date:</td><td align="right">{due}</td></tr>
                        </table>
                    </td>
                </tr>
            </table>
            <br />
            <table width="100%" border="1" cellspacing="0" cellpadding="4" style="border-collapse: collapse; border-color: #c8c8c8;">
                <thead><tr>{header}</tr></thead>
                <tbody>{rows}</tbody>
                <tfoot>{totals}</tfoot>
            </table>
            <br />
            <p style="font-size: 10pt; color: #646464;">Thank you for your business!</p>
            <br />
            <p style="font-size: 9pt; color: #646464;">Terms &amp; Conditions:</p>
            {terms}
        </body>
        </html>
    """.format(
        reference=html.escape(reference),
        band_color=_HEADER_COLOR,
        company=html.escape(settings.business_name),
        tagline=html.escape(settings.business_tagline),
        customer_name=html.escape(order.customer_name),
        phone=html.escape(order.phone),
        issued=html.escape(format_date(issued_on)),
        due=html.escape(format_date(order.due_date)),
        header=header_cells,
        rows="".join(line_rows),
        totals=totals_rows,
        terms=terms_html,
    )


def invoice_item_title(item: OrderLineItem) -> str:
    if item.kind == CUSTOM_KIND:
        return capitalize_first(item.label.strip()) or capitalize_first(CUSTOM_KIND)
    return capitalize_first(item.kind)


def _format_quantity(value: object) -> str:
    amount = pricing.as_amount(value)
    return str(int(amount)) if amount.is_integer() else repr(amount)


def _write_csv(columns: Sequence[str], rows: Iterable[Sequence[str]]) -> bytes:
    handle = io.StringIO(newline="")
    writer = csv.writer(handle)
    writer.writerow(columns)
    for row in rows:
        writer.writerow(row)
    # BOM so spreadsheet applications pick up the currency symbol correctly.
    return handle.getvalue().encode("utf-8-sig")


def _render_pdf(html_content: str, title: str, renderer: Optional[PdfRenderer]) -> bytes:
    render = renderer or _default_renderer()
    payload = render(html_content, title)
    if not payload:
        raise ExportError(f"{title} rendered to an empty document")
    return payload


def _default_renderer() -> PdfRenderer:
    from .pdf_writer import html_to_pdf

    return html_to_pdf


def _shop_slug(settings: AppSettings) -> str:
    words = re.findall(r"[A-Za-z0-9]+", settings.business_name or "")
    return words[0].lower() if words else "shop"


@contextmanager
def _export_guard(description: str) -> Iterator[None]:
    try:
        yield
    except ExportError:
        logger.exception("Failed to build %s", description)
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Failed to build %s", description)
        raise ExportError(f"Failed to build {description}: {exc}") from exc
