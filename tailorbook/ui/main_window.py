from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QTableView,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..data import settings_repository
from ..models.shop_models import AppSettings, Customer, ExportDocument, Order
from ..services import customer_service, export_service, order_service
from ..services.errors import TailorBookError
from ..services.formatting import format_currency, format_date, measurements_summary, order_reference
from ..services.session import Session, SessionManager
from ..viewmodels.filters import ALL_STATUSES, filter_orders, search_customers
from ..viewmodels.table_models import ListTableModel
from .customer_dialog import CustomerDialog
from .order_dialog import OrderDialog


APP_NAME = "TailorBook"

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, session_manager: SessionManager) -> None:
        super().__init__()
        self._session_manager = session_manager
        self._app_settings: AppSettings = settings_repository.get_app_settings()
        self._customers_cache: List[Customer] = []
        self._orders_cache: List[Order] = []
        self._unsubscribers: List[Callable[[], None]] = []

        self.setWindowTitle(f"{APP_NAME} - {self._app_settings.business_name}")
        self.resize(1200, 780)

        self._tab_widget = QTabWidget()
        self.setCentralWidget(self._tab_widget)

        self._dashboard_tab = QWidget()
        self._customers_tab = QWidget()
        self._orders_tab = QWidget()
        self._settings_tab = QWidget()

        self._tab_widget.addTab(self._dashboard_tab, "Dashboard")
        self._tab_widget.addTab(self._customers_tab, "Customers")
        self._tab_widget.addTab(self._orders_tab, "Orders")
        self._tab_widget.addTab(self._settings_tab, "Settings")

        self._total_customers_label: QLabel
        self._active_orders_label: QLabel
        self._pending_payments_label: QLabel
        self._due_today_label: QLabel
        self._recent_orders_model: ListTableModel
        self._recent_orders_table: QTableView

        self._customer_search_input: QLineEdit
        self._customer_model: ListTableModel
        self._customer_table: QTableView
        self._customer_status_label: QLabel

        self._order_search_input: QLineEdit
        self._order_status_filter: QComboBox
        self._order_model: ListTableModel
        self._order_table: QTableView
        self._order_status_label: QLabel

        self._business_name_input: QLineEdit
        self._business_tagline_input: QLineEdit
        self._business_phone_input: QLineEdit
        self._currency_symbol_input: QLineEdit
        self._default_due_days_input: QSpinBox
        self._invoice_terms_input: QPlainTextEdit
        self._settings_status_label: QLabel

        self._build_dashboard_tab()
        self._build_customers_tab()
        self._build_orders_tab()
        self._build_settings_tab()

        self._unsubscribers.append(customer_service.customer_feed.subscribe(self._on_customers_changed))
        self._unsubscribers.append(order_service.order_feed.subscribe(self._on_orders_changed))

        self._on_customers_changed(customer_service.list_customers())
        self._on_orders_changed(order_service.list_orders())

    @property
    def session(self) -> Optional[Session]:
        return self._session_manager.current_session()

    def closeEvent(self, event) -> None:  # noqa: N802
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self._session_manager.sign_out()
        super().closeEvent(event)

    # Dashboard tab
    def _build_dashboard_tab(self) -> None:
        layout = QVBoxLayout()
        self._dashboard_tab.setLayout(layout)

        title_label = QLabel(self._app_settings.business_name)
        title_label.setStyleSheet("font-size: 28px; font-weight: bold;")
        layout.addWidget(title_label)

        header_layout = QHBoxLayout()
        layout.addLayout(header_layout)

        self._total_customers_label = QLabel("Total Customers: 0")
        self._active_orders_label = QLabel("Active Orders: 0")
        self._pending_payments_label = QLabel("Pending Payments: 0")
        self._due_today_label = QLabel("Due Today: 0")
        for label in (
            self._total_customers_label,
            self._active_orders_label,
            self._pending_payments_label,
            self._due_today_label,
        ):
            label.setStyleSheet("font-size: 20px; font-weight: bold;")
            header_layout.addWidget(label)
        header_layout.addStretch(1)

        new_order_button = QPushButton("New Order")
        new_order_button.clicked.connect(self._handle_new_order)
        header_layout.addWidget(new_order_button)

        refresh_button = QPushButton("Refresh")
        refresh_button.clicked.connect(self.refresh_dashboard)
        header_layout.addWidget(refresh_button)

        self._recent_orders_model = ListTableModel(
            (
                ("Order", lambda row: order_reference(row.id)),
                ("Customer", lambda row: row.customer_name),
                ("Due Date", lambda row: format_date(row.due_date)),
                ("Status", lambda row: row.status),
                ("Amount", lambda row: self._money(row.total_amount)),
            ),
            numeric_columns=(4,),
        )
        self._recent_orders_table = QTableView()
        self._recent_orders_table.setModel(self._recent_orders_model)
        self._configure_table(self._recent_orders_table)
        self._recent_orders_table.doubleClicked.connect(
            lambda index: self._edit_order(self._recent_orders_model.row_at(index.row()))
        )
        layout.addWidget(self._wrap_group("Recent Orders", self._recent_orders_table), 1)

    def refresh_dashboard(self) -> None:
        snapshot = order_service.build_dashboard_snapshot(self._orders_cache, len(self._customers_cache))
        self._total_customers_label.setText(f"Total Customers: {snapshot.total_customers}")
        self._active_orders_label.setText(f"Active Orders: {snapshot.active_orders}")
        self._pending_payments_label.setText(f"Pending Payments: {self._money(snapshot.pending_payments)}")
        self._due_today_label.setText(f"Due Today: {snapshot.orders_due_today}")
        self._recent_orders_model.update_rows(snapshot.recent_orders)

    # Customers tab
    def _build_customers_tab(self) -> None:
        layout = QVBoxLayout()
        self._customers_tab.setLayout(layout)

        toolbar = QHBoxLayout()
        layout.addLayout(toolbar)

        self._customer_search_input = QLineEdit()
        self._customer_search_input.setPlaceholderText("Search by name, reference or phone")
        self._customer_search_input.textChanged.connect(self._apply_customer_filter)
        toolbar.addWidget(self._customer_search_input, 1)

        add_button = QPushButton("Add Customer")
        add_button.clicked.connect(self._handle_add_customer)
        toolbar.addWidget(add_button)

        edit_button = QPushButton("Edit")
        edit_button.clicked.connect(self._handle_edit_customer)
        toolbar.addWidget(edit_button)

        order_button = QPushButton("New Order")
        order_button.clicked.connect(self._handle_order_for_customer)
        toolbar.addWidget(order_button)

        delete_button = QPushButton("Delete")
        delete_button.clicked.connect(self._handle_delete_customer)
        toolbar.addWidget(delete_button)

        pdf_button = QPushButton("Export PDF")
        pdf_button.clicked.connect(self._handle_export_customers_pdf)
        toolbar.addWidget(pdf_button)

        csv_button = QPushButton("Export CSV")
        csv_button.clicked.connect(self._handle_export_customers_csv)
        toolbar.addWidget(csv_button)

        self._customer_model = ListTableModel(
            (
                ("Name", lambda row: row.name),
                ("Reference", lambda row: row.reference_name or "-"),
                ("Phone", lambda row: row.phone),
                ("Measurements", lambda row: measurements_summary(row.measurements)),
            )
        )
        self._customer_table = QTableView()
        self._customer_table.setModel(self._customer_model)
        self._configure_table(self._customer_table)
        self._customer_table.doubleClicked.connect(lambda _index: self._handle_edit_customer())
        layout.addWidget(self._customer_table, 1)

        self._customer_status_label = QLabel()
        layout.addWidget(self._customer_status_label)

    def _on_customers_changed(self, customers: List[Customer]) -> None:
        self._customers_cache = list(customers)
        self._apply_customer_filter()
        self.refresh_dashboard()

    def _apply_customer_filter(self) -> None:
        visible = search_customers(self._customers_cache, self._customer_search_input.text())
        self._customer_model.update_rows(visible)

    def _selected_customer(self) -> Optional[Customer]:
        index = self._customer_table.currentIndex()
        if not index.isValid():
            return None
        return self._customer_model.row_at(index.row())

    def _handle_add_customer(self) -> None:
        dialog = CustomerDialog(session=self.session, parent=self)
        if dialog.exec():
            saved = dialog.saved_customer()
            if saved is not None:
                self._set_status(self._customer_status_label, f"Saved {saved.name}.")

    def _handle_edit_customer(self) -> None:
        customer = self._selected_customer()
        if customer is None:
            self._show_message("Select a customer first.")
            return
        dialog = CustomerDialog(session=self.session, customer=customer, parent=self)
        if dialog.exec():
            self._set_status(self._customer_status_label, f"Updated {customer.name}.")

    def _handle_order_for_customer(self) -> None:
        customer = self._selected_customer()
        if customer is None:
            self._show_message("Select a customer first.")
            return
        self._open_order_dialog(prefill_customer=customer)

    def _handle_delete_customer(self) -> None:
        customer = self._selected_customer()
        if customer is None or customer.id is None:
            self._show_message("Select a customer first.")
            return
        answer = QMessageBox.question(
            self,
            APP_NAME,
            f"Delete {customer.name}? Existing orders keep their customer details.",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        try:
            customer_service.delete_customer(customer.id, session=self.session)
        except TailorBookError as exc:
            self._set_status(self._customer_status_label, f"Delete failed: {exc}", error=True)
            return
        self._set_status(self._customer_status_label, f"Deleted {customer.name}.")

    def _handle_export_customers_pdf(self) -> None:
        self._export(
            lambda: export_service.export_customers_report(self._customer_model.rows(), settings=self._app_settings),
            self._customer_status_label,
        )

    def _handle_export_customers_csv(self) -> None:
        self._export(
            lambda: export_service.export_customers_spreadsheet(self._customer_model.rows(), settings=self._app_settings),
            self._customer_status_label,
        )

    # Orders tab
    def _build_orders_tab(self) -> None:
        layout = QVBoxLayout()
        self._orders_tab.setLayout(layout)

        toolbar = QHBoxLayout()
        layout.addLayout(toolbar)

        self._order_search_input = QLineEdit()
        self._order_search_input.setPlaceholderText("Search by customer name or phone")
        self._order_search_input.textChanged.connect(self._apply_order_filter)
        toolbar.addWidget(self._order_search_input, 1)

        self._order_status_filter = QComboBox()
        self._order_status_filter.addItem(ALL_STATUSES)
        self._order_status_filter.addItems(order_service.list_statuses())
        self._order_status_filter.currentIndexChanged.connect(self._apply_order_filter)
        toolbar.addWidget(self._order_status_filter)

        new_button = QPushButton("New Order")
        new_button.clicked.connect(self._handle_new_order)
        toolbar.addWidget(new_button)

        edit_button = QPushButton("Edit")
        edit_button.clicked.connect(self._handle_edit_order)
        toolbar.addWidget(edit_button)

        delete_button = QPushButton("Delete")
        delete_button.clicked.connect(self._handle_delete_order)
        toolbar.addWidget(delete_button)

        view_customer_button = QPushButton("View Customer")
        view_customer_button.clicked.connect(self._handle_view_customer)
        toolbar.addWidget(view_customer_button)

        invoice_button = QPushButton("Invoice")
        invoice_button.clicked.connect(self._handle_invoice)
        toolbar.addWidget(invoice_button)

        pdf_button = QPushButton("Export PDF")
        pdf_button.clicked.connect(self._handle_export_orders_pdf)
        toolbar.addWidget(pdf_button)

        csv_button = QPushButton("Export CSV")
        csv_button.clicked.connect(self._handle_export_orders_csv)
        toolbar.addWidget(csv_button)

        self._order_model = ListTableModel(
            (
                ("Order", lambda row: order_reference(row.id)),
                ("Customer", lambda row: row.customer_name),
                ("Phone", lambda row: row.phone),
                ("Due Date", lambda row: format_date(row.due_date)),
                ("Status", lambda row: row.status),
                ("Progress", lambda row: f"{row.shirts_completed} shirts / {row.pants_completed} pants"),
                ("Amount", lambda row: self._money(row.total_amount)),
                ("Paid", lambda row: self._money(row.paid_amount)),
                ("Balance", lambda row: self._money(row.balance_amount)),
                ("Payment", lambda row: row.payment_status),
            ),
            numeric_columns=(6, 7, 8),
        )
        self._order_table = QTableView()
        self._order_table.setModel(self._order_model)
        self._configure_table(self._order_table)
        self._order_table.doubleClicked.connect(lambda _index: self._handle_edit_order())
        layout.addWidget(self._order_table, 1)

        self._order_status_label = QLabel()
        layout.addWidget(self._order_status_label)

    def _on_orders_changed(self, orders: List[Order]) -> None:
        self._orders_cache = list(orders)
        self._apply_order_filter()
        self.refresh_dashboard()

    def _apply_order_filter(self) -> None:
        visible = filter_orders(
            self._orders_cache,
            self._order_search_input.text(),
            self._order_status_filter.currentText() or ALL_STATUSES,
        )
        self._order_model.update_rows(visible)

    def _selected_order(self) -> Optional[Order]:
        index = self._order_table.currentIndex()
        if not index.isValid():
            return None
        return self._order_model.row_at(index.row())

    def _handle_new_order(self) -> None:
        self._open_order_dialog()

    def _handle_edit_order(self) -> None:
        order = self._selected_order()
        if order is None:
            self._show_message("Select an order first.")
            return
        self._edit_order(order)

    def _edit_order(self, order: Optional[Order]) -> None:
        if order is None:
            return
        self._open_order_dialog(order=order)

    def _open_order_dialog(
        self,
        *,
        order: Optional[Order] = None,
        prefill_customer: Optional[Customer] = None,
    ) -> None:
        dialog = OrderDialog(
            session=self.session,
            customers=self._customers_cache,
            app_settings=self._app_settings,
            order=order,
            prefill_customer=prefill_customer,
            parent=self,
        )
        if dialog.exec():
            saved = dialog.saved_order()
            if saved is not None:
                self._set_status(
                    self._order_status_label,
                    f"Saved order {order_reference(saved.id)} for {saved.customer_name}.",
                )

    def _handle_delete_order(self) -> None:
        order = self._selected_order()
        if order is None or order.id is None:
            self._show_message("Select an order first.")
            return
        answer = QMessageBox.question(self, APP_NAME, f"Delete order {order_reference(order.id)}?")
        if answer != QMessageBox.StandardButton.Yes:
            return
        try:
            order_service.delete_order(order.id, session=self.session)
        except TailorBookError as exc:
            self._set_status(self._order_status_label, f"Delete failed: {exc}", error=True)
            return
        self._set_status(self._order_status_label, f"Deleted order {order_reference(order.id)}.")

    def _handle_view_customer(self) -> None:
        order = self._selected_order()
        if order is None:
            self._show_message("Select an order first.")
            return
        if not self._select_customer_row(order.customer_id):
            self._show_message(f"{order.customer_name} is no longer in the customer list.")
            return
        self._tab_widget.setCurrentWidget(self._customers_tab)

    def _select_customer_row(self, customer_id: str) -> bool:
        self._customer_search_input.clear()
        for row, customer in enumerate(self._customer_model.rows()):
            if customer.id == customer_id:
                index = self._customer_model.index(row, 0)
                self._customer_table.setCurrentIndex(index)
                self._customer_table.scrollTo(index)
                return True
        return False

    def _handle_invoice(self) -> None:
        order = self._selected_order()
        if order is None:
            self._show_message("Select an order first.")
            return
        self._export(
            lambda: export_service.generate_invoice(order, settings=self._app_settings),
            self._order_status_label,
        )

    def _handle_export_orders_pdf(self) -> None:
        self._export(
            lambda: export_service.export_orders_report(self._order_model.rows(), settings=self._app_settings),
            self._order_status_label,
        )

    def _handle_export_orders_csv(self) -> None:
        self._export(
            lambda: export_service.export_orders_spreadsheet(self._order_model.rows(), settings=self._app_settings),
            self._order_status_label,
        )

    # Settings tab
    def _build_settings_tab(self) -> None:
        layout = QVBoxLayout()
        self._settings_tab.setLayout(layout)

        form_layout = QFormLayout()
        layout.addLayout(form_layout)

        self._business_name_input = QLineEdit()
        form_layout.addRow("Business Name", self._business_name_input)

        self._business_tagline_input = QLineEdit()
        form_layout.addRow("Tagline", self._business_tagline_input)

        self._business_phone_input = QLineEdit()
        form_layout.addRow("Phone", self._business_phone_input)

        self._currency_symbol_input = QLineEdit()
        self._currency_symbol_input.setMaxLength(4)
        form_layout.addRow("Currency Symbol", self._currency_symbol_input)

        self._default_due_days_input = QSpinBox()
        self._default_due_days_input.setRange(0, 365)
        form_layout.addRow("Default Due (days)", self._default_due_days_input)

        self._invoice_terms_input = QPlainTextEdit()
        self._invoice_terms_input.setPlaceholderText("One term per line")
        form_layout.addRow("Invoice Terms", self._invoice_terms_input)

        button_row = QHBoxLayout()
        save_button = QPushButton("Save Settings")
        save_button.clicked.connect(self._handle_save_settings)
        button_row.addWidget(save_button)
        button_row.addStretch(1)
        layout.addLayout(button_row)

        self._settings_status_label = QLabel()
        layout.addWidget(self._settings_status_label)
        layout.addStretch(1)

        self._populate_settings()

    def _populate_settings(self) -> None:
        settings = self._app_settings
        self._business_name_input.setText(settings.business_name)
        self._business_tagline_input.setText(settings.business_tagline)
        self._business_phone_input.setText(settings.business_phone)
        self._currency_symbol_input.setText(settings.currency_symbol)
        self._default_due_days_input.setValue(settings.default_due_days)
        self._invoice_terms_input.setPlainText("\n".join(settings.invoice_terms))

    def _handle_save_settings(self) -> None:
        if self.session is None:
            self._set_status(self._settings_status_label, "Sign in to change settings.", error=True)
            return

        business_name = self._business_name_input.text().strip()
        if not business_name:
            self._set_status(self._settings_status_label, "Business name is required.", error=True)
            return

        terms = [line.strip() for line in self._invoice_terms_input.toPlainText().splitlines() if line.strip()]
        updated = replace(
            self._app_settings,
            business_name=business_name,
            business_tagline=self._business_tagline_input.text().strip(),
            business_phone=self._business_phone_input.text().strip(),
            currency_symbol=self._currency_symbol_input.text().strip() or self._app_settings.currency_symbol,
            default_due_days=self._default_due_days_input.value(),
            invoice_terms=terms,
        )
        try:
            self._app_settings = settings_repository.update_app_settings(updated)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to save settings")
            self._set_status(self._settings_status_label, f"Unable to save settings: {exc}", error=True)
            return

        self.setWindowTitle(f"{APP_NAME} - {self._app_settings.business_name}")
        self._populate_settings()
        self._apply_customer_filter()
        self._apply_order_filter()
        self.refresh_dashboard()
        self._set_status(self._settings_status_label, "Settings saved.")

    # Helpers
    def _export(self, build: Callable[[], ExportDocument], status_label: QLabel) -> None:
        directory = QFileDialog.getExistingDirectory(self, "Choose Export Folder", str(Path.home()))
        if not directory:
            return

        try:
            document = build()
            exported_path = export_service.save_document(document, directory)
        except TailorBookError as exc:
            self._set_status(status_label, f"Export failed: {exc}", error=True)
            return

        self._set_status(status_label, f"Exported to {exported_path}")

    def _money(self, value: object) -> str:
        return format_currency(value, self._app_settings.currency_symbol)

    def _set_status(self, label: QLabel, message: str, *, error: bool = False) -> None:
        label.setStyleSheet("color: #d32f2f;" if error else "color: #2e7d32;")
        label.setText(message)

    def _configure_table(self, table: QTableView) -> None:
        header = table.horizontalHeader()
        header.setStretchLastSection(True)
        header.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        table.setAlternatingRowColors(True)
        table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)

    def _wrap_group(self, title: str, widget: QWidget) -> QWidget:
        container = QWidget()
        layout = QVBoxLayout()
        container.setLayout(layout)
        label = QLabel(title)
        label.setStyleSheet("font-weight: bold;")
        layout.addWidget(label)
        layout.addWidget(widget)
        return container

    def _show_message(self, message: str) -> None:
        QMessageBox.information(self, APP_NAME, message)
