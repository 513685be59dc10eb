from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional, Tuple

from PySide6.QtCore import QDate, QSignalBlocker, Qt
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..models.shop_models import AppSettings, Customer, CustomLineDraft, Order, PredefinedLineDraft
from ..services import order_service, pricing
from ..services.errors import TailorBookError, ValidationError
from ..services.formatting import format_currency
from ..services.line_composer import PREDEFINED_LINES, compose_line_items, split_line_items
from ..services.session import Session


_MAX_AMOUNT = 10_000_000.0


class OrderDialog(QDialog):
    """Create or edit an order.

    The dialog stays open on validation errors so the edit is not lost.
    """

    def __init__(
        self,
        *,
        session: Optional[Session],
        customers: List[Customer],
        app_settings: AppSettings,
        order: Optional[Order] = None,
        prefill_customer: Optional[Customer] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._customers = list(customers)
        self._app_settings = app_settings
        self._order = order
        self._saved_order: Optional[Order] = None
        self._predefined_controls: Dict[str, Tuple[QCheckBox, QSpinBox, QDoubleSpinBox]] = {}

        self.setWindowTitle("Edit Order" if order is not None else "Create New Bill")
        self.resize(640, 720)

        layout = QVBoxLayout()
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(10)
        self.setLayout(layout)

        customer_form = QFormLayout()
        layout.addLayout(customer_form)

        self._customer_combo = QComboBox()
        self._customer_combo.setEditable(True)
        self._customer_combo.setInsertPolicy(QComboBox.InsertPolicy.NoInsert)
        self._customer_combo.lineEdit().setPlaceholderText("Search Customer by Name or Phone...")
        self._customer_combo.addItem("", None)
        for customer in self._customers:
            self._customer_combo.addItem(f"{customer.name} ({customer.phone})", customer.id)
        completer = self._customer_combo.completer()
        if completer is not None:
            completer.setFilterMode(Qt.MatchFlag.MatchContains)
            completer.setCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        customer_form.addRow("Customer *", self._customer_combo)

        layout.addWidget(self._build_predefined_group())
        layout.addWidget(self._build_custom_group())

        details_form = QFormLayout()
        layout.addLayout(details_form)

        self._due_date_input = QDateEdit()
        self._due_date_input.setCalendarPopup(True)
        self._due_date_input.setDisplayFormat("MMM d, yyyy")
        details_form.addRow("Due Date", self._due_date_input)

        self._status_input = QComboBox()
        self._status_input.addItems(order_service.list_statuses())
        details_form.addRow("Order Status", self._status_input)

        self._shirts_completed_input = QSpinBox()
        self._shirts_completed_input.setRange(0, 999)
        details_form.addRow("Shirts Completed", self._shirts_completed_input)

        self._pants_completed_input = QSpinBox()
        self._pants_completed_input.setRange(0, 999)
        details_form.addRow("Pants Completed", self._pants_completed_input)

        self._paid_input = QDoubleSpinBox()
        self._paid_input.setDecimals(2)
        self._paid_input.setRange(0.0, _MAX_AMOUNT)
        self._paid_input.setPrefix(app_settings.currency_symbol)
        self._paid_input.valueChanged.connect(self._refresh_totals)
        details_form.addRow("Paid Amount", self._paid_input)

        totals_row = QHBoxLayout()
        self._total_label = QLabel()
        self._total_label.setStyleSheet("font-size: 16px; font-weight: bold;")
        self._balance_label = QLabel()
        self._balance_label.setStyleSheet("font-size: 16px; font-weight: bold;")
        self._payment_status_label = QLabel()
        totals_row.addWidget(self._total_label)
        totals_row.addWidget(self._balance_label)
        totals_row.addWidget(self._payment_status_label)
        totals_row.addStretch(1)
        layout.addLayout(totals_row)

        self._overpaid_label = QLabel()
        self._overpaid_label.setStyleSheet("color: #b45309;")
        layout.addWidget(self._overpaid_label)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

        self._populate_fields(prefill_customer)
        self._refresh_totals()

    def saved_order(self) -> Optional[Order]:
        return self._saved_order

    def _build_predefined_group(self) -> QWidget:
        group = QGroupBox("Standard Items")
        grid = QGridLayout()
        group.setLayout(grid)
        grid.addWidget(QLabel("Item"), 0, 0)
        grid.addWidget(QLabel("Qty"), 0, 1)
        grid.addWidget(QLabel("Cost"), 0, 2)

        for row, (kind, label) in enumerate(PREDEFINED_LINES, start=1):
            checkbox = QCheckBox(label)
            quantity = QSpinBox()
            quantity.setRange(1, 999)
            cost = QDoubleSpinBox()
            cost.setDecimals(2)
            cost.setRange(0.0, _MAX_AMOUNT)
            cost.setPrefix(self._app_settings.currency_symbol)

            checkbox.toggled.connect(self._refresh_totals)
            quantity.valueChanged.connect(self._refresh_totals)
            cost.valueChanged.connect(self._refresh_totals)

            grid.addWidget(checkbox, row, 0)
            grid.addWidget(quantity, row, 1)
            grid.addWidget(cost, row, 2)
            self._predefined_controls[kind] = (checkbox, quantity, cost)
        return group

    def _build_custom_group(self) -> QWidget:
        group = QGroupBox("Custom Items")
        group_layout = QVBoxLayout()
        group.setLayout(group_layout)

        self._custom_table = QTableWidget(0, 3)
        self._custom_table.setHorizontalHeaderLabels(["Item Name", "Qty", "Cost"])
        header = self._custom_table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.ResizeToContents)
        header.setSectionResizeMode(2, QHeaderView.ResizeMode.ResizeToContents)
        self._custom_table.verticalHeader().setVisible(False)
        self._custom_table.setAlternatingRowColors(True)
        self._custom_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._custom_table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._custom_table.cellChanged.connect(self._refresh_totals)
        group_layout.addWidget(self._custom_table)

        button_row = QHBoxLayout()
        add_button = QPushButton("Add Item")
        add_button.clicked.connect(self._handle_add_custom_line)
        remove_button = QPushButton("Remove")
        remove_button.clicked.connect(self._handle_remove_custom_line)
        button_row.addWidget(add_button)
        button_row.addWidget(remove_button)
        button_row.addStretch(1)
        group_layout.addLayout(button_row)
        return group

    def _populate_fields(self, prefill_customer: Optional[Customer]) -> None:
        if self._order is None:
            due = order_service.default_due_date(settings=self._app_settings)
            self._due_date_input.setDate(QDate(due.year, due.month, due.day))
            if prefill_customer is not None:
                self._select_customer(prefill_customer.id)
            return

        order = self._order
        self._select_customer(order.customer_id)
        if self._customer_combo.currentIndex() <= 0:
            # The customer was deleted; keep the snapshot visible.
            self._customer_combo.setEditText(f"{order.customer_name} ({order.phone})")

        predefined, custom_lines = split_line_items(order.items)
        for kind, draft in predefined.items():
            checkbox, quantity, cost = self._predefined_controls[kind]
            checkbox.setChecked(draft.enabled)
            quantity.setValue(int(pricing.as_amount(draft.quantity)) or 1)
            cost.setValue(pricing.as_amount(draft.unit_cost))

        blocker = QSignalBlocker(self._custom_table)
        for line in custom_lines:
            self._append_custom_line(line)
        del blocker

        if order.due_date is not None:
            self._due_date_input.setDate(QDate(order.due_date.year, order.due_date.month, order.due_date.day))
        status_index = self._status_input.findText(order.status)
        if status_index >= 0:
            self._status_input.setCurrentIndex(status_index)
        self._shirts_completed_input.setValue(order.shirts_completed)
        self._pants_completed_input.setValue(order.pants_completed)
        self._paid_input.setValue(pricing.as_amount(order.paid_amount))

    def _select_customer(self, customer_id: Optional[str]) -> None:
        index = self._customer_combo.findData(customer_id)
        if index >= 0:
            self._customer_combo.setCurrentIndex(index)

    def _selected_customer(self) -> Optional[Customer]:
        customer_id = self._customer_combo.currentData()
        if customer_id is None:
            return None
        for customer in self._customers:
            if customer.id == customer_id:
                return customer
        return None

    def _append_custom_line(self, line: CustomLineDraft | None = None) -> None:
        draft = line or CustomLineDraft()
        row = self._custom_table.rowCount()
        self._custom_table.insertRow(row)
        self._custom_table.setItem(row, 0, QTableWidgetItem(draft.label))
        quantity_item = QTableWidgetItem(str(draft.quantity))
        quantity_item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self._custom_table.setItem(row, 1, quantity_item)
        cost_item = QTableWidgetItem(f"{pricing.as_amount(draft.unit_cost):g}")
        cost_item.setTextAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        self._custom_table.setItem(row, 2, cost_item)

    def _handle_add_custom_line(self) -> None:
        self._append_custom_line()
        self._refresh_totals()

    def _handle_remove_custom_line(self) -> None:
        current = self._custom_table.currentRow()
        if current < 0:
            return
        self._custom_table.removeRow(current)
        self._refresh_totals()

    def _collect_predefined(self) -> Dict[str, PredefinedLineDraft]:
        return {
            kind: PredefinedLineDraft(
                enabled=checkbox.isChecked(),
                quantity=quantity.value(),
                unit_cost=cost.value(),
            )
            for kind, (checkbox, quantity, cost) in self._predefined_controls.items()
        }

    def _collect_custom_lines(self) -> List[CustomLineDraft]:
        lines: List[CustomLineDraft] = []
        for row in range(self._custom_table.rowCount()):
            label_item = self._custom_table.item(row, 0)
            quantity_item = self._custom_table.item(row, 1)
            cost_item = self._custom_table.item(row, 2)
            lines.append(
                CustomLineDraft(
                    label=label_item.text() if label_item else "",
                    quantity=int(pricing.as_amount(quantity_item.text() if quantity_item else 0)),
                    unit_cost=pricing.as_amount(cost_item.text() if cost_item else 0),
                )
            )
        return lines

    def _refresh_totals(self, *_args) -> None:
        symbol = self._app_settings.currency_symbol
        items = compose_line_items(self._collect_predefined(), self._collect_custom_lines())
        total = pricing.compute_total(items)

        paid = self._paid_input.value()
        balance = pricing.compute_balance(total, paid)
        # Overpayment is saved as entered; the form only warns about it.
        if paid > total:
            self._overpaid_label.setText(f"Paid exceeds total by {format_currency(paid - total, symbol)}")
        else:
            self._overpaid_label.clear()
        self._total_label.setText(f"Total: {format_currency(total, symbol)}")
        self._balance_label.setText(f"Balance: {format_currency(balance, symbol)}")
        self._payment_status_label.setText(f"Payment: {pricing.classify_payment_status(balance, paid)}")

    def _due_date(self) -> Optional[date]:
        value = self._due_date_input.date()
        if not value.isValid():
            return None
        return date(value.year(), value.month(), value.day())

    def accept(self) -> None:  # noqa: D401
        try:
            draft = order_service.build_order(
                self._selected_customer(),
                self._collect_predefined(),
                self._collect_custom_lines(),
                due_date=self._due_date(),
                status=self._status_input.currentText(),
                paid_amount=self._paid_input.value(),
                shirts_completed=self._shirts_completed_input.value(),
                pants_completed=self._pants_completed_input.value(),
                existing=self._order,
            )
            self._saved_order = order_service.save_order(draft, session=self._session)
        except ValidationError as exc:
            QMessageBox.warning(self, "Order", str(exc))
            return
        except TailorBookError as exc:
            QMessageBox.critical(self, "Order", str(exc))
            return
        super().accept()
