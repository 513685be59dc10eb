from __future__ import annotations

from typing import List, Optional

from PySide6.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..models.shop_models import Customer, MeasurementEntry
from ..services import customer_service
from ..services.errors import TailorBookError, ValidationError
from ..services.session import Session


class CustomerDialog(QDialog):
    def __init__(
        self,
        *,
        session: Optional[Session],
        customer: Optional[Customer] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._customer = customer
        self._saved_customer: Optional[Customer] = None

        self.setWindowTitle("Edit Customer" if customer is not None else "Add New Customer")
        self.resize(520, 560)

        layout = QVBoxLayout()
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(10)
        self.setLayout(layout)

        form_layout = QFormLayout()
        layout.addLayout(form_layout)

        self._name_input = QLineEdit()
        form_layout.addRow("Name *", self._name_input)

        self._reference_input = QLineEdit()
        self._reference_input.setPlaceholderText("Optional alias")
        form_layout.addRow("Reference", self._reference_input)

        self._phone_input = QLineEdit()
        form_layout.addRow("Phone *", self._phone_input)

        measurements_label = QLabel("Measurements")
        measurements_label.setStyleSheet("font-weight: bold;")
        layout.addWidget(measurements_label)

        measurement_form = QFormLayout()
        layout.addLayout(measurement_form)

        self._shirt_input = QLineEdit()
        measurement_form.addRow("Shirt", self._shirt_input)

        self._pant_input = QLineEdit()
        measurement_form.addRow("Pant", self._pant_input)

        self._others_table = QTableWidget(0, 2)
        self._others_table.setHorizontalHeaderLabels(["Label", "Value"])
        header = self._others_table.horizontalHeader()
        header.setSectionResizeMode(0, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        self._others_table.verticalHeader().setVisible(False)
        self._others_table.setAlternatingRowColors(True)
        self._others_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._others_table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        layout.addWidget(self._others_table)

        button_row = QHBoxLayout()
        add_button = QPushButton("Add Measurement")
        add_button.clicked.connect(self._handle_add_row)
        remove_button = QPushButton("Remove")
        remove_button.clicked.connect(self._handle_remove_row)
        button_row.addWidget(add_button)
        button_row.addWidget(remove_button)
        button_row.addStretch(1)
        layout.addLayout(button_row)

        button_box = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

        self._populate_fields()

    def saved_customer(self) -> Optional[Customer]:
        return self._saved_customer

    def _populate_fields(self) -> None:
        if self._customer is None:
            return
        self._name_input.setText(self._customer.name)
        self._reference_input.setText(self._customer.reference_name)
        self._phone_input.setText(self._customer.phone)
        self._shirt_input.setText(self._customer.measurements.shirt)
        self._pant_input.setText(self._customer.measurements.pant)
        for entry in self._customer.measurements.others:
            self._append_row(entry)

    def _append_row(self, entry: MeasurementEntry | None = None) -> None:
        row = self._others_table.rowCount()
        self._others_table.insertRow(row)
        self._others_table.setItem(row, 0, QTableWidgetItem(entry.label if entry else ""))
        self._others_table.setItem(row, 1, QTableWidgetItem(entry.value if entry else ""))

    def _handle_add_row(self) -> None:
        self._append_row()

    def _handle_remove_row(self) -> None:
        current = self._others_table.currentRow()
        if current < 0:
            return
        self._others_table.removeRow(current)

    def _collect_others(self) -> List[MeasurementEntry]:
        entries: List[MeasurementEntry] = []
        for row in range(self._others_table.rowCount()):
            label_item = self._others_table.item(row, 0)
            value_item = self._others_table.item(row, 1)
            entries.append(
                MeasurementEntry(
                    label=label_item.text() if label_item else "",
                    value=value_item.text() if value_item else "",
                )
            )
        return entries

    def accept(self) -> None:  # noqa: D401
        try:
            customer = customer_service.build_customer(
                self._name_input.text(),
                self._phone_input.text(),
                reference_name=self._reference_input.text(),
                shirt=self._shirt_input.text(),
                pant=self._pant_input.text(),
                others=self._collect_others(),
                existing=self._customer,
            )
            self._saved_customer = customer_service.save_customer(customer, session=self._session)
        except ValidationError as exc:
            QMessageBox.warning(self, "Customer", str(exc))
            return
        except TailorBookError as exc:
            QMessageBox.critical(self, "Customer", str(exc))
            return
        super().accept()
