from typing import List, Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import QAbstractItemView, QHeaderView, QTableWidgetItem
from qfluentwidgets import TableWidget

from thela_rental.core.models import RentalRecord
from thela_rental.ui.custom_widgets import style_fluent_table

COLUMNS = ["CART ID", "RENTER", "MOBILE", "MONTHLY RENT", "DUE DATE", "STATUS", "PROOF", "LOCATION"]

PAID_COLOR = QColor("#2e7d32")
PENDING_COLOR = QColor("#c62828")


class RentalRecordTable(TableWidget):
    """Read-only table of the current view. Row order is decided by the query engine, not by header clicks."""

    def __init__(self, currency_symbol: str = "₹", parent=None):
        super().__init__(parent)
        self.currency_symbol = currency_symbol
        self._records: List[RentalRecord] = []

        self.setColumnCount(len(COLUMNS))
        self.setHorizontalHeaderLabels(COLUMNS)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setSelectionMode(QAbstractItemView.SingleSelection)
        self.setSortingEnabled(False)
        style_fluent_table(self)

        header = self.horizontalHeader()
        header.setSectionResizeMode(QHeaderView.Stretch)

    def _item(self, text: str, align=Qt.AlignCenter) -> QTableWidgetItem:
        item = QTableWidgetItem(text)
        item.setTextAlignment(align | Qt.AlignVCenter)
        return item

    def set_records(self, records: List[RentalRecord]):
        selected = self.selected_record()
        self._records = list(records)
        self.setRowCount(len(self._records))
        for row, record in enumerate(self._records):
            self.setItem(row, 0, self._item(record.cart_id))
            self.setItem(row, 1, self._item(record.renter_name, Qt.AlignLeft))
            self.setItem(row, 2, self._item(record.mobile_no))
            self.setItem(row, 3, self._item(f"{self.currency_symbol}{record.monthly_rent}", Qt.AlignRight))
            self.setItem(row, 4, self._item(record.due_date))

            status_item = self._item(record.rent_status.value)
            status_item.setForeground(PAID_COLOR if record.is_paid else PENDING_COLOR)
            self.setItem(row, 5, status_item)

            proof = record.address_proof_file
            self.setItem(row, 6, self._item(proof.name if proof else "-"))
            self.setItem(row, 7, self._item("View" if record.location_link else "-"))

        if selected is not None:
            self.select_cart(selected.cart_id)

    def selected_record(self) -> Optional[RentalRecord]:
        row = self.currentRow()
        if 0 <= row < len(self._records) and self.selectionModel().hasSelection():
            return self._records[row]
        return None

    def select_cart(self, cart_id: str):
        for row, record in enumerate(self._records):
            if record.cart_id == cart_id:
                self.selectRow(row)
                return
        self.clearSelection()
