import logging
import os
import sys
import traceback

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QApplication, QFileDialog, QFormLayout, QHBoxLayout, QMessageBox, QVBoxLayout, QWidget
)
from qfluentwidgets import (
    BodyLabel, CaptionLabel, CardWidget, ComboBox, FluentIcon, FluentWindow, InfoBar,
    InfoBarPosition, PrimaryPushButton, PushButton, SearchLineEdit, StrongBodyLabel,
    Theme, TitleLabel, setTheme, setThemeColor
)

from thela_rental.core.config import AppConfig, load_config
from thela_rental.core.db_manager import DEFAULT_DB_NAME, DBManager
from thela_rental.core.encryption_utils import EncryptionUtil
from thela_rental.core.errors import PersistenceError
from thela_rental.core.files import FileReferenceHandler
from thela_rental.core.form import FIELD_LABELS, TEXT_FIELDS, RentalForm
from thela_rental.core.models import RentStatus
from thela_rental.core.persistence import PersistenceAdapter
from thela_rental.core.query import SORT_BY_DUE_DATE, SORT_BY_RENT, SORT_NONE, query_records
from thela_rental.core.record_store import RecordStore, ResultStatus
from thela_rental.core.reminders import ReminderScheduler
from thela_rental.core.report_exporter import default_report_name, export_csv, export_pdf
from thela_rental.core.summary import summarize
from thela_rental.core.utils import format_amount
from thela_rental.ui.custom_widgets import CustomLineEdit, link_fields
from thela_rental.ui.platform_services import QtDocumentPicker, QtNotificationService, QtUrlOpener
from thela_rental.ui.record_table import RentalRecordTable

SORT_CHOICES = [("Clear Sort", SORT_NONE), ("Sort by Due Date", SORT_BY_DUE_DATE), ("Sort by Rent", SORT_BY_RENT)]
FILTER_CHOICES = [("All Statuses", ""), ("Show Pending", RentStatus.PENDING.value), ("Show Paid", RentStatus.PAID.value)]

FIELD_PLACEHOLDERS = {
    "startDate": "YYYY-MM-DD",
    "dueDate": "YYYY-MM-DD",
    "monthlyRent": "e.g. 750",
    "securityDeposit": "e.g. 2000",
    "locationLink": "https://maps.google.com/...",
}


class RentalsInterface(QWidget):
    """The single screen: rental form on the left, filtered list and summary on the right."""

    def __init__(self, store: RecordStore, file_handler: FileReferenceHandler, config: AppConfig, parent=None):
        super().__init__(parent)
        self.setObjectName("RentalsId")
        self.store = store
        self.file_handler = file_handler
        self.config = config
        self.form = RentalForm()
        self.field_inputs = {}

        self.init_ui()
        self.store.add_listener(lambda _records: self.refresh_view())
        self.refresh_view()

    # ------------------------------------------------------------------ layout

    def init_ui(self):
        tab_layout = QHBoxLayout(self)
        tab_layout.setContentsMargins(12, 12, 12, 12)
        tab_layout.setSpacing(20)

        tab_layout.addWidget(self._create_form_card(), 2)
        tab_layout.addLayout(self._create_list_column(), 5)

    def _create_form_card(self):
        card = CardWidget(self)
        layout = QVBoxLayout(card)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)

        self.form_title = TitleLabel("Add / Manage Thelas", card)
        layout.addWidget(self.form_title)

        form_layout = QFormLayout()
        form_layout.setLabelAlignment(Qt.AlignRight | Qt.AlignVCenter)
        ordered_inputs = []
        for key in TEXT_FIELDS:
            line_edit = CustomLineEdit(card)
            line_edit.setPlaceholderText(FIELD_PLACEHOLDERS.get(key, FIELD_LABELS[key]))
            line_edit.setClearButtonEnabled(True)
            line_edit.textChanged.connect(lambda text, k=key: self.form.set_field(k, text))
            self.field_inputs[key] = line_edit
            ordered_inputs.append(line_edit)
            form_layout.addRow(BodyLabel(FIELD_LABELS[key], card), line_edit)

        self.status_combo = ComboBox(card)
        self.status_combo.addItems([status.value for status in RentStatus])
        self.status_combo.currentTextChanged.connect(lambda text: self.form.set_field("rentStatus", text))
        form_layout.addRow(BodyLabel("Rent Status", card), self.status_combo)
        link_fields(ordered_inputs)
        layout.addLayout(form_layout)

        proof_row = QHBoxLayout()
        self.pick_file_button = PushButton(FluentIcon.FOLDER, "Pick Address Proof File", card)
        self.pick_file_button.clicked.connect(self.pick_file)
        self.proof_label = CaptionLabel("No file selected", card)
        proof_row.addWidget(self.pick_file_button)
        proof_row.addWidget(self.proof_label, 1)
        layout.addLayout(proof_row)

        button_row = QHBoxLayout()
        self.save_button = PrimaryPushButton(FluentIcon.SAVE, "Add / Save Cart", card)
        self.save_button.clicked.connect(self.save_cart)
        self.clear_button = PushButton(FluentIcon.CANCEL, "Clear", card)
        self.clear_button.clicked.connect(self.clear_form)
        button_row.addWidget(self.save_button)
        button_row.addWidget(self.clear_button)
        layout.addLayout(button_row)
        layout.addStretch(1)

        # Enter on the last field saves the cart
        ordered_inputs[-1].returnPressed.connect(self.save_cart)
        return card

    def _create_list_column(self):
        column = QVBoxLayout()
        column.setSpacing(10)

        self.search_input = SearchLineEdit(self)
        self.search_input.setPlaceholderText("Search Cart ID / Renter / Status")
        self.search_input.textChanged.connect(lambda _text: self.refresh_view())
        column.addWidget(self.search_input)

        controls = QHBoxLayout()
        self.sort_combo = ComboBox(self)
        for label, value in SORT_CHOICES:
            self.sort_combo.addItem(label, userData=value)
        self.sort_combo.currentIndexChanged.connect(lambda _index: self.refresh_view())
        self.filter_combo = ComboBox(self)
        for label, value in FILTER_CHOICES:
            self.filter_combo.addItem(label, userData=value)
        self.filter_combo.currentIndexChanged.connect(lambda _index: self.refresh_view())
        controls.addWidget(self.sort_combo)
        controls.addWidget(self.filter_combo)
        controls.addStretch(1)
        column.addLayout(controls)

        summary_card = CardWidget(self)
        summary_layout = QHBoxLayout(summary_card)
        summary_layout.setContentsMargins(16, 10, 16, 10)
        summary_layout.addWidget(StrongBodyLabel("Monthly Summary", summary_card))
        self.collected_label = BodyLabel(summary_card)
        self.pending_label = BodyLabel(summary_card)
        summary_layout.addStretch(1)
        summary_layout.addWidget(self.collected_label)
        summary_layout.addSpacing(24)
        summary_layout.addWidget(self.pending_label)
        column.addWidget(summary_card)

        self.table = RentalRecordTable(self.config.currency_symbol, self)
        self.table.doubleClicked.connect(lambda _index: self.edit_selected())
        column.addWidget(self.table, 1)

        actions = QHBoxLayout()
        self.edit_button = PushButton(FluentIcon.EDIT, "Edit", self)
        self.edit_button.clicked.connect(self.edit_selected)
        self.mark_paid_button = PushButton(FluentIcon.ACCEPT, "Mark Paid", self)
        self.mark_paid_button.clicked.connect(self.mark_selected_paid)
        self.delete_button = PushButton(FluentIcon.DELETE, "Delete", self)
        self.delete_button.clicked.connect(self.delete_selected)
        self.preview_button = PushButton(FluentIcon.DOCUMENT, "Preview File", self)
        self.preview_button.clicked.connect(self.preview_selected_file)
        self.location_button = PushButton(FluentIcon.LINK, "View Location", self)
        self.location_button.clicked.connect(self.open_selected_location)
        for button in (self.edit_button, self.mark_paid_button, self.delete_button, self.preview_button, self.location_button):
            actions.addWidget(button)
        actions.addStretch(1)

        self.export_csv_button = PushButton(FluentIcon.SAVE_AS, "Export CSV", self)
        self.export_csv_button.clicked.connect(self.export_view_csv)
        self.export_pdf_button = PushButton(FluentIcon.PRINT, "Export PDF", self)
        self.export_pdf_button.clicked.connect(self.export_view_pdf)
        actions.addWidget(self.export_csv_button)
        actions.addWidget(self.export_pdf_button)
        column.addLayout(actions)

        self.table.itemSelectionChanged.connect(self._update_action_buttons)
        return column

    # -------------------------------------------------------------- feedback

    def show_info(self, kind, title, text, duration=3000):
        getattr(InfoBar, kind)(
            title=title,
            content=text,
            orient=Qt.Horizontal,
            isClosable=True,
            position=InfoBarPosition.TOP_RIGHT,
            duration=duration,
            parent=self.window(),
        )

    def _report_result(self, result, success_title, success_text):
        if result.ok:
            self.show_info("success", success_title, success_text)
        elif result.status == ResultStatus.VALIDATION_ERROR:
            self.show_info("warning", "Cannot Save Cart", result.message, 4000)
        else:
            self.show_info("error", "Storage Error", f"The change was not saved: {result.message}", 6000)

    # ------------------------------------------------------------------ view

    def current_view(self):
        return query_records(
            self.store.list_records(),
            search_term=self.search_input.text(),
            filter_status=self.filter_combo.currentData() or "",
            sort_option=self.sort_combo.currentData() or SORT_NONE,
        )

    def refresh_view(self):
        records = self.store.list_records()
        self.table.set_records(self.current_view())

        summary = summarize(records)
        currency = self.config.currency_symbol
        self.collected_label.setText(f"Total Collected: {format_amount(summary.total_collected, currency)}")
        self.pending_label.setText(f"Total Pending: {format_amount(summary.total_pending, currency)}")
        self._update_action_buttons()

    def _update_action_buttons(self):
        record = self.table.selected_record()
        has_record = record is not None
        writable = not self.store.load_failed
        self.save_button.setEnabled(writable)
        self.edit_button.setEnabled(has_record)
        self.delete_button.setEnabled(writable and has_record)
        self.mark_paid_button.setEnabled(writable and has_record and not record.is_paid)
        self.preview_button.setEnabled(has_record and record.address_proof_file is not None)
        self.location_button.setEnabled(has_record and bool(record.location_link))

    # ------------------------------------------------------------------ form

    def _sync_widgets_from_form(self):
        for key, line_edit in self.field_inputs.items():
            line_edit.blockSignals(True)
            line_edit.setText(self.form.get_field(key))
            line_edit.blockSignals(False)
        self.status_combo.blockSignals(True)
        self.status_combo.setCurrentText(self.form.rent_status.value)
        self.status_combo.blockSignals(False)
        proof = self.form.address_proof_file
        self.proof_label.setText(proof.name if proof else "No file selected")
        self.form_title.setText(f"Edit Cart {self.form.editing_cart_id}" if self.form.is_editing else "Add / Manage Thelas")

    def clear_form(self):
        self.form.reset()
        self._sync_widgets_from_form()

    def pick_file(self):
        ref = self.file_handler.pick_file(self.form)
        if ref is not None:
            self.proof_label.setText(ref.name)

    def save_cart(self):
        record = self.form.to_record()

        if self.form.is_editing:
            result = self.store.update(self.form.editing_cart_id, record)
            self._report_result(result, "Cart Updated", f"Cart {record.cart_id} saved.")
        else:
            result = self.store.add(record)
            text = f"Cart {record.cart_id} added."
            if result.reminder is not None:
                text += f" Reminder set for {result.reminder.trigger:%d %b %Y, %H:%M}."
            self._report_result(result, "Cart Added", text)

        if result.ok:
            self.clear_form()

    # --------------------------------------------------------------- actions

    def edit_selected(self):
        record = self.table.selected_record()
        if record is None:
            return
        self.form.load_record(record)
        self._sync_widgets_from_form()

    def mark_selected_paid(self):
        record = self.table.selected_record()
        if record is None:
            return
        result = self.store.mark_paid(record.cart_id)
        self._report_result(result, "Rent Paid", f"Cart {record.cart_id} marked as paid.")

    def delete_selected(self):
        record = self.table.selected_record()
        if record is None:
            return
        reply = QMessageBox.question(
            self, "Delete Cart",
            f"Delete cart {record.cart_id} rented to {record.renter_name}?",
            QMessageBox.Yes | QMessageBox.No, QMessageBox.No,
        )
        if reply != QMessageBox.Yes:
            return
        result = self.store.remove(record.cart_id)
        self._report_result(result, "Cart Deleted", f"Cart {record.cart_id} removed.")
        if result.ok and self.form.editing_cart_id == record.cart_id:
            self.clear_form()

    def preview_selected_file(self):
        record = self.table.selected_record()
        if record is not None and not self.file_handler.open_file(record.address_proof_file):
            self.show_info("warning", "No File", "This cart has no address proof file.")

    def open_selected_location(self):
        record = self.table.selected_record()
        if record is not None and not self.file_handler.open_location(record):
            self.show_info("warning", "No Location", "This cart has no location link.")

    def _ask_export_path(self, title, extension, file_filter):
        default_path = os.path.join(os.path.expanduser("~/Documents"), default_report_name(extension))
        file_path, _ = QFileDialog.getSaveFileName(self, title, default_path, file_filter)
        return file_path

    def export_view_csv(self):
        file_path = self._ask_export_path("Export CSV", "csv", "CSV Files (*.csv);;All Files (*)")
        if not file_path:
            return
        try:
            count = export_csv(self.current_view(), file_path)
            self.show_info("success", "CSV Saved", f"{count} carts exported to {file_path}")
        except PermissionError:
            self.show_info("warning", "Permission Denied", f"Cannot save to {file_path}. The file may be open in another program.", 6000)
        except OSError as e:
            self.show_info("error", "CSV Save Error", f"Failed to save CSV: {e}", 6000)

    def export_view_pdf(self):
        file_path = self._ask_export_path("Export PDF", "pdf", "PDF Files (*.pdf);;All Files (*)")
        if not file_path:
            return
        try:
            export_pdf(self.current_view(), file_path, summarize(self.store.list_records()), self.config.currency_symbol)
            self.show_info("success", "PDF Saved", f"Report saved to {file_path}")
        except PermissionError:
            self.show_info("warning", "Permission Denied", f"Cannot save to {file_path}. The file may be open in another program.", 6000)
        except Exception as e:
            logging.error(f"PDF export failed: {e}\n{traceback.format_exc()}")
            self.show_info("error", "PDF Save Error", f"Failed to save PDF: {e}", 6000)


class ThelaRentalApp(FluentWindow):
    def __init__(self, db_name=DEFAULT_DB_NAME):
        super().__init__()

        font = QFont("Segoe UI", 9)
        QApplication.setFont(font)
        self.setWindowTitle("Thela Rental Management")
        self.setWindowIcon(FluentIcon.HOME.icon())
        self.resize(1300, 820)
        self.setMinimumSize(900, 600)

        setTheme(Theme.DARK)
        setThemeColor('#0078D4')

        self.db_manager = DBManager(db_name)
        self.config = load_config(self.db_manager)
        encryption_util = EncryptionUtil() if self.config.encrypt_storage else None
        self.adapter = PersistenceAdapter(self.db_manager, self.config.storage_key, encryption_util)

        self.notification_service = QtNotificationService(self)
        self.reminder_scheduler = ReminderScheduler(
            self.notification_service,
            reminder_hour=self.config.reminder_hour,
            reminder_minute=self.config.reminder_minute,
            currency_symbol=self.config.currency_symbol,
        )

        self.store = RecordStore(self.adapter, self.reminder_scheduler)
        load_error = None
        try:
            self.store.load()
        except PersistenceError as e:
            logging.error(f"Could not read stored rentals: {e}")
            load_error = str(e)
        self.reminder_scheduler.schedule_all(self.store.list_records())

        self.file_handler = FileReferenceHandler(QtDocumentPicker(self), QtUrlOpener())

        self.rentals_interface = RentalsInterface(self.store, self.file_handler, self.config, self)
        self.addSubInterface(self.rentals_interface, FluentIcon.PEOPLE, 'Thela Rentals')
        self.center_window()

        if load_error:
            self.rentals_interface.show_info("error", "Storage Error", f"Stored rentals could not be read: {load_error}", -1)

    def center_window(self):
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geometry = screen.availableGeometry()
        self.move(geometry.center() - self.rect().center())

    def closeEvent(self, event):
        self.notification_service.stop()
        self.db_manager.close()
        super().closeEvent(event)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    argv = sys.argv if argv is None else argv
    app = QApplication(argv)
    window = ThelaRentalApp()
    window.show()
    return app.exec_()
