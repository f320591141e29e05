import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from thela_rental.core.errors import PersistenceError, SchedulingError, ValidationError
from thela_rental.core.models import RentalRecord, RentStatus
from thela_rental.core.persistence import PersistenceAdapter
from thela_rental.core.reminders import ReminderScheduler
from thela_rental.core.services import NotificationRequest


class ResultStatus(str, Enum):
    OK = "ok"
    VALIDATION_ERROR = "validation_error"
    PERSISTENCE_ERROR = "persistence_error"


@dataclass(frozen=True)
class StoreResult:
    status: ResultStatus
    message: str = ""
    record: Optional[RentalRecord] = None
    affected: int = 0
    missing_fields: tuple = ()
    reminder: Optional[NotificationRequest] = None

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.OK


def validate_record(record: RentalRecord):
    """Raise ValidationError if a required field (cart id, renter name, monthly rent) is empty."""
    missing = record.missing_required_fields()
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", missing)


class RecordStore:
    """
    Owns the rental records for the lifetime of the app.

    Every mutation builds the new list, saves it, and only then swaps it in,
    so a failed save leaves the in-memory records exactly as they were.
    Listeners are called with a fresh snapshot after each successful change.
    """

    def __init__(self, adapter: PersistenceAdapter, reminder_scheduler: Optional[ReminderScheduler] = None):
        self.adapter = adapter
        self.reminder_scheduler = reminder_scheduler
        self._records: List[RentalRecord] = []
        self._load_failed = False
        self._listeners: List[Callable[[List[RentalRecord]], None]] = []

    @classmethod
    def init(cls, adapter: PersistenceAdapter, reminder_scheduler: Optional[ReminderScheduler] = None) -> "RecordStore":
        """Create a store and load the persisted records into it."""
        store = cls(adapter, reminder_scheduler)
        store.load()
        return store

    def load(self) -> List[RentalRecord]:
        """
        Replace the in-memory records with the stored ones.

        If reading storage fails, the store refuses every change until a later
        load succeeds, so the unreadable blob is never overwritten.
        """
        try:
            records = self.adapter.load()
        except PersistenceError:
            self._load_failed = True
            raise
        self._records = list(records)
        self._load_failed = False
        return self.list_records()

    @property
    def load_failed(self) -> bool:
        return self._load_failed

    # ------------------------------------------------------------------ reads

    def list_records(self) -> List[RentalRecord]:
        return list(self._records)

    def get(self, cart_id: str) -> Optional[RentalRecord]:
        for record in self._records:
            if record.cart_id == cart_id:
                return record
        return None

    def __len__(self):
        return len(self._records)

    # -------------------------------------------------------------- listeners

    def add_listener(self, callback: Callable[[List[RentalRecord]], None]):
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[List[RentalRecord]], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        snapshot = self.list_records()
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception as e:
                logging.error(f"Record store listener failed: {e}", exc_info=True)

    # ---------------------------------------------------------------- helpers

    def _commit(self, new_records: List[RentalRecord]) -> Optional[StoreResult]:
        """Persist ``new_records`` and swap them in. Returns a failure result or None."""
        if self._load_failed:
            return StoreResult(
                ResultStatus.PERSISTENCE_ERROR,
                message="Stored records could not be read; changes are disabled until they load.",
            )
        try:
            self.adapter.save(new_records)
        except PersistenceError as e:
            return StoreResult(ResultStatus.PERSISTENCE_ERROR, message=str(e))
        self._records = new_records
        return None

    def _schedule_reminder(self, record: RentalRecord) -> Optional[NotificationRequest]:
        if self.reminder_scheduler is None or not record.due_date:
            return None
        try:
            return self.reminder_scheduler.schedule(record)
        except SchedulingError as e:
            logging.warning(f"Rent reminder not scheduled: {e}")
            return None

    def _has_reminder_date(self, record: RentalRecord) -> bool:
        return self.reminder_scheduler is not None and self.reminder_scheduler.build_request(record) is not None

    def _cancel_reminder(self, cart_id: str):
        if self.reminder_scheduler is not None:
            self.reminder_scheduler.cancel(cart_id)

    @staticmethod
    def _invalid(error: ValidationError) -> StoreResult:
        return StoreResult(ResultStatus.VALIDATION_ERROR, message=str(error), missing_fields=error.missing_fields)

    # -------------------------------------------------------------- mutations

    def add(self, record: RentalRecord) -> StoreResult:
        """
        Append a new record, save, then schedule its due-date reminder.

        Rejected with a validation result when a required field is empty or the
        cart id is already in use.
        """
        try:
            validate_record(record)
        except ValidationError as e:
            return self._invalid(e)
        if self.get(record.cart_id) is not None:
            return StoreResult(ResultStatus.VALIDATION_ERROR, message=f"Cart ID '{record.cart_id}' already exists.")

        failure = self._commit(self._records + [record])
        if failure:
            return failure

        logging.info(f"Added cart {record.cart_id} rented to {record.renter_name}.")
        reminder = self._schedule_reminder(record)
        self._notify()
        return StoreResult(ResultStatus.OK, record=record, affected=1, reminder=reminder)

    def update(self, cart_id: str, record: RentalRecord) -> StoreResult:
        """Replace the record stored under ``cart_id`` with ``record``."""
        try:
            validate_record(record)
        except ValidationError as e:
            return self._invalid(e)

        existing = self.get(cart_id)
        if existing is None:
            return StoreResult(ResultStatus.VALIDATION_ERROR, message=f"Cart ID '{cart_id}' not found.")
        if record.cart_id != cart_id and self.get(record.cart_id) is not None:
            return StoreResult(ResultStatus.VALIDATION_ERROR, message=f"Cart ID '{record.cart_id}' already exists.")

        new_records = [record if r.cart_id == cart_id else r for r in self._records]
        failure = self._commit(new_records)
        if failure:
            return failure

        logging.info(f"Updated cart {cart_id}.")
        reminder = None
        if record.cart_id != cart_id or record.due_date != existing.due_date:
            reminder = self._schedule_reminder(record)
            # A failed reschedule under the same id keeps the old reminder.
            if record.cart_id != cart_id or not self._has_reminder_date(record):
                self._cancel_reminder(cart_id)
        self._notify()
        return StoreResult(ResultStatus.OK, record=record, affected=1, reminder=reminder)

    def remove(self, cart_id: str) -> StoreResult:
        new_records = [r for r in self._records if r.cart_id != cart_id]
        removed = len(self._records) - len(new_records)
        if removed == 0:
            return StoreResult(ResultStatus.OK, affected=0)

        failure = self._commit(new_records)
        if failure:
            return failure

        logging.info(f"Removed cart {cart_id}.")
        self._cancel_reminder(cart_id)
        self._notify()
        return StoreResult(ResultStatus.OK, affected=removed)

    def mark_paid(self, cart_id: str) -> StoreResult:
        """Set every record with this cart id to Paid; other fields stay as they are."""
        matched = 0
        new_records = []
        for r in self._records:
            if r.cart_id == cart_id:
                matched += 1
                r = r.with_status(RentStatus.PAID)
            new_records.append(r)
        if matched == 0:
            return StoreResult(ResultStatus.OK, affected=0)

        failure = self._commit(new_records)
        if failure:
            return failure

        logging.info(f"Marked rent for cart {cart_id} as paid.")
        self._notify()
        return StoreResult(ResultStatus.OK, record=self.get(cart_id), affected=matched)
