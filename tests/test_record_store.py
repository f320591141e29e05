from dataclasses import replace
from datetime import datetime

import pytest

from thela_rental.core.errors import PersistenceError
from thela_rental.core.models import RentStatus
from thela_rental.core.record_store import RecordStore, ResultStatus
from thela_rental.core.reminders import ReminderScheduler

from tests.fakes import FakeNotificationService, make_record


class FailingAdapter:
    def __init__(self, records=None):
        self.records = list(records or [])
        self.fail_saves = False
        self.saves = 0

    def load(self):
        return list(self.records)

    def save(self, records):
        if self.fail_saves:
            raise PersistenceError("disk full")
        self.saves += 1
        self.records = list(records)


def test_add_appends_record_with_pending_status(store, adapter):
    result = store.add(make_record(mobile_no="9876543210", notes="near the market"))

    assert result.ok
    records = store.list_records()
    assert len(records) == 1
    assert records[0].cart_id == "C1"
    assert records[0].mobile_no == "9876543210"
    assert records[0].notes == "near the market"
    assert records[0].rent_status == RentStatus.PENDING
    assert adapter.load() == records


@pytest.mark.parametrize("field_name, storage_key", [
    ("cart_id", "cartId"),
    ("renter_name", "renterName"),
    ("monthly_rent", "monthlyRent"),
])
def test_add_rejects_missing_required_field(store, adapter, field_name, storage_key):
    store.add(make_record(cart_id="C0"))
    before = store.list_records()

    result = store.add(replace(make_record(), **{field_name: ""}))

    assert result.status == ResultStatus.VALIDATION_ERROR
    assert result.missing_fields == (storage_key,)
    assert storage_key in result.message
    assert store.list_records() == before
    assert adapter.load() == before


def test_add_rejects_whitespace_only_cart_id(store):
    result = store.add(make_record(cart_id="   "))
    assert result.status == ResultStatus.VALIDATION_ERROR
    assert len(store) == 0


def test_add_rejects_duplicate_cart_id(store):
    store.add(make_record(renter_name="Ramesh"))
    result = store.add(make_record(renter_name="Suresh"))

    assert result.status == ResultStatus.VALIDATION_ERROR
    assert "already exists" in result.message
    assert [r.renter_name for r in store.list_records()] == ["Ramesh"]


def test_add_schedules_reminder_at_nine_on_due_date(store, notifier):
    result = store.add(make_record(monthly_rent="750", due_date="2024-06-01"))

    assert result.ok
    assert len(notifier.requests) == 1
    request = notifier.requests[0]
    assert request.title == "Rent Due: C1"
    assert request.trigger == datetime(2024, 6, 1, 9, 0, 0, 0)
    assert "Ramesh" in request.body
    assert "750" in request.body
    assert result.reminder == request


def test_add_without_due_date_schedules_nothing(store, notifier):
    result = store.add(make_record())
    assert result.ok
    assert result.reminder is None
    assert notifier.requests == []


def test_reminder_failure_does_not_block_add(adapter):
    failing_notifier = FakeNotificationService(fail=True)
    store = RecordStore.init(adapter, ReminderScheduler(failing_notifier))

    result = store.add(make_record(due_date="2024-06-01"))

    assert result.ok
    assert result.reminder is None
    assert [r.cart_id for r in adapter.load()] == ["C1"]


def test_remove_deletes_matching_record(store, adapter):
    store.add(make_record(cart_id="C1"))
    store.add(make_record(cart_id="C2"))

    result = store.remove("C1")

    assert result.ok
    assert result.affected == 1
    assert [r.cart_id for r in store.list_records()] == ["C2"]
    assert [r.cart_id for r in adapter.load()] == ["C2"]


def test_remove_unknown_id_is_noop():
    adapter = FailingAdapter([make_record()])
    store = RecordStore.init(adapter)

    result = store.remove("NOPE")

    assert result.ok
    assert result.affected == 0
    assert adapter.saves == 0
    assert len(store) == 1


def test_remove_cancels_pending_reminder(store, notifier):
    store.add(make_record(due_date="2024-06-01"))
    store.remove("C1")
    assert notifier.cancelled == ["n1"]
    assert notifier.requests == []


def test_mark_paid_changes_only_status(store, adapter):
    original = make_record(due_date="2024-06-01", address="Sector 5", security_deposit="2000")
    store.add(original)
    store.add(make_record(cart_id="C2"))

    result = store.mark_paid("C1")

    assert result.ok
    assert result.affected == 1
    paid = store.get("C1")
    assert paid == replace(original, rent_status=RentStatus.PAID)
    assert store.get("C2").rent_status == RentStatus.PENDING
    assert adapter.load()[0].rent_status == RentStatus.PAID


def test_mark_paid_updates_every_record_sharing_the_id():
    adapter = FailingAdapter([make_record(renter_name="A"), make_record(renter_name="B"), make_record(cart_id="C2")])
    store = RecordStore.init(adapter)

    result = store.mark_paid("C1")

    assert result.affected == 2
    assert [r.rent_status for r in store.list_records()] == [RentStatus.PAID, RentStatus.PAID, RentStatus.PENDING]


def test_mark_paid_unknown_id_is_noop():
    adapter = FailingAdapter([make_record()])
    store = RecordStore.init(adapter)
    result = store.mark_paid("C9")
    assert result.ok
    assert result.affected == 0
    assert adapter.saves == 0


def test_failed_save_leaves_records_unchanged():
    adapter = FailingAdapter([make_record()])
    store = RecordStore.init(adapter)
    adapter.fail_saves = True

    results = [
        store.add(make_record(cart_id="C2")),
        store.mark_paid("C1"),
        store.remove("C1"),
        store.update("C1", make_record(renter_name="Other")),
    ]

    assert all(r.status == ResultStatus.PERSISTENCE_ERROR for r in results)
    assert all("disk full" in r.message for r in results)
    assert store.list_records() == [make_record()]


def test_update_replaces_record_in_place(store, adapter):
    store.add(make_record(cart_id="C1"))
    store.add(make_record(cart_id="C2"))

    result = store.update("C1", make_record(cart_id="C1", renter_name="Mahesh", monthly_rent="900"))

    assert result.ok
    assert [r.cart_id for r in store.list_records()] == ["C1", "C2"]
    assert store.get("C1").renter_name == "Mahesh"
    assert adapter.load()[0].monthly_rent == "900"


def test_update_rejects_unknown_id_and_id_collision(store):
    store.add(make_record(cart_id="C1"))
    store.add(make_record(cart_id="C2"))

    missing = store.update("C9", make_record(cart_id="C9"))
    collision = store.update("C1", make_record(cart_id="C2"))
    invalid = store.update("C1", make_record(renter_name=""))

    assert missing.status == ResultStatus.VALIDATION_ERROR
    assert collision.status == ResultStatus.VALIDATION_ERROR
    assert invalid.status == ResultStatus.VALIDATION_ERROR
    assert [r.renter_name for r in store.list_records()] == ["Ramesh", "Ramesh"]


def test_update_reschedules_reminder_when_due_date_changes(store, notifier):
    store.add(make_record(due_date="2024-06-01"))

    unchanged = store.update("C1", make_record(due_date="2024-06-01", notes="same date"))
    moved = store.update("C1", make_record(due_date="2024-07-01"))

    assert unchanged.reminder is None
    assert moved.reminder.trigger == datetime(2024, 7, 1, 9, 0)
    assert [r.trigger for r in notifier.requests] == [datetime(2024, 7, 1, 9, 0)]


def test_list_records_returns_snapshot(store):
    store.add(make_record())
    snapshot = store.list_records()
    snapshot.clear()
    assert len(store.list_records()) == 1


def test_listeners_receive_snapshot_after_each_change(store):
    seen = []
    store.add_listener(lambda records: seen.append([r.cart_id for r in records]))

    store.add(make_record(cart_id="C1"))
    store.add(make_record(cart_id=""))  # rejected, no notification
    store.mark_paid("C1")
    store.remove("C1")

    assert seen == [["C1"], ["C1"], []]


def test_init_loads_persisted_records(adapter, scheduler):
    adapter.save([make_record(cart_id="C1"), make_record(cart_id="C2")])
    store = RecordStore.init(adapter, scheduler)
    assert [r.cart_id for r in store.list_records()] == ["C1", "C2"]


class UnreadableAdapter(FailingAdapter):
    def __init__(self):
        super().__init__()
        self.fail_loads = True

    def load(self):
        if self.fail_loads:
            raise PersistenceError("database is locked")
        return super().load()


def test_failed_load_blocks_writes_until_a_load_succeeds():
    adapter = UnreadableAdapter()
    store = RecordStore(adapter)

    with pytest.raises(PersistenceError):
        store.load()

    assert store.load_failed
    result = store.add(make_record(cart_id="C9"))
    assert result.status == ResultStatus.PERSISTENCE_ERROR
    assert adapter.saves == 0
    assert len(store) == 0

    adapter.fail_loads = False
    store.load()

    assert not store.load_failed
    assert store.add(make_record(cart_id="C9")).ok
    assert adapter.saves == 1


def test_failed_reschedule_on_update_keeps_old_reminder(store, notifier):
    store.add(make_record(due_date="2024-06-01"))
    notifier.fail = True

    result = store.update("C1", make_record(due_date="2024-07-01"))

    assert result.ok
    assert result.reminder is None
    assert notifier.cancelled == []
    assert [r.trigger for r in notifier.requests] == [datetime(2024, 6, 1, 9, 0)]


def test_update_clearing_due_date_cancels_reminder(store, notifier):
    store.add(make_record(due_date="2024-06-01"))

    store.update("C1", make_record(due_date=""))

    assert notifier.cancelled == ["n1"]
    assert notifier.requests == []


def test_update_renaming_cart_moves_reminder(store, notifier):
    store.add(make_record(due_date="2024-06-01"))

    result = store.update("C1", make_record(cart_id="C1-B", due_date="2024-06-01"))

    assert result.reminder.title == "Rent Due: C1-B"
    assert notifier.cancelled == ["n1"]
    assert [r.title for r in notifier.requests] == ["Rent Due: C1-B"]
