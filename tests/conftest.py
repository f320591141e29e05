import os
from datetime import datetime

import pytest

from thela_rental.core.db_manager import DBManager
from thela_rental.core.models import FileReference
from thela_rental.core.persistence import PersistenceAdapter
from thela_rental.core.record_store import RecordStore
from thela_rental.core.reminders import ReminderScheduler

from tests.fakes import FakeNotificationService


@pytest.fixture
def db_manager(tmp_path):
    manager = DBManager(os.path.join(tmp_path, "test_thela_rental.db"))
    yield manager
    manager.close()


@pytest.fixture
def adapter(db_manager):
    return PersistenceAdapter(db_manager)


@pytest.fixture
def notifier():
    return FakeNotificationService()


@pytest.fixture
def scheduler(notifier):
    return ReminderScheduler(notifier, clock=lambda: datetime(2024, 5, 1, 12, 0))


@pytest.fixture
def store(adapter, scheduler):
    return RecordStore.init(adapter, scheduler)


@pytest.fixture
def proof_file():
    return FileReference(name="aadhaar.pdf", uri="file:///home/user/Documents/aadhaar.pdf", mime_type="application/pdf", size=20480)
