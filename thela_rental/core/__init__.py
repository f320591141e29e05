"""
Core data layer for the Thela Rental Manager.

Nothing in this package imports Qt; platform capabilities are passed in
through the protocols in ``services``.
"""

from .errors import PersistenceError, SchedulingError, ThelaRentalError, ValidationError
from .models import FileReference, RentalRecord, RentStatus
from .persistence import PersistenceAdapter
from .query import SORT_BY_DUE_DATE, SORT_BY_RENT, SORT_NONE, query_records
from .record_store import RecordStore, ResultStatus, StoreResult
from .reminders import ReminderScheduler
from .summary import RentSummary, summarize

__all__ = [
    'ThelaRentalError',
    'ValidationError',
    'PersistenceError',
    'SchedulingError',
    'FileReference',
    'RentalRecord',
    'RentStatus',
    'PersistenceAdapter',
    'RecordStore',
    'ResultStatus',
    'StoreResult',
    'ReminderScheduler',
    'RentSummary',
    'summarize',
    'query_records',
    'SORT_NONE',
    'SORT_BY_DUE_DATE',
    'SORT_BY_RENT',
]
