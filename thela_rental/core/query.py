from typing import Iterable, List

from thela_rental.core.models import RentalRecord, RentStatus
from thela_rental.core.utils import parse_amount, parse_date

SORT_NONE = ""
SORT_BY_DUE_DATE = "dueDate"
SORT_BY_RENT = "rentAmount"


def matches_search(record: RentalRecord, search_term: str) -> bool:
    term = (search_term or "").strip().lower()
    if not term:
        return True
    return (
        term in record.cart_id.lower()
        or term in record.renter_name.lower()
        or term in record.rent_status.value.lower()
    )


def _due_date_key(record: RentalRecord):
    due = parse_date(record.due_date)
    # Unparseable dates go last; the tuple keeps them comparable.
    return (due is None, due.toordinal() if due else 0)


def _rent_key(record: RentalRecord):
    amount = parse_amount(record.monthly_rent)
    return (amount is None, amount if amount is not None else 0)


SORT_KEYS = {
    SORT_BY_DUE_DATE: _due_date_key,
    SORT_BY_RENT: _rent_key,
}


def query_records(
    records: Iterable[RentalRecord],
    search_term: str = "",
    filter_status: str | RentStatus = "",
    sort_option: str = SORT_NONE,
) -> List[RentalRecord]:
    """
    Build the list shown in the window.

    Filters by search term (cart id, renter name or status, case-insensitive),
    then by exact status, then sorts by due date or rent. Sorting is stable and
    places unparseable values after all parseable ones. Any other sort option
    keeps store order.
    """
    status = None
    if filter_status:
        # Exact, case-sensitive match on the stored value.
        status = next((s for s in RentStatus if s.value == filter_status), None)
        if status is None:
            return []

    view = [
        record for record in records
        if matches_search(record, search_term)
        and (status is None or record.rent_status == status)
    ]

    key = SORT_KEYS.get(sort_option)
    if key is not None:
        view.sort(key=key)
    return view
