from datetime import date
from decimal import Decimal

import pytest

from thela_rental.core.models import FileReference, RentalRecord, RentStatus
from thela_rental.core.utils import format_amount, parse_amount, parse_date, sanitize_filename

from tests.fakes import make_record


@pytest.mark.parametrize("value", ["paid", "PAID", " Paid ", RentStatus.PAID])
def test_rent_status_parse_is_case_insensitive(value):
    assert RentStatus.parse(value) == RentStatus.PAID


def test_rent_status_parse_defaults_and_rejects():
    assert RentStatus.parse("") == RentStatus.PENDING
    assert RentStatus.parse(None) == RentStatus.PENDING
    with pytest.raises(ValueError):
        RentStatus.parse("Overdue")


def test_missing_required_fields_uses_storage_keys():
    record = RentalRecord(cart_id=" ", renter_name="", monthly_rent="750")
    assert record.missing_required_fields() == ("cartId", "renterName")
    assert make_record().missing_required_fields() == ()


def test_with_status_returns_new_record():
    record = make_record()
    paid = record.with_status(RentStatus.PAID)
    assert paid.is_paid
    assert not record.is_paid


def test_to_dict_key_order_and_values(proof_file):
    data = make_record(address_proof_file=proof_file).to_dict()

    assert list(data)[:3] == ["cartId", "renterName", "mobileNo"]
    assert data["rentStatus"] == "Pending"
    assert data["addressProofFile"] == {
        "name": "aadhaar.pdf",
        "uri": "file:///home/user/Documents/aadhaar.pdf",
        "mimeType": "application/pdf",
        "size": 20480,
    }


def test_from_dict_round_trip(proof_file):
    record = make_record(address_proof_file=proof_file, location_link="https://maps.google.com/?q=28.6,77.2")
    assert RentalRecord.from_dict(record.to_dict()) == record


def test_from_dict_rejects_non_objects():
    with pytest.raises(TypeError):
        RentalRecord.from_dict(["C1"])


def test_file_reference_requires_uri():
    assert FileReference.from_dict({"name": "x.pdf"}) is None
    assert FileReference.from_dict(None) is None
    ref = FileReference.from_dict({"name": "x.pdf", "uri": "content://docs/1", "size": "12"})
    assert ref == FileReference(name="x.pdf", uri="content://docs/1")


@pytest.mark.parametrize("text, expected", [
    ("2024-06-01", date(2024, 6, 1)),
    ("01-06-2024", date(2024, 6, 1)),
    ("01/06/2024", date(2024, 6, 1)),
    ("2024/06/01", date(2024, 6, 1)),
    (" 2024-06-01 ", date(2024, 6, 1)),
])
def test_parse_date_formats(text, expected):
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", ["", "June 1", "2024-02-30", None, 20240601])
def test_parse_date_unreadable(text):
    assert parse_date(text) is None


@pytest.mark.parametrize("text, expected", [
    ("750", Decimal("750")),
    ("1,500.50", Decimal("1500.50")),
    ("₹ 2000", Decimal("2000")),
    ("Rs.300", Decimal("300")),
    ("INR 45", Decimal("45")),
    (120, Decimal("120")),
])
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "  ", "abc", "-10", "NaN", "Infinity", None, True])
def test_parse_amount_unusable(text):
    assert parse_amount(text) is None


def test_format_amount():
    assert format_amount(Decimal("1500")) == "₹1,500"
    assert format_amount(Decimal("12.5")) == "₹12.50"
    assert format_amount(Decimal("0"), "Rs. ") == "Rs. 0"


def test_sanitize_filename():
    assert sanitize_filename('Thela Rentals: May/June?') == "Thela_Rentals__May_June_"


@pytest.mark.parametrize("text", ["1e5000", "9e999999", "1000000000000001"])
def test_parse_amount_rejects_oversized_values(text):
    assert parse_amount(text) is None


def test_format_amount_handles_large_totals():
    assert format_amount(Decimal("1e15")) == "₹1,000,000,000,000,000"
    assert format_amount(Decimal("2e15") + Decimal("0.5")) == "₹2,000,000,000,000,000.50"
