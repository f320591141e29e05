from typing import Dict, Optional

from thela_rental.core.errors import ValidationError
from thela_rental.core.models import STORAGE_KEYS, FileReference, RentalRecord, RentStatus

# Text inputs shown on the form, keyed by storage name.
TEXT_FIELDS = tuple(key for key in STORAGE_KEYS.values() if key not in ("addressProofFile", "rentStatus"))

FIELD_LABELS = {
    "cartId": "Cart ID",
    "renterName": "Renter Name",
    "mobileNo": "Mobile No",
    "address": "Address",
    "idProof": "ID Proof",
    "securityDeposit": "Security Deposit",
    "monthlyRent": "Monthly Rent",
    "startDate": "Start Date",
    "dueDate": "Due Date",
    "locationLink": "Location Link",
    "notes": "Notes",
}


class RentalForm:
    """In-progress values of the Add / Save Cart form, kept exactly as typed."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.values: Dict[str, str] = {key: "" for key in TEXT_FIELDS}
        self.rent_status = RentStatus.PENDING
        self.address_proof_file: Optional[FileReference] = None
        self.editing_cart_id: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_cart_id is not None

    def set_field(self, name: str, value):
        if name == "rentStatus":
            try:
                self.rent_status = RentStatus.parse(value)
            except ValueError as e:
                raise ValidationError(str(e), ("rentStatus",)) from e
            return
        if name not in self.values:
            raise KeyError(f"Unknown form field: {name}")
        self.values[name] = "" if value is None else str(value)

    def get_field(self, name: str) -> str:
        if name == "rentStatus":
            return self.rent_status.value
        return self.values[name]

    def attach_file(self, ref: Optional[FileReference]):
        self.address_proof_file = ref

    def load_record(self, record: RentalRecord):
        """Fill the form from an existing record and switch to edit mode."""
        self.reset()
        data = record.to_dict()
        for key in TEXT_FIELDS:
            self.values[key] = data[key]
        self.rent_status = record.rent_status
        self.address_proof_file = record.address_proof_file
        self.editing_cart_id = record.cart_id

    def to_record(self) -> RentalRecord:
        v = self.values
        return RentalRecord(
            cart_id=v["cartId"].strip(),
            renter_name=v["renterName"].strip(),
            mobile_no=v["mobileNo"].strip(),
            address=v["address"],
            id_proof=v["idProof"],
            address_proof_file=self.address_proof_file,
            security_deposit=v["securityDeposit"].strip(),
            monthly_rent=v["monthlyRent"].strip(),
            start_date=v["startDate"].strip(),
            due_date=v["dueDate"].strip(),
            rent_status=self.rent_status,
            location_link=v["locationLink"].strip(),
            notes=v["notes"],
        )
