"""
Data model for cart rentals.

Records are immutable; the record store replaces them when a field changes so
that snapshots handed to the window never change underneath it.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class RentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"

    @classmethod
    def parse(cls, value) -> "RentStatus":
        """Case-insensitive lookup; an empty value means Pending."""
        if isinstance(value, RentStatus):
            return value
        text = str(value or "").strip()
        if not text:
            return cls.PENDING
        for status in cls:
            if status.value.lower() == text.lower():
                return status
        raise ValueError(f"Unknown rent status: {value!r}")


@dataclass(frozen=True)
class FileReference:
    """An opaque pointer to a user-picked document."""

    name: str
    uri: str
    mime_type: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name, "uri": self.uri}
        if self.mime_type is not None:
            data["mimeType"] = self.mime_type
        if self.size is not None:
            data["size"] = self.size
        return data

    @classmethod
    def from_dict(cls, data) -> Optional["FileReference"]:
        if not isinstance(data, dict) or not data.get("uri"):
            return None
        size = data.get("size")
        return cls(
            name=str(data.get("name") or ""),
            uri=str(data["uri"]),
            mime_type=data.get("mimeType"),
            size=size if isinstance(size, int) and not isinstance(size, bool) else None,
        )


# Attribute name -> key used in the stored blob. Order is the serialization order.
STORAGE_KEYS = {
    "cart_id": "cartId",
    "renter_name": "renterName",
    "mobile_no": "mobileNo",
    "address": "address",
    "id_proof": "idProof",
    "address_proof_file": "addressProofFile",
    "security_deposit": "securityDeposit",
    "monthly_rent": "monthlyRent",
    "start_date": "startDate",
    "due_date": "dueDate",
    "rent_status": "rentStatus",
    "location_link": "locationLink",
    "notes": "notes",
}

REQUIRED_FIELDS = ("cart_id", "renter_name", "monthly_rent")


@dataclass(frozen=True)
class RentalRecord:
    cart_id: str
    renter_name: str
    monthly_rent: str
    mobile_no: str = ""
    address: str = ""
    id_proof: str = ""
    address_proof_file: Optional[FileReference] = None
    security_deposit: str = ""
    start_date: str = ""
    due_date: str = ""
    rent_status: RentStatus = RentStatus.PENDING
    location_link: str = ""
    notes: str = ""

    def missing_required_fields(self) -> tuple:
        """Storage keys of required fields that are empty."""
        return tuple(
            STORAGE_KEYS[name] for name in REQUIRED_FIELDS
            if not str(getattr(self, name) or "").strip()
        )

    @property
    def is_paid(self) -> bool:
        return self.rent_status == RentStatus.PAID

    def with_status(self, status: RentStatus) -> "RentalRecord":
        return replace(self, rent_status=status)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for attr, key in STORAGE_KEYS.items():
            value = getattr(self, attr)
            if attr == "address_proof_file":
                value = value.to_dict() if value else None
            elif attr == "rent_status":
                value = value.value
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RentalRecord":
        """
        Build a record from its stored form.

        Missing text fields become empty strings. An unrecognised status is
        normalised to Pending rather than rejecting the whole record.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Rental record must be an object, got {type(data).__name__}")

        kwargs = {}
        for attr, key in STORAGE_KEYS.items():
            value = data.get(key)
            if attr == "address_proof_file":
                kwargs[attr] = FileReference.from_dict(value)
            elif attr == "rent_status":
                try:
                    kwargs[attr] = RentStatus.parse(value)
                except ValueError:
                    logging.warning(f"Unknown rent status {value!r} for cart {data.get('cartId')!r}; using Pending.")
                    kwargs[attr] = RentStatus.PENDING
            else:
                kwargs[attr] = "" if value is None else str(value)
        return cls(**kwargs)
