from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from thela_rental.core.models import RentalRecord
from thela_rental.core.utils import parse_amount


@dataclass(frozen=True)
class RentSummary:
    total_collected: Decimal = Decimal(0)
    total_pending: Decimal = Decimal(0)
    paid_count: int = 0
    pending_count: int = 0


def summarize(records: Iterable[RentalRecord]) -> RentSummary:
    """Total monthly rent for paid and unpaid carts. Unparseable rents count as zero."""
    collected = Decimal(0)
    pending = Decimal(0)
    paid_count = 0
    pending_count = 0
    for record in records:
        amount = parse_amount(record.monthly_rent) or Decimal(0)
        if record.is_paid:
            collected += amount
            paid_count += 1
        else:
            pending += amount
            pending_count += 1
    return RentSummary(collected, pending, paid_count, pending_count)
