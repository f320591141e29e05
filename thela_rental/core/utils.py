import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

# Day-first formats follow how dates are usually written on Indian rent slips.
DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")

CURRENCY_PREFIXES = ("₹", "Rs.", "Rs", "INR")

# Amounts above this are treated as unparseable.
MAX_AMOUNT = Decimal("1e15")


def parse_date(value) -> date | None:
    """Parse a stored date string, returning None when it cannot be read."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(value) -> Decimal | None:
    """
    Parse a money string such as "750", "1,500.50" or "₹ 2000".

    Returns None for empty, non-numeric, non-finite, negative or oversized
    (above MAX_AMOUNT) input so callers can decide how to treat unusable
    amounts (aggregation counts them as zero, sorting puts them last).
    """
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        return None

    for prefix in CURRENCY_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):].strip()
            break
    text = text.replace(",", "")
    if not text:
        return None

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0 or amount > MAX_AMOUNT:
        return None
    return amount


def format_amount(amount, currency: str = "₹") -> str:
    """Format a Decimal total for display, dropping a trailing .00."""
    amount = Decimal(amount or 0)
    if amount == amount.to_integral_value():
        return f"{currency}{amount:,.0f}"
    return f"{currency}{amount:,.2f}"


def sanitize_filename(value) -> str:
    # Replace invalid filename characters with underscore
    return re.sub(r'[\\/*?:"<>|]', '_', str(value)).replace(' ', '_')
