"""Field predicates shared by the step and product type validators."""

from datetime import date, datetime
from decimal import Decimal

from django.utils.dateparse import parse_date, parse_datetime


def get_path(data, path: str):
    """Get nested value from dicts using dot notation."""
    current = data
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key)
        else:
            current = getattr(current, key, None)
        if current is None:
            return None
    return current


def is_blank(value) -> bool:
    """True for None, empty or whitespace-only strings, and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def as_int(value) -> int | None:
    """Return value as an int if it is integral, else None.

    Accepts ints, integral floats/Decimals and numeric strings; rejects
    booleans, fractional values and anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, (str, float, Decimal)):
        return None
    try:
        amount = Decimal(str(value).strip())
    except ArithmeticError:
        return None
    if not amount.is_finite() or amount != amount.to_integral_value():
        return None
    return int(amount)


def is_positive_int(value) -> bool:
    number = as_int(value)
    return number is not None and number > 0


def as_date(value) -> date | None:
    """Parse a date, datetime or ISO string into a date, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = parse_datetime(text)
        if parsed is not None:
            return parsed.date()
        return parse_date(text)
    except ValueError:
        return None


FALSE_STRINGS = ("false", "0", "no", "off", "")


def as_bool(value, default: bool = False) -> bool:
    """Interpret form-style booleans; "false", "0", "no" and "off" are False."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)
