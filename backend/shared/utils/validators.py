"""
Shared validators for input sanitization.
Money, quantities, notes and search terms.
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from shared.config.constants import Limits
from shared.utils.exceptions import ValidationError

CENT = Decimal(1).scaleb(-Limits.MONEY_DECIMAL_PLACES)


def parse_money(value: Any, *, field: str = "amount", allow_float: bool = False) -> Decimal:
    """
    Parse a money value into a finite Decimal.

    Accepts Decimal, int and numeric strings. Floats are rejected unless
    allow_float is set (storage drivers may hand back floats for NUMERIC
    columns); accepted floats go through str() so 8.1 stays 8.1.

    Raises:
        ValidationError: for None, booleans, floats, non-numeric strings,
        NaN and infinities, and amounts beyond Limits.MAX_MONEY.
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be numeric", field=field, value=value)

    if isinstance(value, float):
        if not allow_float:
            raise ValidationError(
                f"{field} must be a decimal string or integer, not a float",
                field=field,
                value=value,
            )
        value = str(value)

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise ValidationError(f"{field} must be numeric", field=field, value=value) from None
    else:
        raise ValidationError(f"{field} must be numeric", field=field, value=repr(value))

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field, value=str(amount))

    if abs(amount) > Limits.MAX_MONEY:
        raise ValidationError(
            f"{field} must not exceed {Limits.MAX_MONEY}",
            field=field,
            value=str(amount),
        )

    return amount


def parse_stored_money(value: Any) -> Decimal | None:
    """
    Lenient parse for cached values read back from storage.

    Returns None for anything that is not a finite number within
    Limits.MAX_MONEY, which callers treat as a stale cache.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return parse_money(value, allow_float=True) if _looks_numeric(value) else None
    except ValidationError:
        return None


def _looks_numeric(value: Any) -> bool:
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        try:
            Decimal(value.strip())
        except InvalidOperation:
            return False
        return True
    return False


def quantize_money(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context holds
        raise ValidationError("amount is too large", value=str(amount)) from None


def validate_price(price: Any, *, field: str = "price") -> Decimal:
    """Parse a catalog price; must be >= 0."""
    amount = parse_money(price, field=field, allow_float=True)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative", field=field, value=str(amount))
    return amount


def validate_service_charge_rate(rate: Any) -> Decimal:
    """Parse a service-charge rate and check 0 <= rate <= 1."""
    parsed = parse_money(rate, field="service_charge_rate")
    if not (Limits.MIN_SERVICE_CHARGE_RATE <= parsed <= Limits.MAX_SERVICE_CHARGE_RATE):
        raise ValidationError(
            f"service_charge_rate must be between {Limits.MIN_SERVICE_CHARGE_RATE} "
            f"and {Limits.MAX_SERVICE_CHARGE_RATE}",
            field="service_charge_rate",
            value=str(parsed),
        )
    return parsed


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; a search for "50%" must match
    the literal text. Use with escape="\\\\" on the LIKE clause.
    """
    if not value:
        return value

    # Escape the escape character first, then the wildcards
    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def validate_quantity(
    quantity: Any,
    min_val: int = Limits.MIN_QUANTITY,
    max_val: int = Limits.MAX_QUANTITY,
) -> int:
    """
    Validate quantity is an integer within the accepted range.

    Raises:
        ValidationError: If quantity is not an int or is outside the range
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Quantity must be an integer", field="quantity", value=repr(quantity))
    if quantity < min_val:
        raise ValidationError(f"Minimum quantity is {min_val}", field="quantity", value=quantity)
    if quantity > max_val:
        raise ValidationError(f"Maximum quantity is {max_val}", field="quantity", value=quantity)
    return quantity


def validate_notes(notes: str | None) -> str | None:
    """Strip item notes; blank becomes None. Enforces the length limit."""
    if notes is None:
        return None
    notes = _strip_control_chars(notes.strip())
    if not notes:
        return None
    if len(notes) > Limits.MAX_NOTES_LENGTH:
        raise ValidationError(
            f"Notes must be at most {Limits.MAX_NOTES_LENGTH} characters",
            field="notes",
            length=len(notes),
        )
    return notes


def sanitize_search_term(term: str | None, max_length: int = Limits.MAX_SEARCH_TERM_LENGTH) -> str:
    """
    Sanitize search term for safe use in queries.

    Trims whitespace, limits length, removes control characters.
    """
    if not term:
        return ""

    term = term.strip()
    if len(term) > max_length:
        term = term[:max_length]

    return _strip_control_chars(term)


def _strip_control_chars(value: str) -> str:
    # Keep newlines and tabs
    return re.sub(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]", "", value)
