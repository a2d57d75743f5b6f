"""Amount parsing and rounding utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

from ctengine.domain.errors import InvalidInputError

PENNY = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "£123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidInputError: If amount string cannot be parsed or is not finite
    """
    if not amount_str or not amount_str.strip():
        raise InvalidInputError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise InvalidInputError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise InvalidInputError(f"Amount '{amount_str}' is not a finite number")
    return -amount if is_negative else amount


def to_decimal(value, field_name: str) -> Decimal:
    """Coerce a numeric input value to Decimal.

    Floats go through ``str`` so that 0.1 becomes Decimal("0.1") rather than
    its binary expansion. ``None`` is treated as zero.

    Raises:
        InvalidInputError: For booleans, non-numeric values and NaN/Infinity
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        amount = parse_amount(value)
    else:
        raise InvalidInputError(f"{field_name} must be a number, got {value!r}")

    if not amount.is_finite():
        raise InvalidInputError(f"{field_name} must be a finite number, got {value!r}")
    return amount


def to_non_negative(value, field_name: str) -> Decimal:
    """Coerce to Decimal and reject negative amounts."""
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise InvalidInputError(f"{field_name} cannot be negative, got {amount}")
    return amount


def round_money(amount: Decimal) -> Decimal:
    """Round a currency amount to pence using round-half-up."""
    return amount.quantize(PENNY, rounding=ROUND_HALF_UP)


def to_pence(value, field_name: str) -> Decimal:
    """Coerce a non-negative ledger amount, rejecting fractions of a penny.

    Ledger amounts are stored to two decimal places, so anything finer would
    be changed on save.

    Raises:
        InvalidInputError: For negative amounts or more than two decimal places
    """
    amount = to_non_negative(value, field_name)
    try:
        whole_pence = amount == amount.quantize(PENNY)
    except InvalidOperation:
        raise InvalidInputError(f"{field_name} is too large, got {amount}")
    if not whole_pence:
        raise InvalidInputError(f"{field_name} has more than two decimal places, got {amount}")
    return amount
