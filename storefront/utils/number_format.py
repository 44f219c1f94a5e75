"""Number parsing and serialization helpers for prices and counters."""
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

CENT = Decimal('0.01')


def parse_decimal(value: Any) -> Decimal:
    """
    Parse a price-like value (int, float, Decimal or numeric string) to Decimal.

    Floats go through ``str`` so 199.99 stays 199.99 instead of the binary
    approximation. Booleans are rejected even though they are ints.

    Raises:
        ValueError: if the value is empty, not numeric, or not finite.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('Not a number')
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError('Not a number')
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f'Not a number: {value!r}')
    if not number.is_finite():
        raise ValueError(f'Not a finite number: {value!r}')
    return number


def parse_decimal_or(value: Any, default: Optional[Decimal]) -> Optional[Decimal]:
    """Like parse_decimal but returns ``default`` instead of raising."""
    try:
        return parse_decimal(value)
    except ValueError:
        return default


def quantize_money(value: Decimal) -> Decimal:
    """Round a money amount to cents."""
    return value.quantize(CENT)


def as_json_number(value: Optional[Decimal]) -> Union[int, float, None]:
    """
    Convert a Decimal to the JSON number the storefront documents use.

    Examples:
        as_json_number(Decimal('200')) -> 200
        as_json_number(Decimal('199.90')) -> 199.9
        as_json_number(None) -> None
    """
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)
