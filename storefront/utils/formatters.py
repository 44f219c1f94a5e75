"""
Formatting helpers for prices shown in the storefront.
"""
from decimal import Decimal, InvalidOperation
from typing import Union


def format_money(value: Union[int, float, Decimal, str, None], currency: str = 'MAD') -> str:
    """
    Format an amount with its currency code and two decimals.

    Examples:
        format_money(600) -> "MAD 600.00"
        format_money(Decimal('539.5')) -> "MAD 539.50"
        format_money(None) -> "MAD 0.00"
        format_money('abc') -> "-"
    """
    if value is None or value == "":
        value = 0

    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    return f"{currency} {num.quantize(Decimal('0.01'))}"
