"""
Formatting helpers for prices.
All amounts in the cart are integer cents; these helpers render them in
German style (1.234,50 €) for log lines and error messages.
"""
from decimal import Decimal, InvalidOperation
from typing import Union, Optional


def num_de(value: Union[int, float, Decimal, str, None], decimals: Optional[int] = None) -> str:
    """
    Format a number in German style:
    - Thousands separator: dot (.)
    - Decimal separator: comma (,)

    Examples:
        num_de(1500) -> "1.500"
        num_de(1500.5, 2) -> "1.500,50"
        num_de(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    if decimals is not None:
        num = num.quantize(Decimal(10) ** -decimals)

    num_str = f"{num:f}"
    if '.' in num_str:
        integer_part, decimal_part = num_str.split('.')
    else:
        integer_part, decimal_part = num_str, ""

    if integer_part.startswith('-'):
        sign_str = '-'
        integer_part = integer_part[1:]
    else:
        sign_str = ''

    # Group thousands from the right
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = '.'.join(groups)[::-1]

    if decimal_part:
        return f"{sign_str}{integer_formatted},{decimal_part}"
    return f"{sign_str}{integer_formatted}"


def cents_to_decimal(cents: int) -> Decimal:
    """Convert integer cents to a Decimal amount with two places."""
    return (Decimal(int(cents)) / 100).quantize(Decimal('0.01'))


def money_eur(cents: Union[int, None]) -> str:
    """
    Format an amount of cents as euros with exactly two decimals.

    Examples:
        money_eur(1350) -> "13,50 €"
        money_eur(-150) -> "-1,50 €"
        money_eur(None) -> "-"
    """
    if cents is None:
        return "-"
    try:
        amount = cents_to_decimal(cents)
    except (InvalidOperation, ValueError, TypeError):
        return "-"
    return f"{num_de(amount, 2)} €"


def signed_money_eur(cents: int) -> str:
    """Format a price modifier with an explicit sign (+1,50 € / -0,50 €)."""
    if cents > 0:
        return f"+{money_eur(cents)}"
    return money_eur(cents)
