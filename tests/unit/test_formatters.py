"""
Unit tests for price formatting helpers.
"""

import pytest
from decimal import Decimal

from foodcart.utils.formatters import cents_to_decimal, money_eur, num_de, signed_money_eur


@pytest.mark.parametrize('value, decimals, expected', [
    (1500, None, '1.500'),
    (1500.5, 2, '1.500,50'),
    (None, None, '-'),
    ('abc', None, '-'),
])
def test_num_de(value, decimals, expected):
    assert num_de(value, decimals) == expected


def test_cents_to_decimal():
    assert cents_to_decimal(1350) == Decimal('13.50')


@pytest.mark.parametrize('cents, expected', [
    (1350, '13,50 €'),
    (0, '0,00 €'),
    (123456, '1.234,56 €'),
    (-150, '-1,50 €'),
    (None, '-'),
])
def test_money_eur(cents, expected):
    assert money_eur(cents) == expected


def test_signed_money_eur():
    assert signed_money_eur(300) == '+3,00 €'
    assert signed_money_eur(-50) == '-0,50 €'
    assert signed_money_eur(0) == '0,00 €'
