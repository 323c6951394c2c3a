from decimal import ROUND_HALF_UP, Decimal
from types import SimpleNamespace

import pytest

from services.pricing import (
    FREE_SHIPPING_THRESHOLD, SHIPPING_FEE, cart_total, effective_unit_price, line_total, shipping_fee,
)


def item(price, discount=0):
    return SimpleNamespace(price=price, discount=discount)


def test_no_discount_keeps_price():
    assert effective_unit_price(item(10000)) == 10000
    assert effective_unit_price(item(10000, None)) == 10000


def test_percentage_discount():
    assert effective_unit_price(item(10000, 20)) == 8000
    assert effective_unit_price(item(10000, 100)) == 0


@pytest.mark.parametrize(
    "price, discount, expected",
    [
        (1, 50, 1),       # 0.5 rounds up
        (3, 50, 2),       # 1.5 rounds up
        (999, 50, 500),   # 499.5 rounds up
        (1001, 10, 901),  # 900.9
        (1005, 10, 905),  # 904.5
        (1004, 10, 904),  # 903.6
        (1003, 10, 903),  # 902.7
        (1002, 10, 902),  # 901.8
    ],
)
def test_rounds_half_away_from_zero(price, discount, expected):
    assert effective_unit_price(item(price, discount)) == expected


def test_matches_decimal_rounding_over_a_range():
    for price in range(0, 2500, 37):
        for discount in range(0, 101, 7):
            exact = Decimal(price * (100 - discount)) / Decimal(100)
            expected = int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))
            got = effective_unit_price(item(price, discount))
            assert got == expected
            assert 0 <= got <= price


def test_line_and_cart_totals():
    a = item(10000)
    b = item(2999, 15)  # 2549.15 -> 2549
    assert line_total(a, 3) == 30000
    assert line_total(b, 2) == 5098
    assert cart_total([(a, 3), (b, 2)]) == 35098
    assert cart_total([]) == 0


def test_shipping_fee():
    assert shipping_fee(0) == 0
    assert shipping_fee(100) == SHIPPING_FEE
    assert shipping_fee(FREE_SHIPPING_THRESHOLD) == SHIPPING_FEE
    assert shipping_fee(FREE_SHIPPING_THRESHOLD + 1) == 0
