# backend/services/pricing.py
"""Price arithmetic on integer minor currency units (centimes).

Every function here is pure: no database access, no rounding through
floats. Anything with ``price`` and ``discount`` attributes counts as a
product, so ORM rows and schema objects can be priced alike.
"""
from typing import Iterable, Protocol, Tuple

# Orders strictly above this subtotal ship for free
FREE_SHIPPING_THRESHOLD = 50000
SHIPPING_FEE = 3000


class Priced(Protocol):
    price: int
    discount: int


def _div_round_half_away(numerator: int, denominator: int) -> int:
    quotient, remainder = divmod(abs(numerator), denominator)
    if remainder * 2 >= denominator:
        quotient += 1
    return quotient if numerator >= 0 else -quotient


def effective_unit_price(product: Priced) -> int:
    discount = product.discount or 0
    if discount <= 0:
        return product.price
    return _div_round_half_away(product.price * (100 - discount), 100)


def line_total(product: Priced, quantity: int) -> int:
    return effective_unit_price(product) * quantity


def cart_total(lines: Iterable[Tuple[Priced, int]]) -> int:
    return sum(line_total(product, quantity) for product, quantity in lines)


def shipping_fee(subtotal: int) -> int:
    # The storefront page also charged the flat fee on an empty cart; nothing ships, so 0 here
    if subtotal <= 0 or subtotal > FREE_SHIPPING_THRESHOLD:
        return 0
    return SHIPPING_FEE
