"""
pricing.py — Server-side Total Calculation

Totals are always recomputed from catalog prices; client-side amounts are
never trusted. Every component is rounded to cents (half-up) on its own
before it takes part in a sum.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .catalog import Catalog
from .config import CheckoutSettings
from .models import Totals
from .validation import cart_lines, parse_quantity

CENTS = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(price: Decimal, quantity: int) -> Decimal:
    return round_money(price * quantity)


def calculate_totals(cart: Any, catalog: Catalog, settings: CheckoutSettings) -> Totals:
    """
    Calculates subtotal, shipping, tax and total of a validated cart.

    Args:
        cart: The ``cart`` section, already accepted by `validate_cart`.
        catalog (Catalog): Source of the unit prices.
        settings (CheckoutSettings): Tax rate, shipping fee and free-shipping threshold.

    Returns:
        Totals: All four amounts rounded to 2 decimal places.

    Example:
        2 × 89.99 + 1 × 49.99 → subtotal 229.97, shipping 0.00, tax 18.40, total 248.37
    """
    subtotal = round_money(sum(
        (line_total(catalog[str(item["id"])].price, parse_quantity(item["quantity"]))
         for item in cart_lines(cart)),
        Decimal("0"),
    ))

    if subtotal >= settings.free_shipping_threshold:
        shipping = round_money(Decimal("0"))
    else:
        shipping = round_money(settings.shipping_fee)

    tax = round_money(subtotal * settings.tax_rate)
    total = round_money(subtotal + shipping + tax)

    return Totals(subtotal=subtotal, shipping=shipping, tax=tax, total=total)
