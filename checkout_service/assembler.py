"""
assembler.py — Builds the Confirmed Order Record

Order ids and tracking numbers are made of a prefix, the order date and a
bounded random suffix, e.g. ``ORD_20261018_4821`` / ``SLX_20261018_317``.
They are unique on a best-effort basis only.
"""

import random
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .catalog import Catalog
from .models import Customer, Order, OrderItem, OrderStatus, Totals
from .pricing import line_total
from .validation import cart_lines, parse_quantity


class OrderAssembler:
    """
    Creates `Order` records from validated requests.

    Args:
        catalog (Catalog): Source of product names and prices.
        rng (random.Random | None): Random source for the id suffixes.
        clock (Callable[[], datetime]): Returns the current local time.
    """

    def __init__(
        self,
        catalog: Catalog,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.clock = clock

    def build(self, request: Dict[str, Any], totals: Totals) -> Order:
        """
        Builds the order for a request that passed validation and payment.

        Args:
            request (dict): The full checkout request.
            totals (Totals): Totals computed by `calculate_totals`.

        Returns:
            Order: A record with status ``confirmed``.
        """
        now = self.clock()
        day = now.strftime("%Y%m%d")
        shipping = request["shipping"]

        items = []
        for line in cart_lines(request["cart"]):
            product = self.catalog[str(line["id"])]
            quantity = parse_quantity(line["quantity"])
            items.append(OrderItem(
                id=product.product_id,
                name=product.name,
                price=product.price,
                quantity=quantity,
                total=line_total(product.price, quantity),
            ))

        return Order(
            order_id=f"ORD_{day}_{self.rng.randint(1000, 9999)}",
            tracking_number=f"SLX_{day}_{self.rng.randint(100, 999)}",
            status=OrderStatus.CONFIRMED,
            order_date=now.strftime("%Y-%m-%d %H:%M:%S"),
            customer=Customer(
                name=f"{shipping['firstName']} {shipping['lastName']}",
                email=str(shipping["email"]),
            ),
            shipping_address=dict(shipping),
            items=items,
            totals=totals,
            payment_method=request["payment"]["method"],
        )
