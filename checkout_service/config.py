"""
config.py — Runtime Configuration for the Checkout Service

All settings come from environment variables with defaults that reproduce the
shop's standard pricing rules (8% tax, free shipping from 50.00, 10.00 flat
shipping fee, 0.01 price tolerance).
"""

import os
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CheckoutSettings(BaseModel):
    """
    Pricing rules and collaborator wiring of the checkout service.

    Attributes:
        tax_rate (Decimal): Fraction of the subtotal charged as tax.
        free_shipping_threshold (Decimal): Subtotal from which shipping is free.
        shipping_fee (Decimal): Flat shipping fee below the threshold.
        price_tolerance (Decimal): Allowed absolute difference between client and catalog price.
        payment_success_rate (float): Success probability of the simulated gateway.
        payment_service_url (str): Base URL of a payment service; empty selects the simulator.
        order_sink (str): Where confirmed orders go: 'none', 'file' or 'rabbitmq'.
        order_archive_dir (str): Target directory of the 'file' sink.
        rabbitmq_host (str): Broker host of the 'rabbitmq' sink.
        rabbitmq_user (str): Broker user of the 'rabbitmq' sink.
        rabbitmq_password (str): Broker password of the 'rabbitmq' sink.
        estimated_delivery (str): Delivery estimate echoed in success responses.
    """
    model_config = ConfigDict(frozen=True)

    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("50.00")
    shipping_fee: Decimal = Decimal("10.00")
    price_tolerance: Decimal = Decimal("0.01")
    payment_success_rate: float = 0.9
    payment_service_url: str = ""
    order_sink: str = "none"
    order_archive_dir: str = "orders"
    rabbitmq_host: str = "localhost"
    rabbitmq_user: str = "guest"
    rabbitmq_password: str = "guest"
    estimated_delivery: str = "3-5 business days"

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        """Builds the settings from environment variables (normally set by Docker/Kubernetes)."""
        return cls(
            tax_rate=os.environ.get("CHECKOUT_TAX_RATE", "0.08"),
            free_shipping_threshold=os.environ.get("CHECKOUT_FREE_SHIPPING_THRESHOLD", "50.00"),
            shipping_fee=os.environ.get("CHECKOUT_SHIPPING_FEE", "10.00"),
            price_tolerance=os.environ.get("CHECKOUT_PRICE_TOLERANCE", "0.01"),
            payment_success_rate=os.environ.get("PAYMENT_SUCCESS_RATE", "0.9"),
            payment_service_url=os.environ.get("PAYMENT_SERVICE_URL", ""),
            order_sink=os.environ.get("ORDER_SINK", "none"),
            order_archive_dir=os.environ.get("ORDER_ARCHIVE_DIR", "orders"),
            rabbitmq_host=os.environ.get("RABBITMQ_HOST", "localhost"),
            rabbitmq_user=os.environ.get("RABBITMQ_USER", "guest"),
            rabbitmq_password=os.environ.get("RABBITMQ_PASSWORD", "guest"),
            estimated_delivery=os.environ.get("ESTIMATED_DELIVERY", "3-5 business days"),
        )
