"""
models.py — Data Models for Checkout Processing

This module defines the data structures produced by the checkout pipeline.
It uses Pydantic models to ensure type safety of everything the service hands
back to callers or to the order sink.

Incoming requests are not parsed into models: the validators in
`validation.py` inspect the raw payload field by field so that every rejection
carries its own specific reason.

Models:
    - CatalogEntry: A product the shop sells.
    - Totals: Server-side computed monetary totals.
    - OrderItem: A priced line of a confirmed order.
    - Customer: Name and email summary of the buyer.
    - Order: The confirmed order record.
    - Rejection: Tagged validation failure (code + human message).
    - ChargeResult: Outcome of a payment charge.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class OrderStatus(str, Enum):
    """Lifecycle status of an order; only confirmed orders are ever built."""

    CONFIRMED = "confirmed"


class RejectionCode(str, Enum):
    """Machine-readable reasons for refusing a checkout request."""

    MALFORMED_INPUT = "MALFORMED_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_PRODUCT = "UNKNOWN_PRODUCT"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_ZIP = "INVALID_ZIP"
    INVALID_CARD = "INVALID_CARD"
    INVALID_EXPIRY = "INVALID_EXPIRY"
    INVALID_CVV = "INVALID_CVV"
    INVALID_PAYPAL_EMAIL = "INVALID_PAYPAL_EMAIL"
    UNSUPPORTED_PAYMENT_METHOD = "UNSUPPORTED_PAYMENT_METHOD"


class CatalogEntry(BaseModel):
    """
    Represents a single product of the catalog.

    Attributes:
        product_id (str): Catalog key of the product.
        name (str): Display name copied into order items.
        price (Decimal): Unit price with 2-place precision.
        max_quantity (int): Maximum quantity allowed per order.
    """
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    price: Money
    max_quantity: int


class Totals(BaseModel):
    """
    Monetary totals of an order, each rounded to cents.

    Attributes:
        subtotal (Decimal): Sum of catalog price × quantity over all lines.
        shipping (Decimal): Flat shipping fee, or 0 above the free-shipping threshold.
        tax (Decimal): Subtotal × tax rate.
        total (Decimal): subtotal + shipping + tax.
    """
    subtotal: Money
    shipping: Money
    tax: Money
    total: Money


class OrderItem(BaseModel):
    """
    Represents a single priced line of a confirmed order.

    Attributes:
        id (str): Catalog key of the product.
        name (str): Product name from the catalog.
        price (Decimal): Catalog unit price, never the client-claimed one.
        quantity (int): Ordered quantity.
        total (Decimal): price × quantity, rounded to cents.
    """
    id: str
    name: str
    price: Money
    quantity: int
    total: Money


class Customer(BaseModel):
    """
    The buyer as named in the shipping section.

    Attributes:
        name (str): ``firstName lastName``.
        email (str): Validated email address.
    """
    name: str
    email: str


class Order(BaseModel):
    """
    Represents a confirmed order.

    Only built after every validation step and the payment charge succeeded.

    Attributes:
        order_id (str): Generated id, e.g. ``ORD_20261018_4821``.
        tracking_number (str): Generated tracking number, e.g. ``SLX_20261018_317``.
        status (OrderStatus): Always ``confirmed``.
        order_date (str): Local timestamp formatted ``YYYY-MM-DD HH:MM:SS``.
        customer (Customer): Buyer name and email from the shipping section.
        shipping_address (dict): The shipping section exactly as received.
        items (List[OrderItem]): Lines priced from the catalog.
        totals (Totals): Server-side totals.
        payment_method (str): ``card`` or ``paypal``.
    """
    order_id: str
    tracking_number: str
    status: OrderStatus = OrderStatus.CONFIRMED
    order_date: str
    customer: Customer
    shipping_address: Dict[str, Any]
    items: List[OrderItem]
    totals: Totals
    payment_method: str


class Rejection(BaseModel):
    """
    A failed validation step.

    Attributes:
        code (RejectionCode): Machine-distinguishable reason.
        message (str): Human-readable message returned to the caller.
    """
    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    message: str


class ChargeResult(BaseModel):
    """
    Answer of a payment gateway to one charge.

    Attributes:
        success (bool): Whether the amount was charged.
        transaction_id (str | None): Gateway transaction id on success.
        error (str | None): Decline message on failure.
    """
    success: bool
    transaction_id: Optional[str] = None
    error: Optional[str] = None
