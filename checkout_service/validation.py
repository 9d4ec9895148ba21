"""
validation.py — Request Validation for the Checkout Pipeline

Each validator inspects one section of the raw checkout payload and returns
``None`` when the section is acceptable, or a `Rejection` describing the
first rule that failed. Expected failures are results, not exceptions.

Validators:
    - validate_input: Overall payload shape (cart / shipping / payment present).
    - validate_cart: Catalog membership, quantity limits and price integrity.
    - validate_shipping: Required address fields, email and ZIP format.
    - validate_payment: Card or PayPal details.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError

from .catalog import Catalog
from .models import Rejection, RejectionCode

log = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("cart", "shipping", "payment")
REQUIRED_CART_FIELDS = ("id", "quantity", "price")
REQUIRED_SHIPPING_FIELDS = ("firstName", "lastName", "email", "address", "city", "zipCode", "country")
REQUIRED_CARD_FIELDS = ("cardNumber", "expiryDate", "cardName", "cvv")
SUPPORTED_PAYMENT_METHODS = ("card", "paypal")

ZIP_RE = re.compile(r"[0-9]{5}(?:-[0-9]{4})?")
CARD_NUMBER_RE = re.compile(r"[0-9]{13,19}")
EXPIRY_RE = re.compile(r"(?:0[1-9]|1[0-2])/[0-9]{2}")
CVV_RE = re.compile(r"[0-9]{3,4}")
INTEGER_RE = re.compile(r"[+-]?[0-9]{1,18}")
MAX_PRICE_EXPONENT = 9

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def _reject(code: RejectionCode, message: str) -> Rejection:
    return Rejection(code=code, message=message)


def _text(value: Any) -> Optional[str]:
    """Returns a form value as text; numbers are accepted, structures and booleans are not."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    return None


def is_valid_email(value: Any) -> bool:
    """Checks a value against pydantic's ``EmailStr`` (email-validator, no DNS lookup)."""
    text = _text(value)
    if text is None:
        return False
    try:
        _EMAIL_ADAPTER.validate_python(text)
    except ValidationError:
        return False
    return True


def parse_quantity(value: Any) -> Optional[int]:
    """
    Interprets a requested quantity as an integer.

    Args:
        value: Raw ``quantity`` field of a cart line.

    Returns:
        int | None: The integer value, or None when the value is not integral
        (booleans, fractions, non-numeric strings, strings of more than
        18 digits, structures).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and INTEGER_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def parse_price(value: Any) -> Optional[Decimal]:
    """Converts a client-claimed price to Decimal, or None if it is not a finite number below 10**10."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        price = Decimal(str(value))
    elif isinstance(value, str):
        try:
            price = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    if not price.is_finite() or price.adjusted() > MAX_PRICE_EXPONENT:
        return None
    return price


def cart_lines(cart: Any) -> Iterable[Any]:
    """Yields the lines of a cart given either as a list or as an object keyed by position."""
    if isinstance(cart, dict):
        return cart.values()
    return cart


def validate_input(data: Any) -> Optional[Rejection]:
    """
    Validates the basic structure of a checkout request.

    Args:
        data: Decoded JSON body.

    Returns:
        Rejection | None: MALFORMED_INPUT if the body is not an object,
        VALIDATION_ERROR if a section is missing or the cart is empty.
    """
    if not isinstance(data, dict):
        return _reject(RejectionCode.MALFORMED_INPUT, "Invalid request data format")

    for section in REQUIRED_SECTIONS:
        if not isinstance(data.get(section), (dict, list)):
            return _reject(RejectionCode.VALIDATION_ERROR, f"Missing or invalid {section} data")

    if not data["cart"]:
        return _reject(RejectionCode.VALIDATION_ERROR, "Cart is empty")

    return None


def validate_cart(cart: Any, catalog: Catalog, price_tolerance: Decimal = Decimal("0.01")) -> Optional[Rejection]:
    """
    Validates cart lines against the catalog, in input order.

    Stops at the first failing line. The price comparison is the only guard
    against a client tampering with prices, totals are never taken from the
    client.

    Args:
        cart: The ``cart`` section of the request.
        catalog (Catalog): Products that may be ordered.
        price_tolerance (Decimal): Allowed absolute difference between client and catalog price.

    Returns:
        Rejection | None: The first failing rule, or None if every line is valid.
    """
    if not isinstance(cart, (dict, list)):
        return _reject(RejectionCode.VALIDATION_ERROR, "Invalid cart format")

    for item in cart_lines(cart):
        if not isinstance(item, dict) or any(item.get(field) is None for field in REQUIRED_CART_FIELDS):
            return _reject(RejectionCode.VALIDATION_ERROR, "Invalid cart item structure")

        product_id = str(item["id"])
        product = catalog.get(product_id)
        if product is None:
            return _reject(RejectionCode.UNKNOWN_PRODUCT, f"Invalid product ID: {product_id}")

        quantity = parse_quantity(item["quantity"])
        if quantity is None or quantity <= 0:
            return _reject(RejectionCode.INVALID_QUANTITY, "Quantity must be greater than 0")

        if quantity > product.max_quantity:
            return _reject(RejectionCode.INSUFFICIENT_STOCK, f"Insufficient stock for product {product_id}")

        client_price = parse_price(item["price"])
        if client_price is None or abs(product.price - client_price) > price_tolerance:
            return _reject(RejectionCode.PRICE_MISMATCH, f"Price mismatch for product {product_id}")

    log.debug("Cart validation passed.")
    return None


def validate_shipping(shipping: Any) -> Optional[Rejection]:
    """
    Validates the shipping section.

    All of firstName, lastName, email, address, city, zipCode and country must
    be present and non-blank; ``state`` is optional. The email must be a valid
    mailbox and the ZIP code must be ``12345`` or ``12345-6789``.
    """
    if not isinstance(shipping, dict):
        shipping = {}

    for field in REQUIRED_SHIPPING_FIELDS:
        value = _text(shipping.get(field))
        if value is None or not value.strip():
            return _reject(RejectionCode.MISSING_FIELD, f"Missing required shipping field: {field}")

    if not is_valid_email(shipping["email"]):
        return _reject(RejectionCode.INVALID_EMAIL, "Invalid email address")

    if ZIP_RE.fullmatch(_text(shipping["zipCode"])) is None:
        return _reject(RejectionCode.INVALID_ZIP, "Invalid ZIP code format")

    return None


def validate_payment(payment: Any) -> Optional[Rejection]:
    """
    Validates the payment section for the supported methods.

    Args:
        payment: The ``payment`` section of the request.

    Returns:
        Rejection | None: MISSING_FIELD, INVALID_CARD, INVALID_EXPIRY, INVALID_CVV,
        INVALID_PAYPAL_EMAIL or UNSUPPORTED_PAYMENT_METHOD, or None if valid.
    """
    if not isinstance(payment, dict):
        payment = {}

    if payment.get("method") is None:
        return _reject(RejectionCode.MISSING_FIELD, "Payment method not specified")

    method = payment["method"]

    if method == "card":
        for field in REQUIRED_CARD_FIELDS:
            value = _text(payment.get(field))
            if value is None or not value.strip():
                return _reject(RejectionCode.MISSING_FIELD, f"Missing card field: {field}")

        card_number = re.sub(r"\s+", "", _text(payment["cardNumber"]))
        if CARD_NUMBER_RE.fullmatch(card_number) is None:
            return _reject(RejectionCode.INVALID_CARD, "Invalid card number")

        if EXPIRY_RE.fullmatch(_text(payment["expiryDate"])) is None:
            return _reject(RejectionCode.INVALID_EXPIRY, "Invalid expiry date format (MM/YY)")

        if CVV_RE.fullmatch(_text(payment["cvv"])) is None:
            return _reject(RejectionCode.INVALID_CVV, "Invalid CVV")

    elif method == "paypal":
        if not is_valid_email(payment.get("paypalEmail")):
            return _reject(RejectionCode.INVALID_PAYPAL_EMAIL, "Valid PayPal email required")

    else:
        return _reject(RejectionCode.UNSUPPORTED_PAYMENT_METHOD, "Unsupported payment method")

    return None
