"""Tests for request, cart, shipping and payment validation."""

from decimal import Decimal

import pytest

from checkout_service.catalog import DEFAULT_CATALOG
from checkout_service.models import RejectionCode
from checkout_service.validation import (
    is_valid_email,
    parse_price,
    parse_quantity,
    validate_cart,
    validate_input,
    validate_payment,
    validate_shipping,
)


class TestValidateInput:
    def test_valid_request(self, valid_request):
        assert validate_input(valid_request) is None

    @pytest.mark.parametrize("data", [None, [], "cart", 42])
    def test_non_object_body_is_malformed(self, data):
        rejection = validate_input(data)
        assert rejection.code is RejectionCode.MALFORMED_INPUT
        assert rejection.message == "Invalid request data format"

    @pytest.mark.parametrize("section", ["cart", "shipping", "payment"])
    def test_missing_section(self, valid_request, section):
        del valid_request[section]
        rejection = validate_input(valid_request)
        assert rejection.code is RejectionCode.VALIDATION_ERROR
        assert rejection.message == f"Missing or invalid {section} data"

    def test_section_with_wrong_shape(self, valid_request):
        valid_request["shipping"] = "123 Main St"
        rejection = validate_input(valid_request)
        assert rejection.message == "Missing or invalid shipping data"

    def test_empty_cart(self, valid_request):
        valid_request["cart"] = []
        rejection = validate_input(valid_request)
        assert rejection.code is RejectionCode.VALIDATION_ERROR
        assert rejection.message == "Cart is empty"


class TestValidateCart:
    def test_valid_cart(self, valid_request):
        assert validate_cart(valid_request["cart"], DEFAULT_CATALOG) is None

    def test_numeric_product_id(self):
        assert validate_cart([{"id": 1, "quantity": 1, "price": 89.99}], DEFAULT_CATALOG) is None

    @pytest.mark.parametrize("field", ["id", "quantity", "price"])
    def test_missing_line_field(self, field):
        line = {"id": "1", "quantity": 1, "price": 89.99}
        del line[field]
        rejection = validate_cart([line], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.VALIDATION_ERROR
        assert rejection.message == "Invalid cart item structure"

    def test_unknown_product(self):
        rejection = validate_cart([{"id": "999", "quantity": 1, "price": 10.00}], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.UNKNOWN_PRODUCT
        assert rejection.message == "Invalid product ID: 999"

    def test_unknown_product_checked_before_quantity(self):
        rejection = validate_cart([{"id": "999", "quantity": 0, "price": 10.00}], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.UNKNOWN_PRODUCT

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "two", True, "9" * 5000])
    def test_invalid_quantity(self, quantity):
        rejection = validate_cart([{"id": "1", "quantity": quantity, "price": 89.99}], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.INVALID_QUANTITY
        assert rejection.message == "Quantity must be greater than 0"

    def test_quantity_above_max(self):
        rejection = validate_cart([{"id": "1", "quantity": 11, "price": 89.99}], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.INSUFFICIENT_STOCK
        assert rejection.message == "Insufficient stock for product 1"

    def test_quantity_at_max(self):
        assert validate_cart([{"id": "1", "quantity": 10, "price": 89.99}], DEFAULT_CATALOG) is None

    @pytest.mark.parametrize("price", [89.98, 90.00, "89.99", 89.995])
    def test_price_within_tolerance(self, price):
        assert validate_cart([{"id": "1", "quantity": 1, "price": price}], DEFAULT_CATALOG) is None

    @pytest.mark.parametrize("price", [89.97, 1.00, 0, "cheap", "1e999999999", "-1e999999999", "NaN"])
    def test_price_mismatch(self, price):
        rejection = validate_cart([{"id": "1", "quantity": 1, "price": price}], DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.PRICE_MISMATCH
        assert rejection.message == "Price mismatch for product 1"

    def test_custom_tolerance(self):
        cart = [{"id": "1", "quantity": 1, "price": 89.90}]
        assert validate_cart(cart, DEFAULT_CATALOG, Decimal("0.10")) is None

    def test_first_failing_line_wins(self):
        cart = [
            {"id": "1", "quantity": 1, "price": 80.00},
            {"id": "999", "quantity": 1, "price": 10.00},
        ]
        rejection = validate_cart(cart, DEFAULT_CATALOG)
        assert rejection.code is RejectionCode.PRICE_MISMATCH


class TestParseQuantity:
    @pytest.mark.parametrize("value,expected", [(2, 2), (2.0, 2), ("3", 3), (" 4 ", 4), ("-1", -1)])
    def test_integral_values(self, value, expected):
        assert parse_quantity(value) == expected

    @pytest.mark.parametrize("value", [2.5, "2.5", "", None, [], False])
    def test_non_integral_values(self, value):
        assert parse_quantity(value) is None

    @pytest.mark.parametrize("value", ["9" * 19, "9" * 5000])
    def test_overlong_digit_strings(self, value):
        assert parse_quantity(value) is None


class TestParsePrice:
    @pytest.mark.parametrize("value,expected", [(89.99, Decimal("89.99")), ("89.99", Decimal("89.99")), (0, Decimal("0"))])
    def test_numeric_values(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize("value", ["1e999999999", "1e10", "Infinity", "NaN", "abc", True, None])
    def test_unusable_values(self, value):
        assert parse_price(value) is None


class TestValidateShipping:
    def test_valid_shipping(self, valid_request):
        assert validate_shipping(valid_request["shipping"]) is None

    def test_state_is_optional(self, valid_request):
        del valid_request["shipping"]["state"]
        assert validate_shipping(valid_request["shipping"]) is None

    @pytest.mark.parametrize("field", ["firstName", "lastName", "email", "address", "city", "zipCode", "country"])
    def test_missing_required_field(self, valid_request, field):
        del valid_request["shipping"][field]
        rejection = validate_shipping(valid_request["shipping"])
        assert rejection.code is RejectionCode.MISSING_FIELD
        assert rejection.message == f"Missing required shipping field: {field}"

    def test_blank_field_counts_as_missing(self, valid_request):
        valid_request["shipping"]["city"] = "   "
        rejection = validate_shipping(valid_request["shipping"])
        assert rejection.message == "Missing required shipping field: city"

    def test_missing_field_reported_before_invalid_email(self, valid_request):
        valid_request["shipping"]["email"] = "invalid-email"
        del valid_request["shipping"]["country"]
        assert validate_shipping(valid_request["shipping"]).code is RejectionCode.MISSING_FIELD

    def test_invalid_email(self, valid_request):
        valid_request["shipping"]["email"] = "invalid-email"
        rejection = validate_shipping(valid_request["shipping"])
        assert rejection.code is RejectionCode.INVALID_EMAIL
        assert rejection.message == "Invalid email address"

    @pytest.mark.parametrize("zip_code", ["10001", "10001-1234", 10001])
    def test_valid_zip(self, valid_request, zip_code):
        valid_request["shipping"]["zipCode"] = zip_code
        assert validate_shipping(valid_request["shipping"]) is None

    @pytest.mark.parametrize("zip_code", ["1000", "100011", "10001-12", "ABCDE", "10001 "])
    def test_invalid_zip(self, valid_request, zip_code):
        valid_request["shipping"]["zipCode"] = zip_code
        rejection = validate_shipping(valid_request["shipping"])
        assert rejection.code is RejectionCode.INVALID_ZIP
        assert rejection.message == "Invalid ZIP code format"


class TestValidatePayment:
    def test_valid_card(self, valid_request):
        assert validate_payment(valid_request["payment"]) is None

    def test_card_number_with_spaces(self, valid_request):
        valid_request["payment"]["cardNumber"] = "4111 1111 1111 1111"
        assert validate_payment(valid_request["payment"]) is None

    @pytest.mark.parametrize("number", ["4111111111", "41111111111111111111", "4111-1111-1111-1111"])
    def test_invalid_card_number(self, valid_request, number):
        valid_request["payment"]["cardNumber"] = number
        rejection = validate_payment(valid_request["payment"])
        assert rejection.code is RejectionCode.INVALID_CARD
        assert rejection.message == "Invalid card number"

    @pytest.mark.parametrize("field", ["cardNumber", "expiryDate", "cardName", "cvv"])
    def test_missing_card_field(self, valid_request, field):
        valid_request["payment"][field] = ""
        rejection = validate_payment(valid_request["payment"])
        assert rejection.code is RejectionCode.MISSING_FIELD
        assert rejection.message == f"Missing card field: {field}"

    @pytest.mark.parametrize("expiry", ["13/25", "00/25", "1/25", "12/2025", "12-25"])
    def test_invalid_expiry(self, valid_request, expiry):
        valid_request["payment"]["expiryDate"] = expiry
        rejection = validate_payment(valid_request["payment"])
        assert rejection.code is RejectionCode.INVALID_EXPIRY
        assert rejection.message == "Invalid expiry date format (MM/YY)"

    @pytest.mark.parametrize("cvv", ["12", "12345", "abc"])
    def test_invalid_cvv(self, valid_request, cvv):
        valid_request["payment"]["cvv"] = cvv
        rejection = validate_payment(valid_request["payment"])
        assert rejection.code is RejectionCode.INVALID_CVV
        assert rejection.message == "Invalid CVV"

    def test_four_digit_cvv(self, valid_request):
        valid_request["payment"]["cvv"] = "1234"
        assert validate_payment(valid_request["payment"]) is None

    def test_valid_paypal(self):
        assert validate_payment({"method": "paypal", "paypalEmail": "john.doe@example.com"}) is None

    @pytest.mark.parametrize("payment", [
        {"method": "paypal"},
        {"method": "paypal", "paypalEmail": "not-an-email"},
    ])
    def test_invalid_paypal_email(self, payment):
        rejection = validate_payment(payment)
        assert rejection.code is RejectionCode.INVALID_PAYPAL_EMAIL
        assert rejection.message == "Valid PayPal email required"

    def test_unsupported_method(self):
        rejection = validate_payment({"method": "bitcoin"})
        assert rejection.code is RejectionCode.UNSUPPORTED_PAYMENT_METHOD
        assert rejection.message == "Unsupported payment method"

    def test_missing_method(self):
        rejection = validate_payment({"cardNumber": "4111111111111111"})
        assert rejection.code is RejectionCode.MISSING_FIELD
        assert rejection.message == "Payment method not specified"


class TestIsValidEmail:
    @pytest.mark.parametrize("email", [
        "john.doe@example.com",
        "a+tag@sub.example.co",
        "o'neil@example-shop.org",
    ])
    def test_valid(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", [
        "invalid-email",
        "john@localhost",
        "john..doe@example.com",
        ".john@example.com",
        "john@-example.com",
        "john@example",
        "john doe@example.com",
        None,
        "a" * 65 + "@example.com",
    ])
    def test_invalid(self, email):
        assert not is_valid_email(email)
