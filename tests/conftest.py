"""Pytest fixtures for checkout service tests."""

import copy
from datetime import datetime
from decimal import Decimal

import pytest

from checkout_service.assembler import OrderAssembler
from checkout_service.catalog import DEFAULT_CATALOG
from checkout_service.clients import NullOrderSink, PaymentGateway
from checkout_service.models import ChargeResult
from checkout_service.workflow import CheckoutProcessor

FIXED_NOW = datetime(2026, 10, 18, 14, 30, 5)

VALID_REQUEST = {
    "cart": [
        {"id": "1", "quantity": 2, "price": 89.99},
        {"id": "3", "quantity": 1, "price": 49.99},
    ],
    "shipping": {
        "firstName": "John",
        "lastName": "Doe",
        "email": "john.doe@example.com",
        "address": "123 Main St",
        "city": "New York",
        "zipCode": "10001",
        "country": "US",
        "state": "NY",
    },
    "payment": {
        "method": "card",
        "cardNumber": "4111111111111111",
        "expiryDate": "12/25",
        "cardName": "John Doe",
        "cvv": "123",
    },
}


class StubRandom:
    """Random source with a fixed draw; randint always returns the lower bound."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value

    def randint(self, a, b):
        return a


class RecordingGateway(PaymentGateway):
    def __init__(self, result=None, error=None):
        self.result = result or ChargeResult(success=True, transaction_id="TXN_1_1000")
        self.error = error
        self.calls = []

    def charge(self, payment, amount):
        self.calls.append((payment, amount))
        if self.error:
            raise self.error
        return self.result


class RecordingSink(NullOrderSink):
    def __init__(self, error=None):
        self.error = error
        self.orders = []

    def save(self, order):
        if self.error:
            raise self.error
        self.orders.append(order)
        return super().save(order)


@pytest.fixture
def valid_request():
    """A fresh copy of a request that passes every check."""
    return copy.deepcopy(VALID_REQUEST)


@pytest.fixture
def stub_random():
    return StubRandom()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def declining_gateway():
    return RecordingGateway(ChargeResult(success=False, error="Payment declined by issuer"))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_processor(stub_random, clock):
    """Builds a processor on the default catalog with deterministic ids and timestamps."""

    def _make(gateway=None, sink=None, settings=None):
        return CheckoutProcessor(
            catalog=DEFAULT_CATALOG,
            payment_gateway=gateway or RecordingGateway(),
            order_sink=sink or RecordingSink(),
            settings=settings,
            assembler=OrderAssembler(DEFAULT_CATALOG, rng=stub_random, clock=clock),
            clock=clock,
        )

    return _make


@pytest.fixture
def expected_totals():
    return {
        "subtotal": Decimal("229.97"),
        "shipping": Decimal("0.00"),
        "tax": Decimal("18.40"),
        "total": Decimal("248.37"),
    }


@pytest.fixture
def recording_gateway_cls():
    return RecordingGateway


@pytest.fixture
def recording_sink_cls():
    return RecordingSink
