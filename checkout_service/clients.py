"""
This module provides the clients for the external systems the checkout pipeline calls into:
- Payment gateway: in-process simulator or a Payment Service (REST API)
- Order sink: no-op, JSON archive on disk, or RabbitMQ queue
Each class encapsulates its protocol logic, error handling, and connection management.
"""

import json
import logging
import random
import threading
import time
import uuid
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx
import pika

from .config import CheckoutSettings
from .models import ChargeResult, Order

ORDER_QUEUE = "checkout.orders.confirmed"

log = logging.getLogger(__name__)


class PaymentGateway(ABC):
    @abstractmethod
    def charge(self, payment: Dict[str, Any], amount: Decimal) -> ChargeResult:
        """Charges ``amount`` to the validated payment details."""


class OrderSink(ABC):
    @abstractmethod
    def save(self, order: Order) -> str:
        """Hands a confirmed order over for storage and returns its id."""


# --- Payment Gateway (Simulation) ---
class SimulatedPaymentGateway(PaymentGateway):
    """
    Stand-in for a real payment provider.

    Approves a charge with probability ``success_rate``; the random source and
    the clock are injectable so tests can fix the outcome.
    """

    def __init__(
        self,
        success_rate: float = 0.9,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.success_rate = success_rate
        self.rng = rng or random.Random()
        self.clock = clock

    def charge(self, payment: Dict[str, Any], amount: Decimal) -> ChargeResult:
        if self.rng.random() < self.success_rate:
            transaction_id = f"TXN_{int(self.clock())}_{self.rng.randint(1000, 9999)}"
            log.info(f"[Payment] Simulierte Zahlung über {amount} erfolgreich. (TxID: {transaction_id})")
            return ChargeResult(success=True, transaction_id=transaction_id)

        log.warning(f"[Payment] Simulierte Zahlung über {amount} abgelehnt.")
        return ChargeResult(success=False, error="Payment declined by issuer")


# --- Payment Client (REST) ---
class HttpPaymentGateway(PaymentGateway):
    """
    Client for the Payment Service (REST API).
    Handles the creation of payment charges and declined responses.
    """

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None, currency: str = "USD"):
        """
        Initializes the HTTP client with proper timeout configuration.

        Args:
            base_url (str): Base URL of the Payment Service.
            client (httpx.Client | None): Preconfigured client (e.g. with a mock transport).
            currency (str): ISO currency code sent with every charge.
        """
        timeout_config = httpx.Timeout(5.0, read=8.0)
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout_config)
        self.currency = currency

    def close(self):
        self.client.close()

    def charge(self, payment: Dict[str, Any], amount: Decimal) -> ChargeResult:
        """
        Creates a new charge via the Payment Service REST API.

        Only the payment method travels to the service; card data stays in the request.

        Args:
            payment (dict): Validated payment section.
            amount (Decimal): Order total in major currency units.

        Returns:
            ChargeResult: Success with the transaction id, or failure with the decline message.

        Raises:
            httpx.TimeoutException: If the service does not respond within the timeout.
            httpx.HTTPStatusError: If the service returns an error status other than 402.
        """
        reference_id = f"chk-{uuid.uuid4()}"
        payload = {
            "amount": int((amount * 100).to_integral_value()),
            "currency": self.currency,
            "paymentMethod": payment["method"],
            "referenceId": reference_id,
        }
        headers = {"Idempotency-Key": str(uuid.uuid4())}

        try:
            response = self.client.post("/v2/charges", json=payload, headers=headers)
            response.raise_for_status()
        except httpx.TimeoutException:
            log.error(f"[Payment: {reference_id}] Payment Service Timeout. Status unbekannt.")
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 402:
                reason = _decline_reason(e.response)
                log.warning(f"[Payment: {reference_id}] Zahlung abgelehnt: {reason}")
                return ChargeResult(success=False, error=reason)
            log.error(f"[Payment: {reference_id}] HTTP-Fehler beim Payment: {e}")
            raise

        data = response.json()
        log.info(f"[Payment: {reference_id}] Zahlung erfolgreich. (TxID: {data.get('transactionId')})")
        return ChargeResult(success=True, transaction_id=data.get("transactionId"))


def _decline_reason(response: httpx.Response) -> str:
    """Reads the decline message from a 402 body; the body may be anything, JSON or not."""
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, dict):
        detail = detail.get("message")
    return detail if isinstance(detail, str) and detail else "Payment declined"


# --- Order Sinks ---
class NullOrderSink(OrderSink):
    """Accepts orders without storing them."""

    def save(self, order: Order) -> str:
        return order.order_id


class JsonFileOrderSink(OrderSink):
    """Archives every order as ``<directory>/<order_id>.json``."""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def save(self, order: Order) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{order.order_id}.json"
        path.write_text(order.model_dump_json(indent=2), encoding="utf-8")
        log.info(f"[Order: {order.order_id}] Bestellung archiviert unter {path}.")
        return order.order_id


class RabbitMQOrderSink(OrderSink):
    """
    Publishes confirmed orders to RabbitMQ for downstream processing.
    The connection is opened on first use and re-opened when it was lost.
    Publishing and reconnecting share one lock across threads.
    """

    def __init__(self, host: str, user: str = "guest", password: str = "guest", queue: str = ORDER_QUEUE):
        self.host = host
        self.credentials = pika.PlainCredentials(user, password)
        self.queue = queue
        self.connection = None
        self.channel = None
        self._lock = threading.Lock()

    def _connect(self):
        """
        Establishes the RabbitMQ connection and declares the order queue.
        Raises:
            pika.exceptions.AMQPConnectionError: If the connection fails.
        """
        try:
            self.connection = pika.BlockingConnection(
                pika.ConnectionParameters(host=self.host, credentials=self.credentials, heartbeat=60)
            )
            self.channel = self.connection.channel()
            self.channel.queue_declare(queue=self.queue, durable=True)
            log.info("Order Sink mit RabbitMQ verbunden.")
        except pika.exceptions.AMQPConnectionError as e:
            log.critical(f"Kann nicht zu RabbitMQ (Order Sink) verbinden: {e}")
            raise

    def save(self, order: Order) -> str:
        """
        Publishes the order as a persistent JSON message.
        Raises:
            pika.exceptions.AMQPError: If publishing fails.
        """
        message = {
            "messageId": str(uuid.uuid4()),
            "publishedAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "order": order.model_dump(mode="json"),
        }
        try:
            with self._lock:
                if not self.connection or self.connection.is_closed:
                    self._connect()

                self.channel.basic_publish(
                    exchange='',
                    routing_key=self.queue,
                    body=json.dumps(message),
                    properties=pika.BasicProperties(delivery_mode=2)  # persistent
                )
            log.info(f"[Order: {order.order_id}] Bestellung an Queue '{self.queue}' gesendet.")
        except pika.exceptions.AMQPError as e:
            log.error(f"[Order: {order.order_id}] FEHLER beim Senden an Queue: {e}")
            raise
        return order.order_id

    def close(self):
        with self._lock:
            if self.connection and self.connection.is_open:
                self.connection.close()


def build_payment_gateway(settings: CheckoutSettings) -> PaymentGateway:
    if settings.payment_service_url:
        return HttpPaymentGateway(settings.payment_service_url)
    return SimulatedPaymentGateway(success_rate=settings.payment_success_rate)


def build_order_sink(settings: CheckoutSettings) -> OrderSink:
    """
    Selects the order sink named by ``settings.order_sink``.
    Raises:
        ValueError: For an unknown sink name.
    """
    if settings.order_sink == "none":
        return NullOrderSink()
    if settings.order_sink == "file":
        return JsonFileOrderSink(settings.order_archive_dir)
    if settings.order_sink == "rabbitmq":
        return RabbitMQOrderSink(settings.rabbitmq_host, settings.rabbitmq_user, settings.rabbitmq_password)
    raise ValueError(f"Unknown order sink: {settings.order_sink}")
