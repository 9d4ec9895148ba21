"""
workflow.py — Core Checkout Pipeline

This module contains the checkout logic. It runs every step of a checkout
request in a fixed order and stops at the first step that fails.

Workflow Overview:
1. Validate the request structure
2. Validate cart lines against the catalog
3. Calculate totals server-side (client totals are never trusted)
4. Validate shipping information
5. Validate payment information
6. Charge the payment gateway
7. Assemble the confirmed order
8. Hand the order to the order sink
9. Return the confirmation

States: Received → Validated → Priced → PaymentCharged → Confirmed, with an
early exit to Rejected(reason) or PaymentFailed(reason). Nothing is retried;
the caller may resubmit.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from .assembler import OrderAssembler
from .catalog import Catalog
from .clients import OrderSink, PaymentGateway
from .config import CheckoutSettings
from .models import Order, RejectionCode
from .pricing import calculate_totals
from .validation import validate_cart, validate_input, validate_payment, validate_shipping

log = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Order placed successfully!"
INTERNAL_ERROR_MESSAGE = "Internal server error"


class OutcomeKind(str, Enum):
    SUCCESS = "SUCCESS"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PAYMENT_DECLINED = "PAYMENT_DECLINED"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    OutcomeKind.SUCCESS: 200,
    OutcomeKind.MALFORMED_INPUT: 400,
    OutcomeKind.VALIDATION_ERROR: 400,
    OutcomeKind.PAYMENT_DECLINED: 402,
    OutcomeKind.INTERNAL_ERROR: 500,
}


class CheckoutOutcome(BaseModel):
    """
    Result of one checkout request.

    Attributes:
        kind (OutcomeKind): Success or the class of failure; selects the HTTP status.
        body (dict): JSON-ready response body.
        order (Order | None): The confirmed order on success.
    """
    kind: OutcomeKind
    body: Dict[str, Any]
    order: Optional[Order] = None

    @property
    def http_status(self) -> int:
        return self.kind.http_status

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


class CheckoutProcessor:
    """
    Runs the checkout pipeline against an injected catalog and collaborators.

    The processor keeps no state between requests; concurrent calls are safe
    as long as the collaborators are.
    """

    def __init__(
        self,
        catalog: Catalog,
        payment_gateway: PaymentGateway,
        order_sink: OrderSink,
        settings: Optional[CheckoutSettings] = None,
        assembler: Optional[OrderAssembler] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog
        self.payment_gateway = payment_gateway
        self.order_sink = order_sink
        self.settings = settings or CheckoutSettings()
        self.assembler = assembler or OrderAssembler(catalog, clock=clock)
        self.clock = clock

    def process(self, data: Any) -> CheckoutOutcome:
        """
        Processes one checkout request.

        Args:
            data: Decoded JSON body of the request.

        Returns:
            CheckoutOutcome: The confirmation, or the first failure. Unexpected
            exceptions are logged and reported as a generic internal error.
        """
        try:
            return self._run(data)
        except Exception as e:
            log.critical(f"[Checkout] Unbekannter Fehler bei der Bestellverarbeitung: {e}", exc_info=True)
            return self._error(OutcomeKind.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE, OutcomeKind.INTERNAL_ERROR.value)

    def _run(self, data: Any) -> CheckoutOutcome:
        log.info("[Checkout] Neue Bestellung erhalten.")

        # --- 1. Request structure ---
        rejection = validate_input(data)
        if rejection:
            kind = OutcomeKind.MALFORMED_INPUT if rejection.code is RejectionCode.MALFORMED_INPUT \
                else OutcomeKind.VALIDATION_ERROR
            return self._reject(kind, rejection.code, rejection.message)

        # --- 2. Cart ---
        rejection = validate_cart(data["cart"], self.catalog, self.settings.price_tolerance)
        if rejection:
            return self._reject(OutcomeKind.VALIDATION_ERROR, rejection.code, rejection.message)

        # --- 3. Totals ---
        totals = calculate_totals(data["cart"], self.catalog, self.settings)
        log.info(f"[Checkout] Summen berechnet: Zwischensumme {totals.subtotal}, Gesamt {totals.total}.")

        # --- 4. Shipping ---
        rejection = validate_shipping(data["shipping"])
        if rejection:
            return self._reject(OutcomeKind.VALIDATION_ERROR, rejection.code, rejection.message)

        # --- 5. Payment details ---
        rejection = validate_payment(data["payment"])
        if rejection:
            return self._reject(OutcomeKind.VALIDATION_ERROR, rejection.code, rejection.message)

        # --- 6. Charge ---
        charge = self.payment_gateway.charge(data["payment"], totals.total)
        if not charge.success:
            log.warning(f"[Checkout] Zahlung fehlgeschlagen: {charge.error}")
            return self._error(
                OutcomeKind.PAYMENT_DECLINED,
                f"Payment failed: {charge.error}",
                OutcomeKind.PAYMENT_DECLINED.value,
            )

        # --- 7. Order ---
        order = self.assembler.build(data, totals)
        log_prefix = f"[Order: {order.order_id}]"

        # --- 8. Hand over ---
        try:
            order_id = self.order_sink.save(order)
        except Exception:
            log.critical(
                f"{log_prefix} Zahlung erfolgreich (TxID: {charge.transaction_id}), "
                f"aber Bestellung nicht gespeichert. BENÖTIGT MANUELLE AKTION!"
            )
            raise

        log.info(f"{log_prefix} Bestellung bestätigt. (TxID: {charge.transaction_id})")

        return CheckoutOutcome(
            kind=OutcomeKind.SUCCESS,
            order=order,
            body={
                "success": True,
                "order_id": order_id,
                "tracking_number": order.tracking_number,
                "status": order.status.value,
                "message": SUCCESS_MESSAGE,
                "order_details": order.model_dump(mode="json"),
                "estimated_delivery": self.settings.estimated_delivery,
            },
        )

    def _reject(self, kind: OutcomeKind, code: RejectionCode, message: str) -> CheckoutOutcome:
        log.warning(f"[Checkout] Abgelehnt ({code.value}): {message}")
        return self._error(kind, message, code.value)

    def _error(self, kind: OutcomeKind, message: str, code: str) -> CheckoutOutcome:
        return CheckoutOutcome(
            kind=kind,
            body={
                "success": False,
                "error": message,
                "code": code,
                "timestamp": self.clock().strftime("%Y-%m-%d %H:%M:%S"),
            },
        )
