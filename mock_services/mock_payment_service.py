"""
mock_payment_service.py — Mock Implementation of the Payment Service (REST API)

This module provides a simulated Payment Service for the `HttpPaymentGateway`
of the checkout service. It exposes a simple FastAPI application that mimics a
card processor that approves most charges and declines the rest.

Simulation Scenarios:
    • Successful payment processing (probability MOCK_PAYMENT_SUCCESS_RATE, default 0.9)
    • Declined payment (HTTP 402)

Endpoints:
    POST /v2/charges — Handles incoming charge requests.

Port:
    Default: 8001 (HTTP)
"""

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel, Field
import logging
import os
import random
import time
import uuid

app = FastAPI(title="Mock Payment Service")
logging.basicConfig(level=logging.INFO)

SUCCESS_RATE = float(os.environ.get("MOCK_PAYMENT_SUCCESS_RATE", "0.9"))
rng = random.Random()


class ChargeRequest(BaseModel):
    """
    Represents a payment charge request payload.

    Attributes:
        amount (int): Total payment amount in the smallest currency units (e.g., cents).
        currency (str): ISO 4217 currency code (e.g., 'USD').
        paymentMethod (str): 'card' or 'paypal'.
        referenceId (str): Identifier of the checkout request associated with this charge.
    """
    amount: int = Field(..., gt=0)
    currency: str
    paymentMethod: str
    referenceId: str


@app.post("/v2/charges")
def create_charge(
        request: ChargeRequest,
        idempotency_key: str = Header(..., alias="Idempotency-Key")
):
    """
        Processes a payment charge request.

        Each charge succeeds with probability `SUCCESS_RATE`; otherwise it is
        declined with HTTP 402.

        Args:
            request (ChargeRequest): The charge details including amount, currency, method and referenceId.
            idempotency_key (str): Unique identifier from the client to ensure request idempotency.

        Returns:
            dict: Payment transaction result on success, including:
                - transactionId (str): Unique transaction identifier.
                - status (str): Always "succeeded" for successful payments.
                - createdAt (str): UTC timestamp of the transaction.

        Raises:
            HTTPException(402): If the payment is declined.
    """
    logging.info(f"[PS] Zahlungsanfrage für {request.referenceId} (Idempotenz: {idempotency_key})")

    if rng.random() >= SUCCESS_RATE:
        logging.warning(f"[PS] Zahlung für {request.referenceId} abgelehnt.")
        raise HTTPException(
            status_code=402,
            detail={"errorCode": "payment_declined", "message": "Payment declined by issuer"}
        )

    logging.info(f"[PS] Zahlung für {request.referenceId} erfolgreich.")
    return {
        "transactionId": f"TXN_{int(time.time())}_{uuid.uuid4().hex[:8]}",
        "status": "succeeded",
        "createdAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
