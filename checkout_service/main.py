"""
main.py — FastAPI Entry Point for the Checkout Service

This module binds the checkout pipeline to HTTP. The shop frontend posts the
cart, shipping and payment data; the service answers with the confirmed order
or with a JSON error.

Responsibilities:
    • Accept checkout requests via HTTP API (POST only)
    • Answer CORS preflight requests and add CORS headers to every response
    • Translate pipeline outcomes into HTTP status codes (400 / 402 / 500)
    • Provide system health information
"""

import json
import os
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .catalog import DEFAULT_CATALOG
from .clients import build_order_sink, build_payment_gateway
from .config import CheckoutSettings
from .logging_config import get_logger, setup_logging
from .workflow import CheckoutProcessor

log = get_logger(__name__)

CHECKOUT_PATH = "/v1/checkout"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def build_processor(settings: CheckoutSettings) -> CheckoutProcessor:
    """Wires the pipeline with the static catalog and the collaborators selected by ``settings``."""
    return CheckoutProcessor(
        catalog=DEFAULT_CATALOG,
        payment_gateway=build_payment_gateway(settings),
        order_sink=build_order_sink(settings),
        settings=settings,
    )


def create_app(processor: Optional[CheckoutProcessor] = None) -> FastAPI:
    """
    Creates the FastAPI application.

    Args:
        processor (CheckoutProcessor | None): Pipeline to serve; built from the
            environment when omitted.

    Returns:
        FastAPI: The configured application.
    """
    if processor is None:
        processor = build_processor(CheckoutSettings.from_env())

    app = FastAPI(title="Checkout Service")

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    # API Endpoint: Frontend → Checkout Service
    @app.post(CHECKOUT_PATH)
    async def checkout(request: Request):
        """
        Processes a checkout request.

        The raw body is decoded here and handed to the pipeline unparsed, so
        every validation failure keeps its specific reason.

        Returns:
            JSONResponse:
                - 200 with the order confirmation
                - 400 for invalid JSON or a failed validation
                - 402 if the payment was declined
                - 500 for unexpected errors
        """
        raw_body = await request.body()
        try:
            data = json.loads(raw_body)
        except ValueError as e:
            log.warning(f"[Checkout] Ungültiger JSON-Body: {e}")
            return JSONResponse(
                status_code=400,
                content={"success": False, "error": "Invalid JSON input", "details": str(e)},
            )

        outcome = await run_in_threadpool(processor.process, data)
        return JSONResponse(status_code=outcome.http_status, content=outcome.body)

    # CORS preflight
    @app.options(CHECKOUT_PATH)
    def checkout_preflight():
        return Response(status_code=200)

    @app.api_route(CHECKOUT_PATH, methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "TRACE"])
    def checkout_method_not_allowed():
        return JSONResponse(
            status_code=405,
            content={"success": False, "error": "Method not allowed. Use POST."},
            headers={"Allow": "POST, OPTIONS"},
        )

    # Health Check Endpoint
    @app.get("/health")
    def health_check():
        """
        Simple health check endpoint for monitoring systems and container orchestrators.

        Returns:
            dict: A basic JSON object indicating service availability.
        """
        return {"status": "ok"}

    return app


def run():
    """Console entry point: configures logging and serves the app with uvicorn."""
    import uvicorn

    setup_logging()
    log.info("Checkout-Service startet...")
    uvicorn.run(
        "checkout_service.main:create_app",
        factory=True,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
