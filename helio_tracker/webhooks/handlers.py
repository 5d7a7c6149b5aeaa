"""Webhook HTTP handlers — FastAPI routes for the Helio webhook and total.

Each webhook request:
1. Reads raw body (needed for HMAC verification)
2. Decodes JSON (amounts as Decimal); undecodable bodies pass through as None
3. Hands off to WebhookIngestor
4. Maps the disposition to a response

Security contract:
- Never return error details to the webhook caller (info disclosure)
- Return 401 only for signature failures
- Return 200 for everything else, including internal errors, so the
  provider never escalates retries
"""

from __future__ import annotations

import json
import logging
import time
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from helio_tracker.totals import TotalQueryService
from helio_tracker.webhooks.ingestor import Disposition, WebhookIngestor

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    Disposition.ACCEPTED: 200,
    Disposition.IGNORED: 200,
    Disposition.ERRORED: 200,
    Disposition.UNAUTHORIZED: 401,
}

_STATUS_BODIES = {
    Disposition.ACCEPTED: "received",
    Disposition.IGNORED: "ignored",
    Disposition.ERRORED: "received",
    Disposition.UNAUTHORIZED: "unauthorized",
}


def _decode_body(body: bytes) -> Any:
    """Decode a JSON body, keeping numbers exact. Returns None if undecodable."""
    try:
        return json.loads(body, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.info("Webhook body is not valid JSON (%d bytes)", len(body))
        return None


async def _handle_webhook(request: Request, ingestor: WebhookIngestor) -> JSONResponse:
    start = time.time()

    body = await request.body()
    headers = {k.lower(): v for k, v in request.headers.items()}

    result = ingestor.ingest(body, headers, _decode_body(body))

    elapsed_ms = (time.time() - start) * 1000
    logger.debug("Webhook processed in %.1fms: %s", elapsed_ms, result.disposition.value)

    return JSONResponse(
        {"status": _STATUS_BODIES[result.disposition]},
        status_code=_STATUS_CODES[result.disposition],
    )


def register_webhook_routes(app: FastAPI, ingestor: WebhookIngestor, totals: TotalQueryService) -> None:
    """Register the Helio webhook and total routes on the FastAPI app."""

    @app.post("/helio/webhook")
    async def helio_webhook(request: Request):
        """Receive Helio webhooks (signature-verified, idempotent)."""
        return await _handle_webhook(request, ingestor)

    @app.get("/helio/total")
    async def helio_total():
        """Current donation total. Public, polled by the widget."""
        view = totals.get_total()
        return JSONResponse(jsonable_encoder({"total": view.total, "currency": view.currency}))

    @app.get("/helio/webhook/status")
    async def helio_webhook_status():
        """Webhook receive counts per disposition."""
        return {"counts": ingestor.counts(), "events": totals.event_count()}

    logger.info("Webhook routes registered: /helio/{webhook,total,webhook/status}")
