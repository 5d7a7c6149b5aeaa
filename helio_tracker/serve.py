"""Helio donation tracker service.

Routes:
    GET  /healthz              -> "ok"
    GET  /helio/total          -> {"total": ..., "currency": ...}
    POST /helio/webhook        -> Helio webhook (idempotent)
    GET  /helio/webhook/status -> per-disposition counters

State is in memory and resets on restart.

Run with: python -m helio_tracker.serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from helio_tracker import __version__
from helio_tracker.config import Settings, load_settings
from helio_tracker.ledger import DonationLedger
from helio_tracker.totals import TotalQueryService
from helio_tracker.webhooks.handlers import register_webhook_routes
from helio_tracker.webhooks.ingestor import WebhookIngestor

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app with a fresh, empty ledger."""
    settings = settings or load_settings()

    if settings.unsecured:
        logger.warning("HELIO_WEBHOOK_SECRET not set, accepting unsigned webhooks (unsecured mode)")

    ledger = DonationLedger(currency=settings.currency)
    ingestor = WebhookIngestor(ledger, secret=settings.helio_webhook_secret)
    totals = TotalQueryService(ledger)

    app = FastAPI(title="Helio Donation Tracker", version=__version__)
    app.state.settings = settings
    app.state.ledger = ledger
    app.state.ingestor = ingestor
    app.state.totals = totals

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz():
        return "ok"

    register_webhook_routes(app, ingestor, totals)
    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Helio tracker listening on :%d (currency=%s)", settings.port, settings.currency)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
