"""Webhook ingestor — verify, extract, and apply one Helio event.

Disposition contract:
- UNAUTHORIZED is the only outcome the HTTP layer turns into a non-2xx
- IGNORED: amount <= 0 (including missing or non-numeric amounts)
- ACCEPTED: applied, or a duplicate of an already-applied event
  (providers retry aggressively and must not be penalized)
- ERRORED: unexpected failure; still answered with 200 to avoid retry storms
"""

from __future__ import annotations

import enum
import logging
import threading
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from helio_tracker.ledger import DonationLedger
from helio_tracker.webhooks.extraction import extract_event
from helio_tracker.webhooks.verification import signature_from_headers, verify

logger = logging.getLogger(__name__)

PROVIDER = "helio"


class Disposition(str, enum.Enum):
    ACCEPTED = "accepted"
    IGNORED = "ignored"
    UNAUTHORIZED = "unauthorized"
    ERRORED = "errored"


@dataclass(frozen=True)
class IngestResult:
    """Outcome of ingesting one webhook request."""

    disposition: Disposition
    event_id: str | None = None
    amount: Decimal | None = None
    applied: bool = False


class WebhookIngestor:
    """Orchestrates signature check, field extraction, and ledger update."""

    def __init__(self, ledger: DonationLedger, secret: str = "") -> None:
        self._ledger = ledger
        self._secret = secret
        self._counts: Counter[str] = Counter()
        self._counts_lock = threading.Lock()

    def ingest(
        self,
        raw_body: bytes,
        headers: Mapping[str, str],
        parsed_body: Any,
    ) -> IngestResult:
        """Process one inbound webhook.

        Args:
            raw_body: Exact request bytes (signature is computed over these)
            headers: Request headers, any key casing
            parsed_body: Decoded JSON body, or None if it could not be parsed

        Returns:
            IngestResult carrying the disposition. Never raises.
        """
        try:
            result = self._ingest(raw_body, headers, parsed_body)
        except Exception:
            logger.exception("Webhook ingestion failed")
            result = IngestResult(disposition=Disposition.ERRORED)

        self._audit(result)
        return result

    def _ingest(self, raw_body: bytes, headers: Mapping[str, str], parsed_body: Any) -> IngestResult:
        # 1. Verify signature
        if not verify(raw_body, signature_from_headers(headers), self._secret):
            return IngestResult(disposition=Disposition.UNAUTHORIZED)

        # 2-3. Extract identifier and amount
        event = extract_event(raw_body, parsed_body)

        # 4. Non-positive amounts are benign no-ops
        if event.amount <= 0:
            return IngestResult(
                disposition=Disposition.IGNORED,
                event_id=event.event_id,
                amount=event.amount,
            )

        # 5. Idempotent apply
        outcome = self._ledger.apply(event.event_id, event.amount)
        return IngestResult(
            disposition=Disposition.ACCEPTED,
            event_id=event.event_id,
            amount=event.amount,
            applied=outcome.applied,
        )

    def _audit(self, result: IngestResult) -> None:
        """Audit log for webhook activity."""
        status = result.disposition.value
        if result.disposition is Disposition.ACCEPTED and not result.applied:
            status = "duplicate"
        with self._counts_lock:
            self._counts[result.disposition.value] += 1
            count = self._counts[result.disposition.value]
        logger.info(
            "WEBHOOK_AUDIT provider=%s disposition=%s id=%s amount=%s count=%d",
            PROVIDER,
            status,
            result.event_id or "unknown",
            result.amount if result.amount is not None else "-",
            count,
        )

    def counts(self) -> dict[str, int]:
        """Per-disposition request counts since startup."""
        with self._counts_lock:
            return {d.value: self._counts[d.value] for d in Disposition}
