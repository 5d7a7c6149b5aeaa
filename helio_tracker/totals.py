"""Total query service — public, read-only view of the donation total.

Polled anonymously by the donation widget (default every 30s), so it only
ever reads the ledger's published snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from helio_tracker.ledger import DonationLedger


@dataclass(frozen=True)
class TotalView:
    total: Decimal
    currency: str


class TotalQueryService:
    """Read-only accessor over a DonationLedger."""

    def __init__(self, ledger: DonationLedger) -> None:
        self._ledger = ledger

    def get_total(self) -> TotalView:
        snap = self._ledger.snapshot()
        return TotalView(total=snap.total, currency=snap.currency)

    def event_count(self) -> int:
        """Number of distinct donation events counted so far."""
        return self._ledger.snapshot().event_count
