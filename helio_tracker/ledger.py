"""Donation ledger — in-memory running total with idempotent event application.

Concurrency contract:
- A single threading.Lock serializes writers in apply()
- Each successful apply publishes a new immutable LedgerSnapshot
- snapshot() reads the published reference without locking, so readers
  never block on apply() and never see a half-applied event
- State resets on restart (no persistence)

Known limitation: the set of seen event IDs is never evicted, so memory
grows with the number of distinct donations for the life of the process.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Consistent point-in-time view of the ledger."""

    total: Decimal
    currency: str
    event_count: int


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of DonationLedger.apply()."""

    applied: bool


class DonationLedger:
    """Running donation total plus the set of event IDs already counted.

    The ledger is the sole owner and mutator of its state. All writes go
    through apply(); all reads go through snapshot().
    """

    def __init__(self, currency: str = "USD") -> None:
        self._currency = currency
        self._lock = threading.Lock()
        self._total = Decimal("0")
        self._seen: set[str] = set()
        self._snapshot = LedgerSnapshot(total=self._total, currency=currency, event_count=0)

    @property
    def currency(self) -> str:
        return self._currency

    def apply(self, event_id: str, amount: Decimal) -> ApplyResult:
        """Add amount to the total unless event_id has already been applied.

        Args:
            event_id: Provider transaction identifier
            amount: Strictly positive donation amount

        Returns:
            ApplyResult with applied=False exactly when event_id was seen before

        Raises:
            ValueError: amount is not strictly positive (total must never decrease)
        """
        if not amount > 0:
            raise ValueError(f"ledger amounts must be positive, got {amount!r}")

        with self._lock:
            if event_id in self._seen:
                logger.info("Duplicate donation event ignored: %s", event_id)
                return ApplyResult(applied=False)

            # Add first: if the sum raises, the event must stay unseen
            new_total = self._total + amount
            self._seen.add(event_id)
            self._total = new_total
            self._snapshot = LedgerSnapshot(
                total=self._total,
                currency=self._currency,
                event_count=len(self._seen),
            )

        logger.info("Donation applied: %s +%s %s", event_id, amount, self._currency)
        return ApplyResult(applied=True)

    def snapshot(self) -> LedgerSnapshot:
        """Return the most recently published snapshot."""
        return self._snapshot

    def has_seen(self, event_id: str) -> bool:
        with self._lock:
            return event_id in self._seen
