"""Event field extraction — normalizes a parsed Helio payload.

Helio payloads are not uniform about field names, so the identifier and
amount are probed from fixed, ordered candidate lists (first present wins).
A payload with no identifier gets a random one; such events can never be
deduplicated across provider retries.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger(__name__)

# Order matters: first present key wins
EVENT_ID_FIELDS: tuple[str, ...] = ("txId", "id", "transactionId", "reference")
AMOUNT_FIELDS: tuple[str, ...] = ("amountUsd", "usdAmount", "amount")

_ZERO = Decimal("0")
_MISSING = object()


class MalformedEventError(ValueError):
    """Payload cannot be interpreted as a Helio event at all."""


@dataclass(frozen=True)
class InboundEvent:
    """Normalized webhook event ready for the ledger."""

    raw_body: bytes
    event_id: str
    amount: Decimal
    id_synthesized: bool = False


def first_present(payload: Mapping[str, Any], keys: tuple[str, ...], default: Any = None) -> Any:
    """Return the value of the first key present in payload.

    A key holding JSON null is present: its null value wins.
    """
    for key in keys:
        if key in payload:
            return payload[key]
    return default


def coerce_amount(value: Any) -> Decimal:
    """Coerce a payload amount to a finite Decimal; anything else becomes 0."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, float):
        value = repr(value)
    elif not isinstance(value, (int, str, Decimal)):
        return _ZERO
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        return _ZERO
    if not amount.is_finite():
        return _ZERO
    return amount


def extract_event(raw_body: bytes, payload: Any) -> InboundEvent:
    """Build an InboundEvent from a parsed payload.

    Raises:
        MalformedEventError: payload is not a JSON object
    """
    if not isinstance(payload, Mapping):
        raise MalformedEventError(f"expected a JSON object, got {type(payload).__name__}")

    raw_id = first_present(payload, EVENT_ID_FIELDS, _MISSING)
    if raw_id is _MISSING:
        event_id = str(uuid.uuid4())
        logger.warning("Helio event has no identifier; generated %s (cannot dedup retries)", event_id)
        synthesized = True
    elif raw_id is None:
        event_id = "null"
        synthesized = False
    else:
        event_id = str(raw_id)
        synthesized = False

    amount = coerce_amount(first_present(payload, AMOUNT_FIELDS))

    return InboundEvent(
        raw_body=raw_body,
        event_id=event_id,
        amount=amount,
        id_synthesized=synthesized,
    )
