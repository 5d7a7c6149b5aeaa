"""Webhook signature verification — constant-time HMAC-SHA256.

Security contract:
- Comparison uses hmac.compare_digest() (constant-time, no timing attacks)
- Verification failure -> 401 immediately, no payload processing
- Missing signature header with a secret configured -> reject
- Empty secret -> unsecured mode, every request accepted. This is a
  deployment risk, not a bug: configure HELIO_WEBHOOK_SECRET in production.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping

# Helio sends a hex HMAC-SHA256 digest, optionally prefixed with "sha256="
SIGNATURE_HEADER = "x-helio-signature"
_SCHEME_PREFIX = "sha256="


def compute_signature(body: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of body keyed with secret."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify(body: bytes, signature_header: str | None, secret: str) -> bool:
    """Verify a Helio webhook signature.

    Args:
        body: Raw request body bytes
        signature_header: Value of X-Helio-Signature header (None if absent)
        secret: Shared webhook secret; empty disables verification

    Returns:
        True if the signature is valid or no secret is configured
    """
    if not secret:
        return True
    if not signature_header:
        return False

    given = signature_header.strip()
    if given.startswith(_SCHEME_PREFIX):
        given = given[len(_SCHEME_PREFIX):]

    expected = compute_signature(body, secret)
    # Compare bytes so non-ASCII header junk can't raise TypeError
    return hmac.compare_digest(expected.encode("ascii"), given.encode("utf-8"))


def signature_from_headers(headers: Mapping[str, str]) -> str | None:
    """Look up the signature header case-insensitively."""
    for name, value in headers.items():
        if name.lower() == SIGNATURE_HEADER:
            return value
    return None
