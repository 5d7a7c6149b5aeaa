"""Tests for Helio webhook signature verification (constant-time HMAC)."""

from __future__ import annotations

import hashlib
import hmac
from unittest.mock import patch

from hypothesis import given
from hypothesis import strategies as st

from helio_tracker.webhooks.verification import (
    compute_signature,
    signature_from_headers,
    verify,
)

SECRET = "helio-test-secret"


def _sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


class TestVerify:
    """HMAC-SHA256 hex digest verification."""

    def test_valid_signature(self):
        body = b'{"txId": "tx1", "amount": 25}'
        assert verify(body, _sign(body), SECRET) is True

    def test_sha256_prefix_is_stripped(self):
        body = b'{"txId": "tx1"}'
        assert verify(body, "sha256=" + _sign(body), SECRET) is True

    def test_surrounding_whitespace_is_ignored(self):
        body = b"{}"
        assert verify(body, f"  {_sign(body)} ", SECRET) is True

    def test_invalid_signature(self):
        assert verify(b'{"amount": 1}', "invalid-signature", SECRET) is False

    def test_tampered_body(self):
        body = b'{"txId": "tx1", "amount": 25}'
        sig = _sign(body)
        assert verify(b'{"txId": "tx1", "amount": 2500}', sig, SECRET) is False

    def test_wrong_secret(self):
        body = b"{}"
        assert verify(body, _sign(body, "other-secret"), SECRET) is False

    def test_missing_signature(self):
        assert verify(b"body", None, SECRET) is False

    def test_empty_signature(self):
        assert verify(b"body", "", SECRET) is False

    def test_non_ascii_signature_rejected_without_error(self):
        assert verify(b"body", "sha256=ü" * 10, SECRET) is False

    def test_uses_constant_time_compare(self):
        body = b"{}"
        with patch("helio_tracker.webhooks.verification.hmac.compare_digest", return_value=True) as cmp:
            assert verify(body, "whatever", SECRET) is True
        cmp.assert_called_once()


class TestUnsecuredMode:
    """Empty secret bypasses verification."""

    def test_missing_signature_accepted(self):
        assert verify(b"body", None, "") is True

    def test_garbage_signature_accepted(self):
        assert verify(b"body", "garbage", "") is True

    @given(body=st.binary(), header=st.one_of(st.none(), st.text()))
    def test_every_signature_accepted(self, body, header):
        assert verify(body, header, "") is True


class TestSignatureGate:
    """With a secret configured, only the matching HMAC passes."""

    @given(body=st.binary(max_size=256), header=st.text(max_size=80))
    def test_mismatched_signature_always_rejected(self, body, header):
        expected = compute_signature(body, SECRET)
        candidate = header.strip()
        if candidate.startswith("sha256="):
            candidate = candidate[len("sha256="):]
        if candidate == expected:
            return
        assert verify(body, header, SECRET) is False

    @given(body=st.binary(max_size=256))
    def test_matching_signature_always_accepted(self, body):
        assert verify(body, compute_signature(body, SECRET), SECRET) is True


class TestSignatureFromHeaders:
    def test_lowercase(self):
        assert signature_from_headers({"x-helio-signature": "abc"}) == "abc"

    def test_mixed_case(self):
        assert signature_from_headers({"X-Helio-Signature": "abc"}) == "abc"

    def test_absent(self):
        assert signature_from_headers({"content-type": "application/json"}) is None
