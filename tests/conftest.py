"""Shared fixtures for the Helio tracker test suite."""

from __future__ import annotations

import hashlib
import hmac

import pytest
from fastapi.testclient import TestClient

from helio_tracker.config import Settings
from helio_tracker.serve import create_app

SECRET = "s3cr3t"


@pytest.fixture
def sign():
    """Factory computing a valid X-Helio-Signature value."""

    def _sign(body: bytes, secret: str = SECRET) -> str:
        return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

    return _sign


@pytest.fixture
def secured_settings() -> Settings:
    return Settings(helio_webhook_secret=SECRET, currency="USD", cors_origin="*")


@pytest.fixture
def unsecured_settings() -> Settings:
    return Settings(helio_webhook_secret="", currency="USD", cors_origin="*")


@pytest.fixture
def app(secured_settings):
    """App with a fresh ledger and the test secret configured."""
    return create_app(secured_settings)


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def unsecured_client(unsecured_settings):
    with TestClient(create_app(unsecured_settings), raise_server_exceptions=False) as c:
        yield c
