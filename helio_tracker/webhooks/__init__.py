"""Helio webhook inbound system.

Each webhook is signature-verified, normalized, and applied to the
donation ledger idempotently.
"""
