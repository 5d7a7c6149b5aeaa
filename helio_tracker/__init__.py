"""Helio donation tracker — webhook ingestion and running donation total."""

__version__ = "0.1.0"
