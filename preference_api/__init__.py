"""Preference resolution and locale negotiation service."""

__version__ = "1.0.0"
