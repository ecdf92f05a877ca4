"""Buyer/seller messaging for the marketplace: threads, messages, inboxes and realtime sync."""

__version__ = "1.0.0"
