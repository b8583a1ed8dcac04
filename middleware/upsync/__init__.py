"""
Up to PocketSmith Webhook Bridge

Receives Up transaction webhooks, verifies their signature and mirrors the
referenced transactions into PocketSmith.
"""

__version__ = "1.0.0"
