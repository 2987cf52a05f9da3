"""Payment gateway exceptions."""

from __future__ import annotations


class PaymentGatewayError(Exception):
    """The gateway adapter is misconfigured or cannot build a request."""
