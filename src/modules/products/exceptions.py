"""Product domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import DomainValidationError, NotFound


class ProductNotFound(NotFound):
    """The requested product does not exist."""


class InvalidProductData(DomainValidationError):
    """Product create/update input violates a catalogue rule."""
