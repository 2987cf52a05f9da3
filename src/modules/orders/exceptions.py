"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
``{"message": ...}`` responses, or into error redirects for the
payment callback.
"""

from __future__ import annotations

from modules.core.exceptions import DomainValidationError, InvalidState, NotFound


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderStatus(InvalidState):
    """The order's current status does not allow the operation."""


class EmptyOrder(DomainValidationError):
    """The cart submission contains no items."""


class InsufficientStock(DomainValidationError):
    """Not enough stock to fulfil an order line."""


class PaymentDeclined(DomainValidationError):
    """The gateway reported a non-success response code."""


class InvalidPaymentSignature(DomainValidationError):
    """The gateway callback signature does not match."""


class OrderAlreadyProcessed(InvalidState):
    """A payment callback arrived for an order that is no longer Pending."""


class MissingDeliveryImage(DomainValidationError):
    """Delivery confirmation was requested without a photo."""


class InvalidDeliveryImage(DomainValidationError):
    """The uploaded delivery photo has an unsupported content type."""
