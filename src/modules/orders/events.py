"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderPlaced(DomainEvent):
    """Raised when a Pending order is created from the cart."""

    account_id: str
    total_amount: Decimal


@dataclass(frozen=True, kw_only=True)
class OrderPaid(DomainEvent):
    """Raised when the gateway confirms payment and stock is taken."""


@dataclass(frozen=True, kw_only=True)
class OrderShipped(DomainEvent):
    """Raised when a paid order is handed to the shipper."""


@dataclass(frozen=True, kw_only=True)
class OrderDelivered(DomainEvent):
    """Raised when delivery is confirmed with a photo."""

    image_url: str


@dataclass(frozen=True, kw_only=True)
class OrderCanceled(DomainEvent):
    """Raised when a paid order is canceled and partially refunded."""

    account_id: str
    refund_amount: Decimal
