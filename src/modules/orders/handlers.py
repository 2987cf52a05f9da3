"""Event handlers for Orders domain events.

Handlers run after the producing transaction has committed (see
``modules.core.outbox``).
"""

from __future__ import annotations

import structlog

from modules.notifications.services import dispatch_refund_email
from modules.orders.events import OrderCanceled, OrderPlaced
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderPlacedHandler(IEventHandler[OrderPlaced]):
    def handle(self, event: OrderPlaced) -> None:
        logger.info(
            "order.event.placed",
            order_id=str(event.aggregate_id),
            account_id=event.account_id,
            total_amount=str(event.total_amount),
        )


class OrderStatusChangedHandler(IEventHandler[DomainEvent]):
    """Audit log line for Paid, Shipping and Delivered transitions."""

    def handle(self, event: DomainEvent) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            event_name=event.event_name,
        )


class OrderCanceledHandler(IEventHandler[OrderCanceled]):
    """Sends the refund confirmation email."""

    def handle(self, event: OrderCanceled) -> None:
        logger.info(
            "order.event.canceled",
            order_id=str(event.aggregate_id),
            refund_amount=str(event.refund_amount),
        )
        dispatch_refund_email(str(event.aggregate_id), event.refund_amount)


order_placed_handler = OrderPlacedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_canceled_handler = OrderCanceledHandler()
