"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
All write operations are wrapped in ``transaction.atomic()`` to ensure
the Order aggregate (Order + OrderItems) is persisted atomically.

Concurrency control on status updates uses ``select_for_update()``
to prevent race conditions (no ``version`` field exists on the model).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Case, IntegerField, Value, When

from modules.core.outbox import record_events
from modules.orders.constants import SHIPPER_VISIBLE_STATUSES
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


def _with_relations(queryset: "models.QuerySet[Order]") -> "models.QuerySet[Order]":
    return queryset.select_related("account").prefetch_related(
        "items__product", "status_history"
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` keys:
        - ``account_id`` (required)
        - ``items`` (required): list of dicts with ``product_id``,
          ``quantity``, ``unit_price``
        """
        order = Order(account_id=data["account_id"])
        order.save()

        total = Decimal("0.00")
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                product_id=item_data["product_id"],
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            )
            item.save()
            total += item.subtotal

        order.total_amount = total
        order.save(update_fields=["total_amount", "updated_at"])

        logger.info("order.created", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return _with_relations(Order.objects.filter(id=id)).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Eager-loads items (with product) so the caller can iterate
        over them while the row is locked.  Returns ``None`` for
        non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items__product")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = _with_relations(Order.objects.all())
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_for_account(self, account_id: str) -> List[Order]:
        try:
            queryset = Order.objects.filter(account_id=account_id)
            return list(
                _with_relations(queryset).order_by("-created_at", "-id")
            )
        except (ValueError, ValidationError):
            return []

    def list_for_shipping(self) -> List[Order]:
        status_rank = Case(
            *[
                When(status=status, then=Value(rank))
                for rank, status in enumerate(SHIPPER_VISIBLE_STATUSES)
            ],
            output_field=IntegerField(),
        )
        queryset = (
            Order.objects.filter(status__in=SHIPPER_VISIBLE_STATUSES)
            .annotate(status_rank=status_rank)
            .order_by("status_rank", "-created_at", "-id")
        )
        return list(_with_relations(queryset))

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and write its pending domain events to the outbox."""
        entity.save()

        events = entity.domain_events
        record_events(events, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        history.save()

        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history
