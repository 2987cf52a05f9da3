"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Invalid status transitions are rejected (enforced at service layer
  through ``Order.can_transition_to``).
- Each status change generates a history record.
- Account FK uses PROTECT to preserve financial history.
- OrderItem snapshots product price at creation time (``unit_price``).
- OrderItem subtotal is always ``quantity * unit_price`` (calculated on save).
- Orders are never deleted.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``total_amount`` is computed once, when the order is placed, from the
    product prices at that moment.  ``image_confirm_delivered`` stays
    ``None`` until a shipper uploads the delivery photo.
    """

    account: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    image_confirm_delivered: models.URLField = models.URLField(
        max_length=500,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["account", "-created_at"], name="orders_account_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``unit_price`` is a **snapshot** of the product price at the time of
    purchase; it never changes even if the product price is updated later.
    ``subtotal`` is always ``quantity * unit_price``, recalculated on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.unit_price:
            unit_price = getattr(self.product, "price", None)
            if unit_price is None:
                raise ValidationError({"unit_price": "Product price is required."})
            self.unit_price = unit_price
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``old_status`` is ``None`` for the record written when the order is
    placed.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
