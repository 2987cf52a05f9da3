"""Order domain constants.

Defines status choices and valid status transitions for the order
state machine::

    Pending -> Paid -> Shipping -> Delivered
    Paid    -> Canceled
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    PAID = "Paid", "Paid"
    SHIPPING = "Shipping", "Shipping"
    DELIVERED = "Delivered", "Delivered"
    CANCELED = "Canceled", "Canceled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PAID},
    OrderStatus.PAID: {OrderStatus.SHIPPING, OrderStatus.CANCELED},
    OrderStatus.SHIPPING: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELED}

# Shipper dashboard order: work still to do comes first
SHIPPER_VISIBLE_STATUSES: tuple[str, ...] = (
    OrderStatus.PAID,
    OrderStatus.SHIPPING,
    OrderStatus.DELIVERED,
)

DELIVERY_IMAGE_DIR = "deliveryConfirmation"
