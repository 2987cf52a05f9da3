"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory

EMPTY_ORDER_MESSAGE = "An order must contain at least one product."

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CartItemSerializer(serializers.Serializer):
    """Validates a single cart line: ``{"product": id, "quantity": n}``."""

    product = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class PlaceOrderSerializer(serializers.Serializer):
    """Validates ``POST /api/order/add-to-cart``."""

    account = serializers.UUIDField()
    items = CartItemSerializer(
        many=True,
        allow_empty=False,
        error_messages={"empty": EMPTY_ORDER_MESSAGE},
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class ProductSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    name = serializers.CharField(read_only=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with a product summary."""

    product = ProductSummarySerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    account = serializers.UUIDField(source="account_id", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "account",
            "status",
            "total_amount",
            "image_confirm_delivered",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(OrderSerializer):
    """Order with its status history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["status_history"]
        read_only_fields = fields
