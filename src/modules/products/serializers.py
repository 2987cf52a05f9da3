"""Product DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Brand, Category, Feedback, Product, Skin


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name"]


class BrandSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ["id", "name"]


class SkinSerializer(serializers.ModelSerializer):
    class Meta:
        model = Skin
        fields = ["id", "name"]


class FeedbackSerializer(serializers.ModelSerializer):
    account = serializers.CharField(source="account.username", read_only=True)

    class Meta:
        model = Feedback
        fields = ["id", "account", "rating", "comment", "created_at"]


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    category = CategorySerializer(read_only=True)
    brand = BrandSerializer(read_only=True)
    skins = SkinSerializer(many=True, read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "quantity",
            "image_url",
            "category",
            "brand",
            "skins",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductDetailSerializer(ProductSerializer):
    """Product with its customer feedback."""

    feedbacks = FeedbackSerializer(many=True, read_only=True)

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ["feedbacks"]
        read_only_fields = fields


class ProductWriteSerializer(serializers.Serializer):
    """Validates create/partial-update input before it becomes a DTO."""

    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField(min_value=0, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
    category = serializers.UUIDField(required=False)
    brand = serializers.UUIDField(required=False)
    skins = serializers.ListField(child=serializers.UUIDField(), required=False)

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than zero.")
        return value
