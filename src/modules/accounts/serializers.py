"""Account DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.accounts.models import Account


class AccountSerializer(serializers.ModelSerializer):
    """Read serializer for the Account resource (no credentials)."""

    class Meta:
        model = Account
        fields = [
            "id",
            "username",
            "email",
            "role",
            "balance",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AddBalanceSerializer(serializers.Serializer):
    """Validates ``PATCH /api/order/add-balance`` input."""

    account = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero.")
        return value
