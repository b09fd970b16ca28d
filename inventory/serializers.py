"""Serializers for the inventory ledger (read) and manual adjustments (write)."""

from rest_framework import serializers

from .models import InventoryMovement


class InventoryMovementSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="variant.sku", read_only=True)
    order_code = serializers.CharField(source="order.order_code", read_only=True, default=None)

    class Meta:
        model = InventoryMovement
        fields = [
            "id",
            "variant",
            "sku",
            "movement_type",
            "quantity",
            "note",
            "reference",
            "order",
            "order_code",
            "created_at",
        ]
        read_only_fields = fields


class StockAdjustmentSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField(min_value=1)
    delta = serializers.IntegerField()
    note = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("Adjustment must be non-zero.")
        return value
