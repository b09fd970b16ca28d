"""Cart serializers for read and write operations."""

from rest_framework import serializers

from .models import CartItem
from .selectors import cart_totals


class CartItemReadSerializer(serializers.ModelSerializer):
    variant_id = serializers.IntegerField(source="variant.id")
    sku = serializers.CharField(source="variant.sku")
    title = serializers.CharField(source="variant.product.title")
    stock_qty = serializers.IntegerField(source="variant.stock_qty")
    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "variant_id", "sku", "title", "quantity", "unit_price", "stock_qty", "line_total"]


class CartReadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    session_id = serializers.CharField(allow_null=True)
    items = CartItemReadSerializer(many=True)
    item_count = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)

    @classmethod
    def from_cart(cls, *, cart):
        totals = cart_totals(cart=cart)
        return cls(
            {
                "id": cart.id,
                "session_id": cart.session_id,
                "items": list(cart.items.select_related("variant", "variant__product").all()),
                "item_count": totals["item_count"],
                "subtotal": totals["subtotal"],
            }
        )


class AddItemSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateItemQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class MergeCartSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=64)
